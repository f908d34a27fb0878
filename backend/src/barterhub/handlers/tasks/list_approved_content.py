"""
List Approved Content Handler.
GET /content
Gallery of every approved task, newest first.
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, error_response, server_error, unauthorized


def handler(event, context):
    log_event(event)
    if not get_user_sub(event):
        return unauthorized()

    try:
        content = get_engine().approved_content()
        return format_response(200, {'content': content, 'count': len(content)})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing approved content: {e}")
        return server_error()
