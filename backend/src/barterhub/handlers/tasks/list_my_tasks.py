"""
List My Tasks Handler.
GET /tasks/mine?status=pending
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import (
    format_response, get_query_param, error_response, server_error, unauthorized,
)


def handler(event, context):
    log_event(event)
    member_id = get_user_sub(event)
    if not member_id:
        return unauthorized()

    status = get_query_param(event, 'status')

    try:
        tasks = get_engine().tasks_for(member_id)
        if status:
            tasks = [t for t in tasks if t.status.value == status]
        return format_response(200, {'tasks': [t.to_item() for t in tasks]})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing tasks: {e}")
        return server_error()
