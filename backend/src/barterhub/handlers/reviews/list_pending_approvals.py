"""
List Pending Approvals Handler.
GET /reviews/pending

Submitted content made for the calling member's assets.
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, error_response, server_error, unauthorized


def handler(event, context):
    log_event(event)
    owner_id = get_user_sub(event)
    if not owner_id:
        return unauthorized()

    try:
        tasks = get_engine().pending_approvals_for(owner_id)
        return format_response(200, {'tasks': [t.to_item() for t in tasks]})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing pending approvals: {e}")
        return server_error()
