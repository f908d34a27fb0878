"""
Assign Task Handler.
POST /tasks/assign

Picks a random eligible asset from the pool for the calling member.
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, error_response, server_error, unauthorized


def handler(event, context):
    log_event(event)
    member_id = get_user_sub(event)
    if not member_id:
        return unauthorized()

    try:
        task = get_engine().assign(member_id)

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error assigning task: {e}")
        return server_error()

    if task is None:
        return format_response(200, {
            'message': 'No asset available right now. Try again later.',
            'task': None
        })

    return format_response(201, {
        'message': 'Task assigned successfully',
        'task': task.to_item()
    })
