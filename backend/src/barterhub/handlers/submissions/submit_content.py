"""
Submit Content Handler.
POST /tasks/{taskId}/submit
Body: { "contentLink": "https://..." }
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import (
    format_response, parse_body, get_path_param, error_response, server_error, unauthorized,
)


def handler(event, context):
    log_event(event)
    member_id = get_user_sub(event)
    if not member_id:
        return unauthorized()

    task_id = get_path_param(event, 'taskId')
    link = parse_body(event).get('contentLink')

    if not task_id or not link:
        return format_response(400, {'message': 'Missing taskId or contentLink'})

    try:
        task = get_engine().submit_content(task_id, link, member_id=member_id)
        return format_response(200, {
            'message': 'Content submitted successfully',
            'task': task.to_item()
        })

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error submitting content for {task_id}: {e}")
        return server_error()
