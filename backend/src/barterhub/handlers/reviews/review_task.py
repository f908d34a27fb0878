"""
Review Task Handler.
POST /tasks/{taskId}/review
Body: { "approved": true, "rating": 4 } or { "approved": false, "feedback": "..." }

Approval settles the task: the creator gets credits and the asset's usage
count goes up, in one transaction.
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
    reviewer_id = get_user_sub(event)
    if not reviewer_id:
        return unauthorized()

    task_id = get_path_param(event, 'taskId')
    body = parse_body(event)
    approved = body.get('approved')

    if not task_id or not isinstance(approved, bool):
        return format_response(400, {'message': 'Missing taskId or approved flag'})

    try:
        task = get_engine().review(
            task_id,
            approved,
            feedback=body.get('feedback'),
            rating=body.get('rating'),
            reviewer_id=reviewer_id,
        )
        return format_response(200, {
            'message': 'Task approved' if approved else 'Task sent back for revision',
            'task': task.to_item()
        })

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error reviewing task {task_id}: {e}")
        return server_error()
