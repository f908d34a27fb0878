"""
Admin Update Member Handler.
PATCH /admin/members/{memberId}
Body: any of { "displayName", "username", "phoneNumber", "email" }
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
    admin_id = get_user_sub(event)
    if not admin_id:
        return unauthorized()

    member_id = get_path_param(event, 'memberId')
    if not member_id:
        return format_response(400, {'message': 'Missing memberId'})

    try:
        member = get_engine().update_member(admin_id, member_id, parse_body(event))
        return format_response(200, {'member': member.to_public_dict()})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating member {member_id}: {e}")
        return server_error()
