"""
Admin List Members Handler.
GET /admin/members
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, error_response, server_error, unauthorized


def handler(event, context):
    log_event(event)
    admin_id = get_user_sub(event)
    if not admin_id:
        return unauthorized()

    try:
        engine = get_engine()
        now = engine.clock()
        members = engine.list_members(admin_id)
        return format_response(200, {'members': [m.to_public_dict(now) for m in members]})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing members: {e}")
        return server_error()
