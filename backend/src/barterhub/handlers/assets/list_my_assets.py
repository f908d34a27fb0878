"""
List My Assets Handler.
GET /assets/mine
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
        assets = get_engine().assets_of(owner_id)
        return format_response(200, {'assets': [a.to_item() for a in assets]})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing assets: {e}")
        return server_error()
