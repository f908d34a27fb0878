"""
Delete Asset Handler.
DELETE /assets/{assetId}
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import (
    format_response, get_path_param, error_response, server_error, unauthorized,
)


def handler(event, context):
    log_event(event)
    actor_id = get_user_sub(event)
    if not actor_id:
        return unauthorized()

    asset_id = get_path_param(event, 'assetId')
    if not asset_id:
        return format_response(400, {'message': 'Missing assetId'})

    try:
        get_engine().delete_asset(actor_id, asset_id)
        return format_response(200, {'message': 'Asset removed from the pool'})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting asset {asset_id}: {e}")
        return server_error()
