"""
Submit Asset Handler.
POST /assets
Body: { "title": "...", "artist": "...", "audioUrl": "..." }
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import (
    format_response, parse_body, error_response, server_error, unauthorized,
)


def handler(event, context):
    log_event(event)
    owner_id = get_user_sub(event)
    if not owner_id:
        return unauthorized()

    body = parse_body(event)

    try:
        asset = get_engine().submit_asset(
            owner_id,
            title=body.get('title'),
            artist=body.get('artist', ''),
            audio_url=body.get('audioUrl'),
        )
        return format_response(201, {
            'message': 'Asset added to the pool',
            'asset': asset.to_item()
        })

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error submitting asset: {e}")
        return server_error()
