"""
Reset Credential Handler.
POST /auth/reset
Body: { "username": "...", "phoneNumber": "...", "newCredential": "..." }
"""
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, parse_body, error_response, server_error


def handler(event, context):
    log_event(event)
    body = parse_body(event)

    try:
        get_engine().reset_credential(
            body.get('username'),
            body.get('phoneNumber', ''),
            body.get('newCredential'),
        )
        return format_response(200, {'message': 'Credential updated'})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error resetting credential: {e}")
        return server_error()
