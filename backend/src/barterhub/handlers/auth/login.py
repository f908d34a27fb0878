"""
Login Handler.
POST /auth/login
Body: { "username": "...", "credential": "..." }

Starting a session runs the inactivity penalty and the asset lifecycle
recompute for the member.
"""
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, parse_body, error_response, server_error


def handler(event, context):
    log_event(event)
    body = parse_body(event)
    username = body.get('username')
    credential = body.get('credential')

    if not username or not credential:
        return format_response(400, {'message': 'Missing username or credential'})

    try:
        engine = get_engine()
        member = engine.login(username, credential)
        return format_response(200, {'member': member.to_public_dict(engine.clock())})

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error during login: {e}")
        return server_error()
