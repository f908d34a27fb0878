"""
Register Handler.
POST /auth/register
Called with the Cognito token of the freshly signed-up user; the token sub
becomes the member id.
Body: { "name": "...", "username": "...", "credential": "...", "phoneNumber": "...", "email": "..." }
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, parse_body, error_response, server_error


def handler(event, context):
    log_event(event)
    body = parse_body(event)

    try:
        member = get_engine().register_member(
            name=body.get('name', ''),
            username=body.get('username'),
            credential=body.get('credential'),
            phone_number=body.get('phoneNumber', ''),
            email=body.get('email', ''),
            member_id=get_user_sub(event),
        )
        return format_response(201, {
            'message': 'Registration successful',
            'member': member.to_public_dict()
        })

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error registering member: {e}")
        return server_error()
