"""
Claim Reward Handler.
POST /rewards/claim
Body: { "cost": 50 }
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
    member_id = get_user_sub(event)
    if not member_id:
        return unauthorized()

    cost = parse_body(event).get('cost')
    if isinstance(cost, bool) or not isinstance(cost, int):
        return format_response(400, {'message': 'Missing or invalid cost'})

    try:
        member = get_engine().claim_reward(member_id, cost)
        return format_response(200, {
            'message': 'Reward claimed',
            'credits': member.credits,
            'tier': member.tier.value
        })

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error claiming reward for {member_id}: {e}")
        return server_error()
