"""
Member Stats Handler.
GET /members/me/stats
"""
from barterhub.auth import get_user_sub
from barterhub.engine import get_engine
from barterhub.errors import BarterError
from barterhub.ledger import next_tier_progress
from barterhub.logging import logger, log_event
from barterhub.utils import format_response, error_response, server_error, unauthorized


def handler(event, context):
    log_event(event)
    member_id = get_user_sub(event)
    if not member_id:
        return unauthorized()

    try:
        stats = get_engine().stats(member_id)
        body = stats.to_dict()
        body['tierProgress'] = next_tier_progress(stats.credits)
        return format_response(200, body)

    except BarterError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error getting stats for {member_id}: {e}")
        return server_error()
