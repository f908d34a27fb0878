"""
Logging for the barter hub.

Engine modules log ledger moves, asset status changes, assignments and
settlements on the shared 'barterhub' logger; handlers log the incoming
API Gateway event through log_event with member contact details removed.
"""
import logging
import json

logger = logging.getLogger('barterhub')
logger.setLevel(logging.INFO)

# Lambda reuses containers; attach the handler only once
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)

# Cognito claims kept in logs; email, phone_number and the rest are dropped
LOGGED_CLAIMS = ('sub', 'cognito:username')


def _redact(event: dict) -> dict:
    # body carries credentials and phone numbers on the auth routes
    safe_event = {k: v for k, v in event.items() if k not in ['body', 'headers']}
    claims = (safe_event.get('requestContext') or {}).get('authorizer', {}).get('claims')
    if isinstance(claims, dict):
        context = dict(safe_event['requestContext'])
        context['authorizer'] = dict(context['authorizer'])
        context['authorizer']['claims'] = {
            k: v for k, v in claims.items() if k in LOGGED_CLAIMS
        }
        safe_event['requestContext'] = context
    return safe_event


def log_event(event: dict) -> None:
    """Log an incoming Lambda event without body, headers or contact claims."""
    try:
        logger.info(f"Lambda event: {json.dumps(_redact(event), default=str)}")
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Could not log event: {e}")
