"""
Common utility functions for the engine and Lambda handlers.
"""
import json
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal types from DynamoDB."""

    def default(self, o):
        if isinstance(o, Decimal):
            # Convert to int if it's a whole number, otherwise float
            if o % 1 == 0:
                return int(o)
            return float(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def format_response(
    status_code: int,
    body: Any,
    headers: Dict[str, str] = None
) -> Dict[str, Any]:
    """
    Format a standard API Gateway response with CORS headers.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON serialized)
        headers: Additional headers to include

    Returns:
        API Gateway response dict
    """
    default_headers = {
        'Access-Control-Allow-Origin': '*',
        'Access-Control-Allow-Credentials': True,
        'Content-Type': 'application/json'
    }

    if headers:
        default_headers.update(headers)

    return {
        'statusCode': status_code,
        'headers': default_headers,
        'body': json.dumps(body, cls=DecimalEncoder)
    }


def parse_body(event: dict) -> dict:
    """
    Safely parse JSON body from API Gateway event.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        Parsed body dict or empty dict if invalid
    """
    try:
        body = event.get('body', '{}')
        if isinstance(body, str):
            return json.loads(body)
        return body or {}
    except (json.JSONDecodeError, TypeError):
        return {}


def get_path_param(event: dict, param_name: str) -> str:
    """Extract path parameter from event."""
    try:
        return event['pathParameters'][param_name]
    except (KeyError, TypeError):
        return None


def get_query_param(event: dict, param_name: str, default: str = None) -> str:
    """Extract query string parameter from event."""
    try:
        params = event.get('queryStringParameters') or {}
        return params.get(param_name, default)
    except (KeyError, TypeError):
        return default


def local_now() -> datetime:
    """Timezone-aware wall-clock time in the host's local zone."""
    return datetime.now().astimezone()


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for storage. None stays None."""
    if value is None:
        return None
    return value.isoformat()


def from_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO-8601 timestamp. Empty values become None."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def same_calendar_day(moment: datetime, now: datetime) -> bool:
    """
    Check whether `moment` falls on the same wall-clock date as `now`.

    The comparison is made in the timezone of `now`, so a task created at
    23:30 yesterday is never counted as today's even if stored in UTC.
    """
    if now.tzinfo is not None and moment.tzinfo is not None:
        moment = moment.astimezone(now.tzinfo)
    return moment.date() == now.date()


def digits_only(text: str) -> str:
    """
    Strip everything but digits, for phone number comparison.

    Args:
        text: Raw phone number as typed

    Returns:
        Digit string ('' for empty input)
    """
    if not text:
        return ''
    return re.sub(r'\D', '', str(text))


def error_response(error) -> Dict[str, Any]:
    """Turn a BarterError into an API Gateway response."""
    return format_response(error.status_code, error.to_dict())


def unauthorized() -> Dict[str, Any]:
    return format_response(401, {'error': 'Unauthorized', 'message': 'Missing member identity'})


def server_error() -> Dict[str, Any]:
    return format_response(500, {'message': 'Internal Server Error'})
