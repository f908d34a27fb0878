"""
Authentication utilities for extracting member identity from Cognito tokens.
"""
from typing import Optional


def get_user_sub(event: dict) -> Optional[str]:
    """
    Extract user sub (member id) from Cognito authorizer claims.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        User sub string or None if not authenticated
    """
    try:
        return event['requestContext']['authorizer']['claims']['sub']
    except (KeyError, TypeError):
        return None
