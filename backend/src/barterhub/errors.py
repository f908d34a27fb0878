"""
Error taxonomy for the barter engine.

Every engine failure is raised as a BarterError subclass before any write
is committed. Handlers turn them into API responses using status_code.
"""
from typing import Any, Dict


class BarterError(Exception):
    """Base class for all engine errors."""

    status_code = 400
    code = 'BarterError'

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.code, 'message': self.message}


class NotFound(BarterError):
    """Referenced entity does not exist."""
    status_code = 404
    code = 'NotFound'


class MemberNotFound(NotFound):
    """Member not found."""
    code = 'MemberNotFound'


class OwnerNotFound(MemberNotFound):
    """Asset owner not found."""
    code = 'OwnerNotFound'


class AssetNotFound(NotFound):
    """Asset not found."""
    code = 'AssetNotFound'


class TaskNotFound(NotFound):
    """Task not found."""
    code = 'TaskNotFound'


class InvalidCredential(BarterError):
    """Invalid username or credential."""
    status_code = 401
    code = 'InvalidCredential'


class Forbidden(BarterError):
    """Not allowed to perform this operation."""
    status_code = 403
    code = 'Forbidden'


class DailyQuotaExceeded(BarterError):
    """Daily assignment limit reached. Try again tomorrow."""
    status_code = 429
    code = 'DailyQuotaExceeded'


class DuplicateUsername(BarterError):
    """Username is already taken."""
    status_code = 409
    code = 'DuplicateUsername'


class PhoneMismatch(BarterError):
    """Phone number does not match the account."""
    code = 'PhoneMismatch'


class InsufficientCredits(BarterError):
    """Not enough credits."""
    code = 'InsufficientCredits'


class ValidationError(BarterError):
    """Invalid input."""
    code = 'ValidationError'


class InvalidTransition(BarterError):
    """Operation not allowed in the current status."""
    status_code = 409
    code = 'InvalidTransition'


class ConcurrentModification(BarterError):
    """Record was modified concurrently. Reload and retry."""
    status_code = 409
    code = 'ConcurrentModification'


class AlreadyRegistered(BarterError):
    """This identity already has a member account."""
    status_code = 409
    code = 'AlreadyRegistered'
