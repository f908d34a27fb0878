"""
Account ledger - credit balances and tier calculation.
"""
from typing import Optional

from .errors import InsufficientCredits, MemberNotFound, ValidationError
from .logging import logger
from .models import Member, MemberTier, RecordKind
from .storage import Store


# Tier thresholds, highest first
TIER_THRESHOLDS = [
    (1000, MemberTier.TOP_TIER),
    (500, MemberTier.GOLD),
    (200, MemberTier.SILVER),
    (0, MemberTier.BRONZE),
]


def calculate_tier(credits: int) -> MemberTier:
    """
    Calculate member tier from credit balance.

    Rules:
    - TOP_TIER: credits >= 1000
    - GOLD: credits >= 500
    - SILVER: credits >= 200
    - BRONZE: default

    Args:
        credits: Current balance (never negative)

    Returns:
        MemberTier for that balance
    """
    for minimum, tier in TIER_THRESHOLDS:
        if credits >= minimum:
            return tier
    return MemberTier.BRONZE


def next_tier_progress(credits: int) -> dict:
    """
    Get progress information toward the next tier.

    Args:
        credits: Current balance

    Returns:
        Dict with current tier, next tier and credits still needed
    """
    current = calculate_tier(credits)
    ascending = list(reversed(TIER_THRESHOLDS))
    for minimum, tier in ascending:
        if minimum > credits:
            return {
                'current_tier': current.value,
                'next_tier': tier.value,
                'credits_needed': minimum - credits,
            }
    return {'current_tier': current.value, 'next_tier': None, 'credits_needed': 0}


class AccountLedger:
    """
    Single source of truth for member credits.

    The apply_* methods mutate a Member in memory so callers can fold the
    change into a larger atomic commit. credit/debit are the standalone
    versions that load and persist the member themselves.
    """

    def __init__(self, store: Store):
        self.store = store

    def apply_credit(self, member: Member, amount: int) -> Member:
        if amount <= 0:
            raise ValidationError('Credit amount must be positive')
        member.credits += amount
        self._refresh_tier(member)
        return member

    def apply_debit(self, member: Member, amount: int) -> int:
        """
        Subtract up to `amount`, never going below zero.

        Returns:
            Credits actually removed
        """
        if amount < 0:
            raise ValidationError('Debit amount cannot be negative')
        removed = min(amount, member.credits)
        member.credits -= removed
        self._refresh_tier(member)
        return removed

    def apply_redeem(self, member: Member, cost: int) -> Member:
        """Spend credits on a reward. Unlike a debit this never clamps."""
        if cost <= 0:
            raise ValidationError('Reward cost must be positive')
        if member.credits < cost:
            raise InsufficientCredits(
                f"Reward costs {cost} credits but only {member.credits} available"
            )
        member.credits -= cost
        self._refresh_tier(member)
        return member

    def credit(self, member_id: str, amount: int) -> Member:
        member = self._load(member_id)
        self.apply_credit(member, amount)
        self.store.upsert(member)
        logger.info(f"Credited {amount} to {member_id}, balance={member.credits}")
        return member

    def debit(self, member_id: str, amount: int) -> Member:
        member = self._load(member_id)
        removed = self.apply_debit(member, amount)
        self.store.upsert(member)
        logger.info(f"Debited {removed} from {member_id}, balance={member.credits}")
        return member

    def _load(self, member_id: str) -> Member:
        member: Optional[Member] = self.store.get(RecordKind.MEMBER, member_id)
        if member is None:
            raise MemberNotFound(f"Member {member_id} not found")
        return member

    def _refresh_tier(self, member: Member) -> None:
        new_tier = calculate_tier(member.credits)
        if new_tier != member.tier:
            logger.info(f"Member {member.member_id} tier: {member.tier.value} -> {new_tier.value}")
        member.tier = new_tier
