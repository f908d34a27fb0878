"""
Inactivity penalty monitor.

Runs at the start of every creator session. A member who has not submitted
content within the grace period loses credits, at most WEEKLY_PENALTY_CAP
per rolling week.
"""
from datetime import datetime, timedelta

from .config import config
from .ledger import AccountLedger
from .logging import logger
from .models import Member


def penalty_due(member: Member, now: datetime) -> bool:
    """True if the member has not submitted content within the grace period."""
    if member.last_task_submission is None:
        return True
    return now - member.last_task_submission > timedelta(hours=config.SUBMISSION_GRACE_HOURS)


class PenaltyMonitor:

    def __init__(self, ledger: AccountLedger):
        self.ledger = ledger

    def evaluate(self, member: Member, now: datetime) -> int:
        """
        Apply the weekly reset and, if due, one penalty to `member` in place.

        Args:
            member: Member starting a session (not yet persisted)
            now: Session start

        Returns:
            Credits deducted (0 if none)
        """
        if member.is_admin:
            return 0

        window = timedelta(days=config.PENALTY_WINDOW_DAYS)
        if member.last_penalty_date is not None and now - member.last_penalty_date > window:
            member.penalty_points_week = 0

        if not penalty_due(member, now):
            return 0
        if member.penalty_points_week >= config.WEEKLY_PENALTY_CAP:
            logger.info(f"Member {member.member_id} inactive but weekly penalty cap reached")
            return 0

        deduction = min(config.PENALTY_PER_EVENT,
                        config.WEEKLY_PENALTY_CAP - member.penalty_points_week)
        if deduction <= 0:
            return 0

        removed = self.ledger.apply_debit(member, deduction)
        member.penalty_points_week += deduction
        member.last_penalty_date = now

        logger.info(
            f"Penalty for {member.member_id}: -{removed} credits "
            f"({member.penalty_points_week}/{config.WEEKLY_PENALTY_CAP} this week)"
        )
        return removed
