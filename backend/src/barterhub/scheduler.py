"""
Assignment scheduler - hands a requesting member a random eligible asset.

The daily quota is backed by a per-member, per-day Counter committed together
with the new task. Two containers assigning to the same member from the same
read cannot both commit; the loser re-reads and is refused by the quota.
"""
import random
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Set

from .config import config
from .errors import ConcurrentModification, DailyQuotaExceeded
from .logging import logger
from .models import (
    Asset, Counter, RecordKind, Task, TaskStatus, TASK_SEQUENCE_ID, daily_quota_id,
)
from .registry import is_eligible
from .storage import Store, Write
from .utils import same_calendar_day


def tasks_created_today(tasks: List[Task], requester_id: str, now: datetime) -> List[Task]:
    """Tasks assigned to `requester_id` on the current calendar day."""
    return [
        t for t in tasks
        if t.assignee_id == requester_id
        and t.created_at is not None
        and same_calendar_day(t.created_at, now)
    ]


def eligible_pool(assets: List[Asset], requester_id: str, used_today: Iterable[str]) -> List[Asset]:
    """
    Assets the requester may be given right now.

    Excludes the requester's own assets, anything not ACTIVE, and assets
    already handed to them today (whatever became of that earlier task).
    """
    used_today = set(used_today)
    return [
        a for a in assets
        if a.owner_id != requester_id
        and is_eligible(a)
        and a.asset_id not in used_today
    ]


def next_task_code(number: int) -> str:
    return f"T-{number:04d}"


class AssignmentScheduler:

    def __init__(self, store: Store, rng: random.Random = None):
        self.store = store
        self.rng = rng or random.Random()

    def assign(self, requester_id: str, now: datetime) -> Optional[Task]:
        """
        Create a PENDING task for `requester_id` against a random eligible asset.

        A commit that loses a race with another writer is retried from a
        fresh read, up to ASSIGN_ATTEMPTS times.

        Args:
            requester_id: Member asking for work (must already be resolved)
            now: Current time

        Returns:
            The persisted Task, or None when nothing is available

        Raises:
            DailyQuotaExceeded: The member already received the daily maximum
            ConcurrentModification: Every attempt lost a race
        """
        attempts = max(1, config.ASSIGN_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            try:
                return self._assign_once(requester_id, now)
            except ConcurrentModification:
                if attempt == attempts:
                    logger.warning(f"Assignment for {requester_id} kept conflicting, giving up")
                    raise
                logger.info(
                    f"Assignment for {requester_id} conflicted with another writer, "
                    f"retrying ({attempt}/{attempts})"
                )

    def _assign_once(self, requester_id: str, now: datetime) -> Optional[Task]:
        tasks = self.store.load_all(RecordKind.TASK)
        todays_tasks = tasks_created_today(tasks, requester_id, now)

        quota_id = daily_quota_id(requester_id, now)
        quota = self.store.get(RecordKind.COUNTER, quota_id) or Counter(quota_id)
        sequence = self.store.get(RecordKind.COUNTER, TASK_SEQUENCE_ID) or Counter(TASK_SEQUENCE_ID)

        assigned_today = max(len(todays_tasks), quota.count)
        if assigned_today >= config.DAILY_TASK_QUOTA:
            logger.warning(f"Member {requester_id} hit daily quota ({assigned_today} tasks)")
            raise DailyQuotaExceeded(
                f"Daily limit reached (max {config.DAILY_TASK_QUOTA} tasks per day)"
            )

        used_today: Set[str] = {t.asset_id for t in todays_tasks} | set(quota.keys)
        pool = eligible_pool(self.store.load_all(RecordKind.ASSET), requester_id, used_today)
        if not pool:
            logger.info(f"No eligible asset for {requester_id}")
            return None

        # Sort for a stable pool order so a seeded rng is reproducible
        pool.sort(key=lambda a: a.asset_id)
        asset = self.rng.choice(pool)

        number = max(sequence.count, len(tasks)) + 1
        task = Task(
            task_id=str(uuid.uuid4()),
            task_code=next_task_code(number),
            assignee_id=requester_id,
            asset_id=asset.asset_id,
            status=TaskStatus.PENDING,
            created_at=now,
        )

        self.store.atomic_commit([
            Write(task),
            Write(Counter(quota_id, assigned_today + 1, sorted(used_today | {asset.asset_id})),
                  expected_count=quota.count),
            Write(Counter(TASK_SEQUENCE_ID, number), expected_count=sequence.count),
        ])

        logger.info(
            f"Assigned {task.task_code} ({task.task_id}): asset {asset.asset_code} "
            f"to {requester_id}, {assigned_today + 1}/{config.DAILY_TASK_QUOTA} today"
        )
        return task
