"""
Review & settlement workflow for tasks.

    PENDING --submit(link)--> SUBMITTED
    SUBMITTED --approve(rating)--> APPROVED   (credit assignee, bump asset usage)
    SUBMITTED --reject(feedback)--> REJECTED
    REJECTED --submit(link)--> SUBMITTED
"""
from datetime import datetime
from typing import List, Optional

from .config import config
from .errors import (
    Forbidden, InvalidTransition, MemberNotFound, TaskNotFound, ValidationError,
)
from .ledger import AccountLedger
from .logging import logger
from .models import Member, RecordKind, Task, TaskStatus
from .registry import AssetRegistry
from .storage import Store, Write

SUBMITTABLE = (TaskStatus.PENDING, TaskStatus.REJECTED)


def validate_rating(rating: Optional[int]) -> int:
    """
    Resolve the approval rating.

    Args:
        rating: 1-5, or None to fall back to the configured default

    Returns:
        The rating to store
    """
    if rating is None:
        logger.warning(f"Approval without rating, defaulting to {config.DEFAULT_APPROVAL_RATING}")
        return config.DEFAULT_APPROVAL_RATING
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError('Rating must be an integer from 1 to 5')
    return rating


class ReviewWorkflow:

    def __init__(self, store: Store, ledger: AccountLedger, registry: AssetRegistry):
        self.store = store
        self.ledger = ledger
        self.registry = registry

    def get_task(self, task_id: str) -> Task:
        task = self.store.get(RecordKind.TASK, task_id)
        if task is None:
            raise TaskNotFound(f"Task {task_id} not found")
        return task

    def submit_content(self, task_id: str, link: str, now: datetime,
                       member_id: str = None) -> Task:
        """
        Attach a content link and move the task to SUBMITTED.

        Also stamps the assignee's lastTaskSubmission, which the penalty
        monitor reads on their next session.
        """
        task = self.get_task(task_id)

        if member_id is not None and member_id != task.assignee_id:
            raise Forbidden('Only the assignee can submit content for this task')
        if task.status not in SUBMITTABLE:
            raise InvalidTransition(f"Cannot submit a task in status '{task.status.value}'")

        link = (link or '').strip()
        if not link:
            raise ValidationError('Content link is required')

        assignee: Optional[Member] = self.store.get(RecordKind.MEMBER, task.assignee_id)
        if assignee is None:
            raise MemberNotFound(f"Member {task.assignee_id} not found")

        previous_status = task.status
        task.status = TaskStatus.SUBMITTED
        task.content_link = link
        task.submitted_at = now
        assignee.last_task_submission = now

        self.store.atomic_commit([
            Write(task, expected_status=previous_status.value),
            Write(assignee),
        ])

        logger.info(f"Task {task.task_code} submitted by {task.assignee_id}")
        return task

    def review(self, task_id: str, approved: bool, now: datetime,
               feedback: str = None, rating: int = None, reviewer: Member = None) -> Task:
        """
        Approve or reject a SUBMITTED task.

        Approval settles in one atomic commit: task -> APPROVED, assignee
        credited, asset usage incremented. Rejection only touches the task.

        Args:
            task_id: Task to review
            approved: Decision
            now: Review time
            feedback: Rejection note (a default is used when empty)
            rating: 1-5 on approval
            reviewer: Acting member; must own the asset unless admin.
                None skips the check (trusted internal caller).

        Returns:
            The updated Task
        """
        task = self.get_task(task_id)
        if task.status != TaskStatus.SUBMITTED:
            raise InvalidTransition(f"Cannot review a task in status '{task.status.value}'")

        asset = self.store.get(RecordKind.ASSET, task.asset_id)
        if reviewer is not None and not reviewer.is_admin:
            if asset is None or asset.owner_id != reviewer.member_id:
                raise Forbidden('Only the asset owner can review this task')

        if not approved:
            task.status = TaskStatus.REJECTED
            task.feedback = (feedback or '').strip() or config.DEFAULT_REJECTION_FEEDBACK
            self.store.atomic_commit([Write(task, expected_status=TaskStatus.SUBMITTED.value)])
            logger.info(f"Task {task.task_code} rejected: {task.feedback}")
            return task

        task.rating = validate_rating(rating)

        assignee = self.store.get(RecordKind.MEMBER, task.assignee_id)
        if assignee is None:
            raise MemberNotFound(f"Member {task.assignee_id} not found")

        task.status = TaskStatus.APPROVED
        task.completed_at = now
        self.ledger.apply_credit(assignee, config.APPROVAL_CREDIT)

        writes = [
            Write(task, expected_status=TaskStatus.SUBMITTED.value),
            Write(assignee),
        ]
        if asset is not None:
            self.registry.increment_usage(asset)
            writes.append(Write(asset))
        else:
            logger.warning(f"Asset {task.asset_id} was removed, usage not counted for {task.task_code}")

        self.store.atomic_commit(writes)

        logger.info(
            f"Task {task.task_code} approved (rating={task.rating}): "
            f"{task.assignee_id} +{config.APPROVAL_CREDIT} credits, balance={assignee.credits}"
        )
        return task

    def pending_approvals_for(self, owner_id: str) -> List[Task]:
        """SUBMITTED tasks made for assets owned by `owner_id`."""
        owned_ids = {a.asset_id for a in self.registry.assets_of(owner_id)}
        return [
            t for t in self.store.load_all(RecordKind.TASK)
            if t.asset_id in owned_ids and t.status == TaskStatus.SUBMITTED
        ]
