"""
Barter engine - the operations the API layer calls.

Wires the ledger, asset registry, scheduler, review workflow and penalty
monitor around one store, one clock and one random source. Every public
operation runs under a single engine-wide lock, so quota counting and
settlement are serialized within a process; the store's status guards
cover concurrent writers across processes.
"""
import functools
import hmac
import random
import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .config import config
from .errors import (
    AlreadyRegistered, DuplicateUsername, Forbidden, InvalidCredential, MemberNotFound,
    OwnerNotFound, PhoneMismatch, ValidationError,
)
from .ledger import AccountLedger, calculate_tier
from .logging import logger
from .models import (
    Asset, AssetPatch, AssetStatus, Member, MemberPatch, MemberRole,
    MemberStats, RecordKind, Task, TaskStatus,
)
from .penalty import PenaltyMonitor
from .registry import AssetRegistry
from .review import ReviewWorkflow
from .scheduler import AssignmentScheduler
from .storage import Store, Write
from .utils import digits_only, local_now


def _synchronized(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class BarterEngine:
    """
    Args:
        store: Persistence collaborator
        clock: Returns the current time (aware datetime); defaults to local now
        rng: Random source for asset selection; pass a seeded Random in tests
    """

    def __init__(self, store: Store, clock: Callable[[], datetime] = None,
                 rng: random.Random = None):
        self.store = store
        self.clock = clock or local_now
        self._lock = threading.RLock()

        self.ledger = AccountLedger(store)
        self.registry = AssetRegistry(store)
        self.scheduler = AssignmentScheduler(store, rng)
        self.workflow = ReviewWorkflow(store, self.ledger, self.registry)
        self.penalties = PenaltyMonitor(self.ledger)

    # --- Members ---

    def get_member(self, member_id: str) -> Member:
        member = self.store.get(RecordKind.MEMBER, member_id)
        if member is None:
            raise MemberNotFound(f"Member {member_id} not found")
        return member

    def find_by_username(self, username: str) -> Optional[Member]:
        for member in self.store.load_all(RecordKind.MEMBER):
            if member.username == username:
                return member
        return None

    def _require_admin(self, actor_id: str) -> Member:
        actor = self.get_member(actor_id)
        if not actor.is_admin:
            raise Forbidden('Admin role required')
        return actor

    @_synchronized
    def login(self, username: str, credential: str) -> Member:
        """
        Check credentials and run session-start effects: inactivity penalty
        first, then asset lifecycle recompute, then refresh lastActivity.
        """
        member = self.find_by_username(username)
        if member is None or not member.credential or not hmac.compare_digest(
                str(member.credential), str(credential or '')):
            logger.warning(f"Failed login for '{username}'")
            raise InvalidCredential('Invalid username or credential')

        now = self.clock()
        self.penalties.evaluate(member, now)
        changed_assets = self.registry.recompute_for_owner(member, now)
        member.last_activity = now

        self.store.atomic_commit([Write(member)] + [Write(a) for a in changed_assets])

        logger.info(f"Member {member.member_code} logged in, credits={member.credits}")
        return member

    @_synchronized
    def register_member(self, name: str, username: str, credential: str,
                        phone_number: str = '', email: str = '',
                        member_id: str = None) -> Member:
        """
        Self-service signup for a creator account.

        Args:
            member_id: Identity to register under. Behind Cognito this is the
                caller's `sub` claim, so later authenticated requests resolve
                to this member. A fresh id is generated when omitted.
        """
        if not username or not credential:
            raise ValidationError('Username and credential are required')
        if member_id and self.store.get(RecordKind.MEMBER, member_id) is not None:
            raise AlreadyRegistered(f"Member {member_id} is already registered")
        if self.find_by_username(username) is not None:
            raise DuplicateUsername(f"Username '{username}' is already taken")

        now = self.clock()
        creators = [m for m in self.store.load_all(RecordKind.MEMBER)
                    if m.role == MemberRole.CREATOR]
        member = Member(
            member_id=member_id or str(uuid.uuid4()),
            member_code=f"U-{len(creators) + 1:04d}",
            username=username,
            display_name=name or username,
            role=MemberRole.CREATOR,
            credits=config.SIGNUP_CREDITS,
            tier=calculate_tier(config.SIGNUP_CREDITS),
            last_activity=now,
            # a new member starts with a clean submission record
            last_task_submission=now,
            credential=credential,
            phone_number=phone_number or '',
            email=email or '',
            created_at=now,
        )
        self.store.upsert(member)
        logger.info(f"Registered {member.member_code} ({username})")
        return member

    @_synchronized
    def create_admin(self, username: str, credential: str, name: str = '') -> Member:
        """Bootstrap an administrator account (A-0000, A-0001, ...)."""
        if self.find_by_username(username) is not None:
            raise DuplicateUsername(f"Username '{username}' is already taken")

        now = self.clock()
        admins = [m for m in self.store.load_all(RecordKind.MEMBER) if m.is_admin]
        member = Member(
            member_id=str(uuid.uuid4()),
            member_code=f"A-{len(admins):04d}",
            username=username,
            display_name=name or username,
            role=MemberRole.ADMIN,
            last_activity=now,
            last_task_submission=now,
            credential=credential,
            created_at=now,
        )
        self.store.upsert(member)
        return member

    @_synchronized
    def reset_credential(self, username: str, phone_number: str, new_credential: str) -> Member:
        member = self.find_by_username(username)
        if member is None:
            raise MemberNotFound(f"Username '{username}' not found")
        if not new_credential:
            raise ValidationError('New credential is required')
        if digits_only(phone_number) != digits_only(member.phone_number):
            logger.warning(f"Credential reset for '{username}' with wrong phone number")
            raise PhoneMismatch('Phone number does not match this account')

        member.credential = new_credential
        self.store.upsert(member)
        logger.info(f"Credential reset for {member.member_code}")
        return member

    @_synchronized
    def update_member(self, admin_id: str, member_id: str, patch: Dict) -> Member:
        self._require_admin(admin_id)
        member = self.get_member(member_id)
        changes = MemberPatch.from_dict(patch)

        if changes.username and changes.username != member.username:
            if self.find_by_username(changes.username) is not None:
                raise DuplicateUsername(f"Username '{changes.username}' is already taken")

        changes.apply_to(member)
        self.store.upsert(member)
        logger.info(f"Admin {admin_id} updated {member.member_code}: {sorted(changes.changes())}")
        return member

    @_synchronized
    def list_members(self, admin_id: str) -> List[Member]:
        self._require_admin(admin_id)
        return sorted(self.store.load_all(RecordKind.MEMBER), key=lambda m: m.member_code)

    @_synchronized
    def claim_reward(self, member_id: str, cost: int) -> Member:
        """Spend credits on a reward."""
        member = self.get_member(member_id)
        self.ledger.apply_redeem(member, cost)
        self.store.upsert(member)
        logger.info(f"Member {member.member_code} claimed a reward for {cost}, balance={member.credits}")
        return member

    # --- Assets ---

    @_synchronized
    def submit_asset(self, owner_id: str, title: str, artist: str = '',
                     audio_url: str = '') -> Asset:
        owner = self.store.get(RecordKind.MEMBER, owner_id)
        if owner is None:
            raise OwnerNotFound(f"Member {owner_id} not found")

        asset = self.registry.new_asset(owner, title, artist, audio_url, self.clock())
        self.store.upsert(asset)
        logger.info(f"Asset {asset.asset_code} added to pool by {owner.member_code}")
        return asset

    @_synchronized
    def assets_of(self, owner_id: str) -> List[Asset]:
        return sorted(self.registry.assets_of(owner_id), key=lambda a: a.asset_code)

    @_synchronized
    def update_asset(self, actor_id: str, asset_id: str, patch: Dict) -> Asset:
        """
        Edit asset metadata. The owner may only edit once the unlock date has
        passed; admins may edit at any time.
        """
        actor = self.get_member(actor_id)
        asset = self.registry.get(asset_id)
        changes = AssetPatch.from_dict(patch)

        if not actor.is_admin:
            if asset.owner_id != actor.member_id:
                raise Forbidden('Only the owner can edit this asset')
            if asset.unlock_date is not None and self.clock() <= asset.unlock_date:
                raise Forbidden('Asset is locked for editing until its unlock date')

        changes.apply_to(asset)
        self.store.upsert(asset)
        return asset

    @_synchronized
    def delete_asset(self, actor_id: str, asset_id: str) -> None:
        """Remove an asset from the pool. Tasks that used it are kept."""
        actor = self.get_member(actor_id)
        asset = self.registry.get(asset_id)
        if not actor.is_admin and asset.owner_id != actor.member_id:
            raise Forbidden('Only the owner can delete this asset')

        self.store.delete(RecordKind.ASSET, asset_id)
        logger.info(f"Asset {asset.asset_code} deleted by {actor.member_code}")

    # --- Tasks ---

    @_synchronized
    def assign(self, requester_id: str) -> Optional[Task]:
        self.get_member(requester_id)
        return self.scheduler.assign(requester_id, self.clock())

    @_synchronized
    def tasks_for(self, member_id: str) -> List[Task]:
        """Tasks assigned to `member_id`, newest first."""
        tasks = [t for t in self.store.load_all(RecordKind.TASK) if t.assignee_id == member_id]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    @_synchronized
    def list_tasks(self, admin_id: str) -> List[Task]:
        self._require_admin(admin_id)
        return sorted(self.store.load_all(RecordKind.TASK), key=lambda t: t.created_at)

    @_synchronized
    def approved_tasks(self) -> List[Task]:
        """Every APPROVED task, most recently completed first."""
        approved = [t for t in self.store.load_all(RecordKind.TASK)
                    if t.status == TaskStatus.APPROVED]
        return sorted(approved, key=lambda t: t.completed_at or t.created_at, reverse=True)

    @_synchronized
    def approved_content(self) -> List[Dict]:
        """
        Gallery of approved work: each approved task with the asset it
        promotes and the display names of its creator and the asset owner.
        Entries whose asset was deleted keep the task with `asset` None.
        """
        assets = {a.asset_id: a for a in self.registry.all_assets()}
        members = {m.member_id: m for m in self.store.load_all(RecordKind.MEMBER)}

        def display_name(member_id):
            member = members.get(member_id)
            return member.display_name if member else None

        gallery = []
        for task in self.approved_tasks():
            asset = assets.get(task.asset_id)
            gallery.append({
                'task': task.to_item(),
                'asset': asset.to_item() if asset else None,
                'creatorName': display_name(task.assignee_id),
                'ownerName': display_name(asset.owner_id) if asset else None,
            })
        return gallery

    @_synchronized
    def submit_content(self, task_id: str, link: str, member_id: str = None) -> Task:
        return self.workflow.submit_content(task_id, link, self.clock(), member_id=member_id)

    @_synchronized
    def review(self, task_id: str, approved: bool, feedback: str = None,
               rating: int = None, reviewer_id: str = None) -> Task:
        reviewer = self.get_member(reviewer_id) if reviewer_id is not None else None
        return self.workflow.review(
            task_id, approved, self.clock(),
            feedback=feedback, rating=rating, reviewer=reviewer,
        )

    @_synchronized
    def pending_approvals_for(self, owner_id: str) -> List[Task]:
        return self.workflow.pending_approvals_for(owner_id)

    # --- Stats ---

    @_synchronized
    def stats(self, member_id: str) -> MemberStats:
        """
        Dashboard figures. Debt counts one unit per deposited asset, paid off
        by any task this member got approved as a creator.
        """
        member = self.get_member(member_id)
        owned = self.registry.assets_of(member_id)
        approved = [
            t for t in self.store.load_all(RecordKind.TASK)
            if t.assignee_id == member_id and t.status == TaskStatus.APPROVED
        ]

        return MemberStats(
            credits=member.credits,
            debt=max(0, len(owned) - len(approved)),
            active_asset_count=len([a for a in owned if a.status != AssetStatus.INACTIVE]),
            pending_review_count=len(self.workflow.pending_approvals_for(member_id)),
            tier=calculate_tier(member.credits),
        )


_default_engine: Optional[BarterEngine] = None


def get_engine() -> BarterEngine:
    """Process-wide engine backed by DynamoDB, created on first use."""
    global _default_engine
    if _default_engine is None:
        from .dynamo import DynamoStore
        _default_engine = BarterEngine(DynamoStore())
    return _default_engine
