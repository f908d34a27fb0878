"""
Data models and status constants for the barter hub.
Task lifecycle: Pending → Submitted → Approved / Rejected (→ Submitted again)
Asset lifecycle: Active ⇄ Inactive → Active / Locked
"""
from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ValidationError
from .utils import to_iso, from_iso


class MemberRole(str, Enum):
    """Member roles."""
    CREATOR = 'creator'
    ADMIN = 'admin'


class MemberTier(str, Enum):
    """Reputation tiers derived from credit balance."""
    BRONZE = 'Bronze'
    SILVER = 'Silver'
    GOLD = 'Gold'
    TOP_TIER = 'Top Tier'


class AssetStatus(str, Enum):
    """Asset lifecycle statuses."""
    LOCKED = 'locked'
    ACTIVE = 'active'
    INACTIVE = 'inactive'  # owner went quiet for too long


class TaskStatus(str, Enum):
    """Task lifecycle statuses."""
    PENDING = 'pending'
    SUBMITTED = 'submitted'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class RecordKind(str, Enum):
    """Top-level record types held by a store."""
    MEMBER = 'member'
    ASSET = 'asset'
    TASK = 'task'
    COUNTER = 'counter'


def _int(value: Any, default: int = 0) -> int:
    # DynamoDB hands numbers back as Decimal
    if value is None:
        return default
    return int(value)


def _compact(item: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in item.items() if v is not None}


@dataclass
class Member:
    member_id: str
    member_code: str
    username: str
    display_name: str = ''
    role: MemberRole = MemberRole.CREATOR
    credits: int = 0
    tier: MemberTier = MemberTier.BRONZE
    last_activity: Optional[datetime] = None
    last_task_submission: Optional[datetime] = None
    penalty_points_week: int = 0
    last_penalty_date: Optional[datetime] = None
    credential: Optional[str] = None
    phone_number: str = ''
    email: str = ''
    created_at: Optional[datetime] = None

    kind = RecordKind.MEMBER

    @property
    def record_id(self) -> str:
        return self.member_id

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN

    def is_active(self, now: datetime, inactivity_hours: int = 48) -> bool:
        """True while the last session started within the inactivity window."""
        if self.last_activity is None:
            return False
        return now - self.last_activity <= timedelta(hours=inactivity_hours)

    def to_item(self) -> Dict[str, Any]:
        return _compact({
            'memberId': self.member_id,
            'memberCode': self.member_code,
            'username': self.username,
            'displayName': self.display_name,
            'role': self.role.value,
            'credits': self.credits,
            'tier': self.tier.value,
            'lastActivity': to_iso(self.last_activity),
            'lastTaskSubmission': to_iso(self.last_task_submission),
            'penaltyPointsWeek': self.penalty_points_week,
            'lastPenaltyDate': to_iso(self.last_penalty_date),
            'credential': self.credential,
            'phoneNumber': self.phone_number,
            'email': self.email,
            'createdAt': to_iso(self.created_at),
        })

    def to_public_dict(self, now: datetime = None) -> Dict[str, Any]:
        """Item view without the stored credential."""
        item = self.to_item()
        item.pop('credential', None)
        if now is not None:
            item['isActive'] = self.is_active(now)
        return item

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Member':
        return cls(
            member_id=item['memberId'],
            member_code=item.get('memberCode', ''),
            username=item['username'],
            display_name=item.get('displayName', ''),
            role=MemberRole(item.get('role', MemberRole.CREATOR.value)),
            credits=_int(item.get('credits')),
            tier=MemberTier(item.get('tier', MemberTier.BRONZE.value)),
            last_activity=from_iso(item.get('lastActivity')),
            last_task_submission=from_iso(item.get('lastTaskSubmission')),
            penalty_points_week=_int(item.get('penaltyPointsWeek')),
            last_penalty_date=from_iso(item.get('lastPenaltyDate')),
            credential=item.get('credential'),
            phone_number=item.get('phoneNumber', ''),
            email=item.get('email', ''),
            created_at=from_iso(item.get('createdAt')),
        )


@dataclass
class Asset:
    asset_id: str
    asset_code: str
    owner_id: str
    title: str = ''
    artist: str = ''
    audio_url: str = ''
    status: AssetStatus = AssetStatus.ACTIVE
    submitted_at: Optional[datetime] = None
    unlock_date: Optional[datetime] = None
    usage_count: int = 0

    kind = RecordKind.ASSET

    @property
    def record_id(self) -> str:
        return self.asset_id

    def to_item(self) -> Dict[str, Any]:
        return _compact({
            'assetId': self.asset_id,
            'assetCode': self.asset_code,
            'ownerId': self.owner_id,
            'title': self.title,
            'artist': self.artist,
            'audioUrl': self.audio_url,
            'status': self.status.value,
            'submittedAt': to_iso(self.submitted_at),
            'unlockDate': to_iso(self.unlock_date),
            'usageCount': self.usage_count,
        })

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Asset':
        return cls(
            asset_id=item['assetId'],
            asset_code=item.get('assetCode', ''),
            owner_id=item['ownerId'],
            title=item.get('title', ''),
            artist=item.get('artist', ''),
            audio_url=item.get('audioUrl', ''),
            status=AssetStatus(item.get('status', AssetStatus.ACTIVE.value)),
            submitted_at=from_iso(item.get('submittedAt')),
            unlock_date=from_iso(item.get('unlockDate')),
            usage_count=_int(item.get('usageCount')),
        )


@dataclass
class Task:
    task_id: str
    task_code: str
    assignee_id: str
    asset_id: str
    status: TaskStatus = TaskStatus.PENDING
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    content_link: Optional[str] = None
    feedback: Optional[str] = None
    rating: Optional[int] = None

    kind = RecordKind.TASK

    @property
    def record_id(self) -> str:
        return self.task_id

    def to_item(self) -> Dict[str, Any]:
        return _compact({
            'taskId': self.task_id,
            'taskCode': self.task_code,
            'assigneeId': self.assignee_id,
            'assetId': self.asset_id,
            'status': self.status.value,
            'createdAt': to_iso(self.created_at),
            'submittedAt': to_iso(self.submitted_at),
            'completedAt': to_iso(self.completed_at),
            'contentLink': self.content_link,
            'feedback': self.feedback,
            'rating': self.rating,
        })

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Task':
        rating = item.get('rating')
        return cls(
            task_id=item['taskId'],
            task_code=item.get('taskCode', ''),
            assignee_id=item['assigneeId'],
            asset_id=item['assetId'],
            status=TaskStatus(item.get('status', TaskStatus.PENDING.value)),
            created_at=from_iso(item.get('createdAt')),
            submitted_at=from_iso(item.get('submittedAt')),
            completed_at=from_iso(item.get('completedAt')),
            content_link=item.get('contentLink'),
            feedback=item.get('feedback'),
            rating=_int(rating) if rating is not None else None,
        )


@dataclass
class Counter:
    """
    Versioned counter record. Writers commit it with the count they read,
    so two writers working from the same read cannot both succeed.

    Used for the per-member daily assignment quota (`keys` holds the asset
    ids handed out that day) and for the task code sequence.
    """
    counter_id: str
    count: int = 0
    keys: List[str] = field(default_factory=list)

    kind = RecordKind.COUNTER

    @property
    def record_id(self) -> str:
        return self.counter_id

    def to_item(self) -> Dict[str, Any]:
        return {
            'counterId': self.counter_id,
            'count': self.count,
            'keys': list(self.keys),
        }

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Counter':
        return cls(
            counter_id=item['counterId'],
            count=_int(item.get('count')),
            keys=list(item.get('keys') or []),
        )


def daily_quota_id(member_id: str, now: datetime) -> str:
    return f"quota#{member_id}#{now.date().isoformat()}"


TASK_SEQUENCE_ID = 'task-sequence'


RECORD_TYPES = {
    RecordKind.MEMBER: Member,
    RecordKind.ASSET: Asset,
    RecordKind.TASK: Task,
    RecordKind.COUNTER: Counter,
}


@dataclass
class MemberStats:
    """Dashboard numbers for one member."""
    credits: int
    debt: int
    active_asset_count: int
    pending_review_count: int
    tier: MemberTier

    def to_dict(self) -> Dict[str, Any]:
        return {
            'credits': self.credits,
            'debt': self.debt,
            'activeAssetCount': self.active_asset_count,
            'pendingReviewCount': self.pending_review_count,
            'tier': self.tier.value,
        }


class _Patch:
    """
    Allow-listed partial update. Only declared fields can be set; unknown
    keys are rejected instead of silently landing on the record.
    """

    # fields that may be left out but never blanked
    non_empty = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        data = data or {}
        allowed = {f.name for f in fields(cls)}
        # accept camelCase keys from API bodies
        normalized = {}
        for key, value in data.items():
            snake = ''.join('_' + c.lower() if c.isupper() else c for c in key)
            if snake not in allowed:
                raise ValidationError(f"Field '{key}' cannot be updated")
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"Field '{key}' must be a string")
            if snake in cls.non_empty and value is not None and not value.strip():
                raise ValidationError(f"Field '{key}' cannot be empty")
            normalized[snake] = value
        return cls(**normalized)

    def changes(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def apply_to(self, record) -> None:
        for name, value in self.changes().items():
            setattr(record, name, value)


@dataclass
class MemberPatch(_Patch):
    display_name: Optional[str] = None
    username: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None

    non_empty = ('username',)


@dataclass
class AssetPatch(_Patch):
    title: Optional[str] = None
    artist: Optional[str] = None
    audio_url: Optional[str] = None

    non_empty = ('title', 'audio_url')
