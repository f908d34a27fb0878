"""
Shared fixtures: an in-memory store, a controllable clock and a seeded engine.
"""
import random
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from barterhub.engine import BarterEngine
from barterhub.ledger import calculate_tier
from barterhub.models import Asset, AssetStatus, Member, MemberRole
from barterhub.storage import InMemoryStore

START = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def engine(store, clock):
    return BarterEngine(store, clock=clock, rng=random.Random(42))


def make_member(store, clock, username, credits=0, role=MemberRole.CREATOR, **overrides):
    """Put a member straight into the store, bypassing signup credits."""
    fields = dict(
        member_id=f"m-{username}",
        member_code=f"U-{username}",
        username=username,
        display_name=username.title(),
        role=role,
        credits=credits,
        tier=calculate_tier(credits),
        last_activity=clock(),
        last_task_submission=clock(),
        credential='secret',
        phone_number='0812-3456-7890',
    )
    fields.update(overrides)
    member = Member(**fields)
    store.upsert(member)
    return member


def make_asset(store, clock, owner, status=AssetStatus.ACTIVE, **overrides):
    """Put an asset straight into the store."""
    now = clock()
    fields = dict(
        asset_id=f"a-{uuid.uuid4().hex[:8]}",
        asset_code=f"{owner.member_code}-S01",
        owner_id=owner.member_id,
        title='Song',
        artist='Artist',
        audio_url='https://audio.example/song',
        status=status,
        submitted_at=now,
        unlock_date=now + timedelta(days=7),
        usage_count=0,
    )
    fields.update(overrides)
    asset = Asset(**fields)
    store.upsert(asset)
    return asset
