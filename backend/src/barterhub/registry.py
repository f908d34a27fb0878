"""
Asset registry - asset creation and the owner-driven lifecycle.

    ACTIVE --owner idle > 48h--> INACTIVE
    INACTIVE --owner returns, past unlockDate--> ACTIVE
    INACTIVE --owner returns, before unlockDate--> LOCKED
    LOCKED --owner session, past unlockDate--> ACTIVE

Only ACTIVE assets can be picked for new tasks.
"""
import uuid
from datetime import datetime, timedelta
from typing import List

from .config import config
from .errors import AssetNotFound, ValidationError
from .logging import logger
from .models import Asset, AssetStatus, Member, RecordKind
from .storage import Store


def is_eligible(asset: Asset) -> bool:
    """Eligibility predicate used by the scheduler."""
    return asset.status == AssetStatus.ACTIVE


def next_asset_code(owner: Member, owned: List[Asset]) -> str:
    """
    Per-owner sequential code, e.g. U-0003-S02. Numbering continues from the
    highest existing suffix, so a deleted asset's code is never reused
    while a later one still exists.
    """
    prefix = f"{owner.member_code}-S"
    highest = 0
    for asset in owned:
        suffix = asset.asset_code[len(prefix):] if asset.asset_code.startswith(prefix) else ''
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:02d}"


def session_status(asset: Asset, owner_idle: bool, now: datetime) -> AssetStatus:
    """
    Status an asset should have once its owner starts a session.

    Args:
        asset: The asset as stored
        owner_idle: True if the owner's previous activity is older than the
            inactivity threshold
        now: Session start time

    Returns:
        The new status (may equal the current one)
    """
    if owner_idle:
        return AssetStatus.INACTIVE
    unlocked = asset.unlock_date is not None and now > asset.unlock_date
    if asset.status == AssetStatus.INACTIVE:
        return AssetStatus.ACTIVE if unlocked else AssetStatus.LOCKED
    if asset.status == AssetStatus.LOCKED and unlocked:
        # cool-down over
        return AssetStatus.ACTIVE
    return asset.status


class AssetRegistry:

    def __init__(self, store: Store):
        self.store = store

    def all_assets(self) -> List[Asset]:
        return self.store.load_all(RecordKind.ASSET)

    def assets_of(self, owner_id: str) -> List[Asset]:
        return [a for a in self.all_assets() if a.owner_id == owner_id]

    def get(self, asset_id: str) -> Asset:
        asset = self.store.get(RecordKind.ASSET, asset_id)
        if asset is None:
            raise AssetNotFound(f"Asset {asset_id} not found")
        return asset

    def new_asset(self, owner: Member, title: str, artist: str, audio_url: str,
                  now: datetime) -> Asset:
        """
        Build a new asset for `owner`. It is ACTIVE straight away; the unlock
        date only limits what the owner may edit during the first week.
        """
        if not title or not audio_url:
            raise ValidationError('Asset needs a title and an audio URL')

        return Asset(
            asset_id=str(uuid.uuid4()),
            asset_code=next_asset_code(owner, self.assets_of(owner.member_id)),
            owner_id=owner.member_id,
            title=title,
            artist=artist or '',
            audio_url=audio_url,
            status=AssetStatus.ACTIVE,
            submitted_at=now,
            unlock_date=now + timedelta(days=config.UNLOCK_DAYS),
            usage_count=0,
        )

    def recompute_for_owner(self, owner: Member, now: datetime) -> List[Asset]:
        """
        Re-evaluate every asset of `owner` at session start. Must run before
        the owner's lastActivity is refreshed.

        Returns:
            Assets whose status changed (not yet persisted)
        """
        owner_idle = not owner.is_active(now, config.INACTIVITY_HOURS)
        changed = []

        for asset in self.assets_of(owner.member_id):
            new_status = session_status(asset, owner_idle, now)
            if new_status != asset.status:
                logger.info(
                    f"Asset {asset.asset_code} ({asset.asset_id}): "
                    f"{asset.status.value} -> {new_status.value}"
                )
                asset.status = new_status
                changed.append(asset)

        return changed

    def increment_usage(self, asset: Asset) -> Asset:
        asset.usage_count += 1
        return asset
