"""
Tests for asset creation and the owner-driven lifecycle.
"""
from datetime import timedelta

import pytest

from barterhub.errors import OwnerNotFound, ValidationError
from barterhub.models import AssetStatus, RecordKind
from barterhub.registry import is_eligible, session_status

from conftest import make_asset, make_member


class TestSubmitAsset:

    def test_new_asset_is_active_immediately(self, engine, store, clock):
        """A deposited asset is usable by others right away."""
        make_member(store, clock, 'ana')

        asset = engine.submit_asset('m-ana', title='Hit', artist='Ana', audio_url='https://a/1')

        assert asset.status == AssetStatus.ACTIVE
        assert asset.usage_count == 0
        assert asset.unlock_date == clock() + timedelta(days=7)

    def test_asset_codes_are_sequential_per_owner(self, engine, store, clock):
        make_member(store, clock, 'ana', member_code='U-0001')
        make_member(store, clock, 'ben', member_code='U-0002')

        first = engine.submit_asset('m-ana', title='One', audio_url='https://a/1')
        second = engine.submit_asset('m-ana', title='Two', audio_url='https://a/2')
        other = engine.submit_asset('m-ben', title='Three', audio_url='https://b/1')

        assert first.asset_code == 'U-0001-S01'
        assert second.asset_code == 'U-0001-S02'
        assert other.asset_code == 'U-0002-S01'

    def test_unknown_owner(self, engine):
        with pytest.raises(OwnerNotFound):
            engine.submit_asset('ghost', title='Hit', audio_url='https://a/1')

    def test_title_and_url_required(self, engine, store, clock):
        make_member(store, clock, 'ana')
        with pytest.raises(ValidationError):
            engine.submit_asset('m-ana', title='', audio_url='https://a/1')

    def test_deleted_asset_code_not_reused_while_later_exists(self, engine, store, clock):
        make_member(store, clock, 'ana', member_code='U-0001')
        first = engine.submit_asset('m-ana', title='A', audio_url='https://a/1')
        engine.submit_asset('m-ana', title='B', audio_url='https://a/2')

        engine.delete_asset('m-ana', first.asset_id)
        third = engine.submit_asset('m-ana', title='C', audio_url='https://a/3')

        assert third.asset_code == 'U-0001-S03'
        assert sorted(a.asset_code for a in engine.assets_of('m-ana')) == ['U-0001-S02', 'U-0001-S03']


class TestSessionStatus:
    """Pure transition rules evaluated at session start."""

    def test_idle_owner_deactivates_everything(self, store, clock):
        owner = make_member(store, clock, 'ana')
        for status in AssetStatus:
            asset = make_asset(store, clock, owner, status=status)
            assert session_status(asset, owner_idle=True, now=clock()) == AssetStatus.INACTIVE

    def test_returning_owner_after_unlock(self, store, clock):
        owner = make_member(store, clock, 'ana')
        asset = make_asset(store, clock, owner, status=AssetStatus.INACTIVE,
                           unlock_date=clock() - timedelta(days=1))
        assert session_status(asset, owner_idle=False, now=clock()) == AssetStatus.ACTIVE

    def test_returning_owner_before_unlock(self, store, clock):
        owner = make_member(store, clock, 'ana')
        asset = make_asset(store, clock, owner, status=AssetStatus.INACTIVE,
                           unlock_date=clock() + timedelta(days=1))
        assert session_status(asset, owner_idle=False, now=clock()) == AssetStatus.LOCKED

    def test_locked_asset_reopens_after_unlock(self, store, clock):
        """The cool-down ends once the unlock date has passed."""
        owner = make_member(store, clock, 'ana')
        asset = make_asset(store, clock, owner, status=AssetStatus.LOCKED,
                           unlock_date=clock() - timedelta(minutes=1))
        assert session_status(asset, owner_idle=False, now=clock()) == AssetStatus.ACTIVE

    def test_active_asset_of_active_owner_unchanged(self, store, clock):
        owner = make_member(store, clock, 'ana')
        asset = make_asset(store, clock, owner)
        assert session_status(asset, owner_idle=False, now=clock()) == AssetStatus.ACTIVE

    def test_only_active_is_eligible(self, store, clock):
        owner = make_member(store, clock, 'ana')
        eligible = {s: is_eligible(make_asset(store, clock, owner, status=s)) for s in AssetStatus}
        assert eligible == {
            AssetStatus.ACTIVE: True,
            AssetStatus.LOCKED: False,
            AssetStatus.INACTIVE: False,
        }


class TestLifecycleOnLogin:
    """Owner inactivity round-trip driven through login."""

    def test_round_trip_after_unlock_date(self, engine, store, clock):
        """Idle > 48h freezes the asset; the next session after unlock reopens it."""
        owner = make_member(store, clock, 'ana',
                            last_activity=clock() - timedelta(hours=49))
        asset = make_asset(store, clock, owner, unlock_date=clock() - timedelta(days=1))

        engine.login('ana', 'secret')
        assert store.get(RecordKind.ASSET, asset.asset_id).status == AssetStatus.INACTIVE

        clock.advance(hours=1)
        engine.login('ana', 'secret')
        assert store.get(RecordKind.ASSET, asset.asset_id).status == AssetStatus.ACTIVE

    def test_round_trip_before_unlock_date(self, engine, store, clock):
        owner = make_member(store, clock, 'ana',
                            last_activity=clock() - timedelta(hours=49))
        asset = make_asset(store, clock, owner, unlock_date=clock() + timedelta(days=3))

        engine.login('ana', 'secret')
        assert store.get(RecordKind.ASSET, asset.asset_id).status == AssetStatus.INACTIVE

        clock.advance(hours=1)
        engine.login('ana', 'secret')
        assert store.get(RecordKind.ASSET, asset.asset_id).status == AssetStatus.LOCKED

    def test_exactly_48h_is_still_active(self, engine, store, clock):
        owner = make_member(store, clock, 'ana',
                            last_activity=clock() - timedelta(hours=48))
        asset = make_asset(store, clock, owner)

        engine.login('ana', 'secret')

        assert store.get(RecordKind.ASSET, asset.asset_id).status == AssetStatus.ACTIVE

    def test_other_owners_untouched(self, engine, store, clock):
        make_member(store, clock, 'ana', last_activity=clock() - timedelta(hours=72))
        ben = make_member(store, clock, 'ben', last_activity=clock() - timedelta(hours=72))
        bens_asset = make_asset(store, clock, ben)

        engine.login('ana', 'secret')

        assert store.get(RecordKind.ASSET, bens_asset.asset_id).status == AssetStatus.ACTIVE

    def test_in_flight_tasks_survive_deactivation(self, engine, store, clock):
        """Freezing an asset does not touch tasks already assigned on it."""
        ana = make_member(store, clock, 'ana')
        make_member(store, clock, 'ben')
        asset = make_asset(store, clock, ana)
        task = engine.assign('m-ben')

        clock.advance(hours=50)
        engine.login('ana', 'secret')

        assert store.get(RecordKind.ASSET, asset.asset_id).status == AssetStatus.INACTIVE
        engine.submit_content(task.task_id, 'https://video/1')
        assert engine.review(task.task_id, True, rating=5).status.value == 'approved'
