"""
Tests for the account ledger and tier calculation.
"""
import pytest

from barterhub.errors import InsufficientCredits, MemberNotFound, ValidationError
from barterhub.ledger import AccountLedger, calculate_tier, next_tier_progress
from barterhub.models import MemberTier, RecordKind

from conftest import make_member


class TestTierCalculation:
    """Tier is a step function of credits."""

    def test_tier_boundaries(self):
        """Check every threshold edge."""
        test_cases = [
            (0, MemberTier.BRONZE),
            (199, MemberTier.BRONZE),
            (200, MemberTier.SILVER),
            (499, MemberTier.SILVER),
            (500, MemberTier.GOLD),
            (999, MemberTier.GOLD),
            (1000, MemberTier.TOP_TIER),
            (5000, MemberTier.TOP_TIER),
        ]

        for credits, expected in test_cases:
            assert calculate_tier(credits) == expected, f"For {credits}: expected {expected}"

    def test_tier_never_decreases_with_more_credits(self):
        """Tier rank is non-decreasing as credits grow."""
        order = [MemberTier.BRONZE, MemberTier.SILVER, MemberTier.GOLD, MemberTier.TOP_TIER]
        ranks = [order.index(calculate_tier(c)) for c in range(0, 1200, 7)]
        assert ranks == sorted(ranks)

    def test_progress_to_next_tier(self):
        progress = next_tier_progress(150)
        assert progress['next_tier'] == 'Silver'
        assert progress['credits_needed'] == 50

    def test_progress_at_top(self):
        progress = next_tier_progress(1200)
        assert progress['next_tier'] is None
        assert progress['credits_needed'] == 0


class TestLedgerOperations:

    def test_credit_recomputes_tier(self, store, clock):
        """Crossing 200 moves a member to Silver."""
        make_member(store, clock, 'ana', credits=195)
        ledger = AccountLedger(store)

        member = ledger.credit('m-ana', 10)

        assert member.credits == 205
        assert member.tier == MemberTier.SILVER
        assert store.get(RecordKind.MEMBER, 'm-ana').tier == MemberTier.SILVER

    def test_debit_clamps_at_zero(self, store, clock):
        """A debit larger than the balance empties it but never goes negative."""
        make_member(store, clock, 'ana', credits=3)
        ledger = AccountLedger(store)

        member = ledger.debit('m-ana', 5)

        assert member.credits == 0

    def test_debit_drops_tier(self, store, clock):
        make_member(store, clock, 'ana', credits=202)
        member = AccountLedger(store).debit('m-ana', 5)
        assert member.tier == MemberTier.BRONZE

    def test_apply_debit_reports_amount_removed(self, store, clock):
        member = make_member(store, clock, 'ana', credits=2)
        assert AccountLedger(store).apply_debit(member, 5) == 2

    def test_credit_must_be_positive(self, store, clock):
        member = make_member(store, clock, 'ana')
        with pytest.raises(ValidationError):
            AccountLedger(store).apply_credit(member, 0)

    def test_unknown_member(self, store):
        with pytest.raises(MemberNotFound):
            AccountLedger(store).credit('nobody', 10)


class TestRedeem:

    def test_redeem_spends_credits(self, store, clock):
        member = make_member(store, clock, 'ana', credits=60)
        AccountLedger(store).apply_redeem(member, 50)
        assert member.credits == 10

    def test_redeem_refuses_overdraw(self, store, clock):
        """Reward claims are all-or-nothing, unlike penalty debits."""
        member = make_member(store, clock, 'ana', credits=40)

        with pytest.raises(InsufficientCredits):
            AccountLedger(store).apply_redeem(member, 50)

        assert member.credits == 40
