"""
Unit tests for allocation and claim settlement.

Covers the end-to-end scenarios of a single campaign of 1000 reward tokens
over [T, T + 100].
"""

import pytest

from ido_rewards.escrow import EscrowRequestKind
from ido_rewards.ledger.models import ContributionPhase
from ido_rewards.shared.exceptions import (
    CampaignNotEnded,
    CampaignNotFound,
    NothingToClaim,
)
from ido_rewards.shared.fixed_point import SCALE
from tests.conftest import ALICE, BOB, CAMPAIGN_ID, CAROL, PAIR, T, WINDOW

END = T + WINDOW


def _assert_conserved(ctx, escrow):
    campaign = ctx.get_campaign(CAMPAIGN_ID)
    paid = sum(r.amount for r in escrow.payouts)
    assert paid + campaign.reward_pool == campaign.total_allocation
    assert ctx.totals.is_consistent()


class TestAllocation:
    def test_zero_without_shares(self, ctx, campaign):
        assert ctx.get_user_allocation(ALICE, CAMPAIGN_ID) == 0

    def test_single_contributor_gets_whole_pool(self, ctx, campaign):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        assert ctx.get_user_allocation(ALICE, CAMPAIGN_ID) == 1000

    def test_allocation_is_read_only(self, ctx, campaign, escrow):
        ctx.record_swap(ALICE, CAMPAIGN_ID, PAIR, 30)
        ctx.record_swap(BOB, CAMPAIGN_ID, PAIR, 70)
        before = ctx.snapshot()

        first = ctx.get_user_allocation(ALICE, CAMPAIGN_ID)
        second = ctx.get_user_allocation(ALICE, CAMPAIGN_ID)

        assert first == second == 300
        assert ctx.snapshot() == before
        assert len(escrow.requests) == 1  # only the deposit

    def test_unknown_campaign(self, ctx):
        with pytest.raises(CampaignNotFound):
            ctx.get_user_allocation(ALICE, "missing")

    def test_preview_before_end_is_zero(self, ctx, campaign):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        assert ctx.preview_claim(ALICE, CAMPAIGN_ID, END) == 0

    def test_preview_matches_claim(self, ctx, campaign):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.record_liquidity_added(BOB, CAMPAIGN_ID, PAIR, 100, T + 1)

        preview = ctx.preview_claim(BOB, CAMPAIGN_ID, END + 1)
        receipt = ctx.claim(BOB, CAMPAIGN_ID, END + 1)
        assert preview == receipt.amount == 500
        assert ctx.preview_claim(BOB, CAMPAIGN_ID, END + 2) == 0


class TestClaimScenarios:
    def test_single_contributor(self, ctx, campaign, escrow):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        assert ctx.get_accrued_shares(ALICE, CAMPAIGN_ID) == 99 * SCALE

        receipt = ctx.claim(ALICE, CAMPAIGN_ID, END + 1)

        # The open period is finalized at window end: 99 + 99
        assert receipt.shares == 198 * SCALE
        assert receipt.amount == 1000
        assert receipt.remaining_pool == 0
        assert ctx.get_campaign(CAMPAIGN_ID).reward_pool == 0
        assert ctx.get_user_shares(ALICE) == 0
        assert ctx.get_total_shares() == 0
        assert escrow.payouts[-1].party == ALICE
        assert escrow.payouts[-1].amount == 1000
        assert escrow.payouts[-1].kind == EscrowRequestKind.PAYOUT

        state = ctx.get_contribution(ALICE, CAMPAIGN_ID)
        assert state.phase == ContributionPhase.CLAIMED_OUT
        assert state.accrued_shares == 0
        assert state.claimed_amount == 1000
        _assert_conserved(ctx, escrow)

    def test_two_equal_contributors_split_evenly(self, ctx, campaign, escrow):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.record_liquidity_added(BOB, CAMPAIGN_ID, PAIR, 100, T + 1)

        first = ctx.claim(ALICE, CAMPAIGN_ID, END + 1)
        second = ctx.claim(BOB, CAMPAIGN_ID, END + 2)

        assert first.amount == 500
        assert second.amount == 500
        assert ctx.get_campaign(CAMPAIGN_ID).reward_pool == 0
        _assert_conserved(ctx, escrow)

    def test_claim_order_does_not_change_payouts(self):
        from ido_rewards.context import RewardsContext
        from tests.conftest import REGISTRANT, REWARD_TOKEN

        payouts = []
        for order in ([ALICE, BOB, CAROL], [CAROL, BOB, ALICE]):
            ctx = RewardsContext()
            ctx.register_campaign(
                CAMPAIGN_ID, REWARD_TOKEN, PAIR, 1000, T, END, T - 10,
                REGISTRANT,
            )
            ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
            ctx.record_liquidity_added(BOB, CAMPAIGN_ID, PAIR, 37, T + 3)
            ctx.record_swap(CAROL, CAMPAIGN_ID, PAIR, 13, now=T + 3)
            paid = {}
            for i, user in enumerate(order):
                paid[user] = ctx.claim(user, CAMPAIGN_ID, END + 1 + i).amount
            payouts.append(paid)
            assert sum(paid.values()) == 1000

        # Same denominator for every claimant; only flooring may differ
        assert payouts[0] == {ALICE: 700, BOB: 253, CAROL: 47}
        assert payouts[1] == {ALICE: 701, BOB: 254, CAROL: 45}
        for user in (ALICE, BOB, CAROL):
            assert abs(payouts[0][user] - payouts[1][user]) <= 2

    def test_rounding_never_overdraws(self, ctx, campaign, escrow):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.record_liquidity_added(BOB, CAMPAIGN_ID, PAIR, 37, T + 3)
        ctx.record_swap(CAROL, CAMPAIGN_ID, PAIR, 13, now=T + 3)

        amounts = [
            ctx.claim(user, CAMPAIGN_ID, END + 1).amount
            for user in (ALICE, BOB, CAROL)
        ]

        # Shares at claim: 198, 71.78 and 13 out of 282.78
        assert amounts == [700, 253, 47]
        assert sum(amounts) <= 1000
        assert ctx.get_campaign(CAMPAIGN_ID).reward_pool == 1000 - sum(amounts)
        _assert_conserved(ctx, escrow)

    def test_remove_then_claim(self, ctx, campaign, escrow):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.record_liquidity_removed(ALICE, CAMPAIGN_ID, PAIR, 100, T + 50)

        state = ctx.get_contribution(ALICE, CAMPAIGN_ID)
        assert state.accrued_shares == 148 * SCALE
        assert state.open_since is None

        receipt = ctx.claim(ALICE, CAMPAIGN_ID, END + 1)
        assert receipt.shares == 148 * SCALE
        assert receipt.amount == 1000

    def test_fold_then_claim(self, ctx, campaign):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T)
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 50)

        receipt = ctx.claim(ALICE, CAMPAIGN_ID, END + 1)
        assert receipt.shares == 300 * SCALE
        assert receipt.amount == 1000

    def test_early_claim_rejected(self, ctx, campaign, escrow):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        with pytest.raises(CampaignNotEnded):
            ctx.claim(ALICE, CAMPAIGN_ID, END)
        assert escrow.payouts == []
        assert ctx.get_contribution(ALICE, CAMPAIGN_ID).is_open

    def test_double_claim(self, ctx, campaign, escrow):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.record_liquidity_added(BOB, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.claim(ALICE, CAMPAIGN_ID, END + 1)
        pool = ctx.get_campaign(CAMPAIGN_ID).reward_pool

        with pytest.raises(NothingToClaim):
            ctx.claim(ALICE, CAMPAIGN_ID, END + 2)
        assert ctx.get_campaign(CAMPAIGN_ID).reward_pool == pool
        assert len(escrow.payouts) == 1

    def test_claim_without_contribution(self, ctx, campaign, escrow):
        ctx.record_swap(ALICE, CAMPAIGN_ID, PAIR, 10)
        with pytest.raises(NothingToClaim):
            ctx.claim(BOB, CAMPAIGN_ID, END + 1)
        assert escrow.payouts == []
        # A failed claim does not finalize anyone
        assert ctx.get_campaign_shares(CAMPAIGN_ID) == 10 * SCALE

    def test_failed_claim_leaves_open_periods(self, ctx, campaign):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        with pytest.raises(NothingToClaim):
            ctx.claim(BOB, CAMPAIGN_ID, END + 1)
        assert ctx.get_contribution(ALICE, CAMPAIGN_ID).is_open
        assert ctx.get_accrued_shares(ALICE, CAMPAIGN_ID) == 99 * SCALE

    def test_first_claim_finalizes_other_users(self, ctx, campaign):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.record_liquidity_added(BOB, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.claim(ALICE, CAMPAIGN_ID, END + 1)

        bob = ctx.get_contribution(BOB, CAMPAIGN_ID)
        assert bob.open_since is None
        assert bob.accrued_shares == 198 * SCALE
        assert ctx.get_campaign_shares(CAMPAIGN_ID) == 198 * SCALE
        assert ctx.get_user_shares(BOB) == 198 * SCALE
        assert ctx.totals.is_consistent()

    def test_swap_after_claim_counts_globally_only(self, ctx, campaign):
        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.claim(ALICE, CAMPAIGN_ID, END + 1)

        ctx.record_swap(ALICE, CAMPAIGN_ID, PAIR, 25)

        assert ctx.get_accrued_shares(ALICE, CAMPAIGN_ID) == 0
        assert ctx.get_campaign_shares(CAMPAIGN_ID) == 0
        assert ctx.get_user_shares(ALICE) == 25 * SCALE
        assert ctx.get_total_shares() == 25 * SCALE
        with pytest.raises(NothingToClaim):
            ctx.claim(ALICE, CAMPAIGN_ID, END + 2)

    def test_depleted_status_after_full_payout(self, ctx, campaign):
        from ido_rewards.campaigns.models import CampaignStatus

        ctx.record_liquidity_added(ALICE, CAMPAIGN_ID, PAIR, 100, T + 1)
        ctx.claim(ALICE, CAMPAIGN_ID, END + 1)
        assert (
            ctx.campaign_status(CAMPAIGN_ID, END + 1)
            == CampaignStatus.DEPLETED
        )
