"""
AllocationCalculator - read-only view of claimable reward tokens.

allocation = floor(accrued_shares * reward_pool / campaign_shares)

Shares carry the 1e18 scale; this floor is the only place they are turned
into whole reward-token units.

The denominator is the campaign's own share total. Because a claim removes
the claimant's shares and their payout together, the ratio pool/denominator
is preserved for the remaining users (up to flooring), so the result does
not depend on claim order and the pool can never be over-drawn.
"""

from ido_rewards.accounting.shares import finalize_campaign
from ido_rewards.campaigns.registry import CampaignRegistry
from ido_rewards.ledger.ledger import ContributionLedger
from ido_rewards.ledger.totals import GlobalShareTotals
from ido_rewards.shared.fixed_point import mul_div


def allocation_for(shares: int, reward_pool: int, denominator: int) -> int:
    if shares == 0 or denominator == 0:
        return 0
    return mul_div(shares, reward_pool, denominator)


class AllocationCalculator:
    """Computes allocations without touching any state."""

    def __init__(
        self,
        registry: CampaignRegistry,
        ledger: ContributionLedger,
        totals: GlobalShareTotals,
    ):
        self.registry = registry
        self.ledger = ledger
        self.totals = totals

    def compute_allocation(self, user: str, campaign_id: str) -> int:
        """
        Snapshot of the user's allocation with the shares finalized so far.

        Returns 0 when the user has no accrued shares or the campaign
        denominator is 0.
        """
        campaign = self.registry.require(campaign_id)
        return allocation_for(
            self.ledger.accrued_shares(user, campaign.campaign_id),
            campaign.reward_pool,
            self.totals.campaign_shares(campaign.campaign_id),
        )

    def preview_claim(self, user: str, campaign_id: str, now: int) -> int:
        """
        Allocation the user would receive if claiming at ``now``.

        Open liquidity periods of the campaign are virtually finalized at
        the window end, exactly as the claim does. Returns 0 before the
        window has ended.
        """
        campaign = self.registry.require(campaign_id)
        if not campaign.has_ended(now):
            return 0

        state = self.ledger.get(user, campaign.campaign_id)
        if state.claimed:
            return 0

        extra = 0
        for before, after in finalize_campaign(self.ledger, campaign):
            extra += after.accrued_shares - before.accrued_shares
            if after.user == user:
                state = after
        return allocation_for(
            state.accrued_shares,
            campaign.reward_pool,
            self.totals.campaign_shares(campaign.campaign_id) + extra,
        )
