"""
ClaimSettlement - one-shot payout of a user's campaign allocation.

A claim, once the window has ended:
1. Finalizes every still-open liquidity period of the campaign as a removal
   of the deposited liquidity at window_end (full remaining window
   credited). Doing this for all users at once, not only the claimant,
   keeps the denominator identical for every claimant, so claim order does
   not change anyone's payout.
2. Computes floor(shares * reward_pool / campaign_shares).
3. Commits together: reward_pool -= allocation, the user's accrued shares
   go to zero, exactly those shares leave the user total, the grand total
   and the campaign denominator, and the state becomes CLAIMED_OUT.
4. Asks the escrow to pay the allocation to the user.

Every value is computed before the escrow is called and before anything is
written, so a failed claim leaves no trace.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict

from ido_rewards.accounting.allocation import allocation_for
from ido_rewards.accounting.shares import finalize_campaign
from ido_rewards.campaigns.registry import CampaignRegistry
from ido_rewards.escrow import Escrow
from ido_rewards.ledger.ledger import ContributionLedger
from ido_rewards.ledger.totals import GlobalShareTotals
from ido_rewards.shared.exceptions import CampaignNotEnded, NothingToClaim
from ido_rewards.shared.fixed_point import checked_sub
from ido_rewards.shared.logging import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class ClaimReceipt:
    """Outcome of a successful claim."""

    user: str
    campaign_id: str
    reward_token: str
    amount: int  # Reward tokens paid
    shares: int  # Shares burned by the claim (1e18 scale)
    remaining_pool: int  # Campaign pool after the claim

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user,
            "campaign_id": self.campaign_id,
            "reward_token": self.reward_token,
            "amount": self.amount,
            "shares": self.shares,
            "remaining_pool": self.remaining_pool,
        }


class ClaimSettlement:
    """Finalizes contributions and pays allocations after campaign end."""

    def __init__(
        self,
        registry: CampaignRegistry,
        ledger: ContributionLedger,
        totals: GlobalShareTotals,
        escrow: Escrow,
    ):
        self.registry = registry
        self.ledger = ledger
        self.totals = totals
        self.escrow = escrow

    def claim(self, user: str, campaign_id: str, now: int) -> ClaimReceipt:
        """
        Settle the user's allocation for a campaign.

        Raises:
            CampaignNotEnded: If now <= window_end
            NothingToClaim: If the allocation is zero or already claimed
        """
        campaign = self.registry.require(campaign_id)
        campaign_id = campaign.campaign_id
        context = {"user": user, "campaign_id": campaign_id, "now": now}

        if not campaign.has_ended(now):
            raise CampaignNotEnded(
                f"Campaign {campaign_id} ends at {campaign.window_end}",
                context,
            )

        state = self.ledger.get(user, campaign_id)
        if state.claimed:
            raise NothingToClaim(
                f"{user} already claimed campaign {campaign_id}", context
            )

        finalized = {
            after.user: (before, after)
            for before, after in finalize_campaign(self.ledger, campaign)
        }
        user_deltas = {
            u: after.accrued_shares - before.accrued_shares
            for u, (before, after) in finalized.items()
        }
        finalize_total = sum(user_deltas.values())

        if user in finalized:
            state = finalized[user][1]
        shares = state.accrued_shares
        denominator = self.totals.campaign_shares(campaign_id) + finalize_total

        allocation = allocation_for(shares, campaign.reward_pool, denominator)
        if allocation == 0:
            raise NothingToClaim(
                f"No allocation for {user} in campaign {campaign_id}", context
            )

        remaining_pool = checked_sub(campaign.reward_pool, allocation, context)
        user_deltas[user] = user_deltas.get(user, 0) - shares
        update = self.totals.plan(
            user_deltas, campaign_id, finalize_total - shares
        )
        settled = replace(
            state,
            liquidity_shares=0,
            swap_shares=0,
            claimed=True,
            claimed_amount=allocation,
        )

        self.escrow.request_escrow_payout(
            user, campaign.reward_token, allocation
        )
        campaign.reward_pool = remaining_pool
        self.totals.commit(update)
        for _, after in finalized.values():
            self.ledger.put(after)
        self.ledger.put(settled)

        if finalized:
            _logger.info(
                "Finalized %d open periods of %s at window end",
                len(finalized),
                campaign_id,
            )
        _logger.info(
            "Claim by %s on %s: %s shares -> %s %s (pool left %s)",
            user,
            campaign_id,
            shares,
            allocation,
            campaign.reward_token,
            remaining_pool,
        )
        return ClaimReceipt(
            user=user,
            campaign_id=campaign_id,
            reward_token=campaign.reward_token,
            amount=allocation,
            shares=shares,
            remaining_pool=remaining_pool,
        )
