"""
Type definitions for per-user contribution state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ido_rewards.shared.types import ContributionDict


class ContributionPhase(Enum):
    """Lifecycle of a (user, campaign) contribution."""

    NO_CONTRIBUTION = "no_contribution"  # Nothing recorded yet
    CONTRIBUTING = "contributing"  # Liquidity period open
    SETTLED = "settled"  # Period closed, shares finalized
    CLAIMED_OUT = "claimed_out"  # Claimed; terminal


@dataclass
class ContributionState:
    """
    Contribution of one user to one campaign.

    Shares are kept in two buckets carrying the 1e18 scale: liquidity_shares
    (time weighted, re-weighted by fold-forward) and swap_shares (volume,
    never re-weighted). Their sum is the user's numerator for the campaign.
    open_since is set while the user has liquidity deposited and the period
    has not been finalized yet.
    """

    user: str
    campaign_id: str
    open_since: Optional[int] = None  # Start of the open liquidity period
    liquidity_shares: int = 0
    swap_shares: int = 0
    liquidity: int = 0  # Liquidity currently deposited
    claimed: bool = False
    claimed_amount: int = 0  # Reward tokens paid on claim

    @property
    def accrued_shares(self) -> int:
        return self.liquidity_shares + self.swap_shares

    @property
    def is_open(self) -> bool:
        return self.open_since is not None

    @property
    def phase(self) -> ContributionPhase:
        if self.claimed:
            return ContributionPhase.CLAIMED_OUT
        if self.is_open:
            return ContributionPhase.CONTRIBUTING
        if self.accrued_shares > 0 or self.liquidity > 0:
            return ContributionPhase.SETTLED
        return ContributionPhase.NO_CONTRIBUTION

    def to_dict(self) -> ContributionDict:
        return {
            "user": self.user,
            "campaign_id": self.campaign_id,
            "open_since": self.open_since,
            "liquidity_shares": self.liquidity_shares,
            "swap_shares": self.swap_shares,
            "liquidity": self.liquidity,
            "claimed": self.claimed,
            "claimed_amount": self.claimed_amount,
        }

    @classmethod
    def from_dict(cls, data: ContributionDict) -> "ContributionState":
        open_since = data.get("open_since")
        return cls(
            user=data["user"],
            campaign_id=str(data["campaign_id"]),
            open_since=int(open_since) if open_since is not None else None,
            liquidity_shares=int(data.get("liquidity_shares", 0)),
            swap_shares=int(data.get("swap_shares", 0)),
            liquidity=int(data.get("liquidity", 0)),
            claimed=bool(data.get("claimed", False)),
            claimed_amount=int(data.get("claimed_amount", 0)),
        )
