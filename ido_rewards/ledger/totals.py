"""
GlobalShareTotals - aggregate share counters.

Three tables are kept in lockstep:

- user_shares[user]: every weighted share credited to the user, all
  campaigns combined
- total_shares: the grand total, always equal to sum(user_shares)
- campaign_shares[campaign_id]: sum of the accrued shares of every user in
  that campaign; the denominator used for allocations

All three move through ``plan`` / ``commit``: every new value is computed
(and checked against the uint256 range) before any of them is written.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ido_rewards.shared.fixed_point import checked_add
from ido_rewards.shared.types import TotalsDict


@dataclass(frozen=True)
class SharesUpdate:
    """New counter values computed by GlobalShareTotals.plan."""

    total_shares: int
    user_shares: Dict[str, int] = field(default_factory=dict)
    campaign_id: Optional[str] = None
    campaign_shares: Optional[int] = None


class GlobalShareTotals:
    """Grand total, per-user and per-campaign share counters."""

    def __init__(self):
        self.total_shares: int = 0
        self._user_shares: Dict[str, int] = {}
        self._campaign_shares: Dict[str, int] = {}

    def user_shares(self, user: str) -> int:
        return self._user_shares.get(user, 0)

    def campaign_shares(self, campaign_id: str) -> int:
        return self._campaign_shares.get(str(campaign_id), 0)

    def plan(
        self,
        user_deltas: Dict[str, int],
        campaign_id: Optional[str] = None,
        campaign_delta: int = 0,
    ) -> SharesUpdate:
        """
        Compute the counters after crediting (positive) or debiting
        (negative) shares, without writing them.

        Args:
            user_deltas: Change of each user's global total; their sum is
                the change of the grand total
            campaign_id: Campaign whose denominator moves by campaign_delta
            campaign_delta: Change of the campaign denominator

        Raises:
            Overflow: If any counter would leave the uint256 range
        """
        context = {"campaign_id": campaign_id}
        new_users = {
            user: checked_add(
                self.user_shares(user), delta, {**context, "user": user}
            )
            for user, delta in user_deltas.items()
        }
        new_total = checked_add(
            self.total_shares, sum(user_deltas.values()), context
        )
        new_campaign = None
        if campaign_id is not None:
            campaign_id = str(campaign_id)
            new_campaign = checked_add(
                self.campaign_shares(campaign_id), campaign_delta, context
            )
        return SharesUpdate(
            total_shares=new_total,
            user_shares=new_users,
            campaign_id=campaign_id,
            campaign_shares=new_campaign,
        )

    def commit(self, update: SharesUpdate) -> None:
        self._user_shares.update(update.user_shares)
        self.total_shares = update.total_shares
        if update.campaign_id is not None:
            self._campaign_shares[update.campaign_id] = update.campaign_shares

    def apply(
        self,
        user: str,
        global_delta: int,
        campaign_id: Optional[str] = None,
        campaign_delta: int = 0,
    ) -> None:
        """Plan and commit one user's change; nothing is written on Overflow."""
        self.commit(
            self.plan({user: global_delta}, campaign_id, campaign_delta)
        )

    def is_consistent(self) -> bool:
        """Grand total equals the sum of all per-user totals."""
        return sum(self._user_shares.values()) == self.total_shares

    def to_dict(self) -> TotalsDict:
        return {
            "total_shares": self.total_shares,
            "user_shares": dict(self._user_shares),
            "campaign_shares": dict(self._campaign_shares),
        }

    def load(self, data: TotalsDict) -> None:
        self.total_shares = int(data.get("total_shares", 0))
        self._user_shares = {
            u: int(v) for u, v in data.get("user_shares", {}).items()
        }
        self._campaign_shares = {
            str(c): int(v) for c, v in data.get("campaign_shares", {}).items()
        }
