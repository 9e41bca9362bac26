"""
Type definitions for IDO reward campaigns.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ido_rewards.shared.addresses import normalize_address
from ido_rewards.shared.types import CampaignDict

# =============================================================================
# ENUMS
# =============================================================================


class CampaignStatus(Enum):
    """Campaign status enumeration."""

    PENDING = "pending"  # Window has not started yet
    ACTIVE = "active"  # Within [window_start, window_end]
    ENDED = "ended"  # Window closed, claims open
    DEPLETED = "depleted"  # Window closed and reward pool fully claimed


class SwapDirection(Enum):
    """Direction of a swap in the pool."""

    ZERO_FOR_ONE = "zero_for_one"
    ONE_FOR_ZERO = "one_for_zero"


# =============================================================================
# DATACLASSES
# =============================================================================


@dataclass(frozen=True)
class PoolPair:
    """
    Unordered pair of pool assets.

    The two addresses are checksummed and stored sorted, so
    PoolPair(a, b) == PoolPair(b, a) and both hash the same.
    """

    asset0: str
    asset1: str

    def __post_init__(self):
        first = normalize_address(self.asset0, "asset0")
        second = normalize_address(self.asset1, "asset1")
        if first.lower() > second.lower():
            first, second = second, first
        object.__setattr__(self, "asset0", first)
        object.__setattr__(self, "asset1", second)

    @classmethod
    def of(cls, pair) -> "PoolPair":
        """Coerce a PoolPair or a two-item sequence into a PoolPair."""
        if isinstance(pair, PoolPair):
            return pair
        asset0, asset1 = pair
        return cls(asset0, asset1)

    def as_tuple(self) -> Tuple[str, str]:
        return (self.asset0, self.asset1)


@dataclass
class Campaign:
    """
    A time-boxed reward program tied to one pool pair and one reward token.

    Everything except reward_pool is fixed at registration; reward_pool only
    decreases, by exactly the amount paid out on each claim.
    """

    campaign_id: str  # Opaque unique id
    reward_token: str  # Reward token address
    pair: PoolPair  # Pool the campaign rewards
    total_allocation: int  # Registered allocation (base units)
    reward_pool: int  # Remaining pool (base units)
    window_start: int  # Unix timestamp
    window_end: int  # Unix timestamp
    registrant: str  # Address that funded the escrow

    @property
    def window_length(self) -> int:
        return self.window_end - self.window_start

    @property
    def total_claimed(self) -> int:
        return self.total_allocation - self.reward_pool

    def is_within_window(self, now: int) -> bool:
        return self.window_start <= now <= self.window_end

    def has_ended(self, now: int) -> bool:
        return now > self.window_end

    def status(self, now: int) -> CampaignStatus:
        if now < self.window_start:
            return CampaignStatus.PENDING
        if now <= self.window_end:
            return CampaignStatus.ACTIVE
        if self.reward_pool == 0:
            return CampaignStatus.DEPLETED
        return CampaignStatus.ENDED

    def to_dict(self) -> CampaignDict:
        return {
            "campaign_id": self.campaign_id,
            "reward_token": self.reward_token,
            "pair": list(self.pair.as_tuple()),
            "total_allocation": self.total_allocation,
            "reward_pool": self.reward_pool,
            "window_start": self.window_start,
            "window_end": self.window_end,
            "registrant": self.registrant,
        }

    @classmethod
    def from_dict(cls, data: CampaignDict) -> "Campaign":
        return cls(
            campaign_id=str(data["campaign_id"]),
            reward_token=data["reward_token"],
            pair=PoolPair.of(data["pair"]),
            total_allocation=int(data["total_allocation"]),
            reward_pool=int(data["reward_pool"]),
            window_start=int(data["window_start"]),
            window_end=int(data["window_end"]),
            registrant=data["registrant"],
        )
