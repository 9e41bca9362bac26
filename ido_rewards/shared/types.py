"""
Shared type definitions used for JSON snapshots of the ledger state.
"""

from typing import Dict, List, Optional, TypedDict

# =============================================================================
# CAMPAIGN TYPES
# =============================================================================


class CampaignDict(TypedDict):
    """Campaign record as persisted."""

    campaign_id: str
    reward_token: str  # Reward token address
    pair: List[str]  # Two asset addresses, sorted
    total_allocation: int  # Registered allocation (base units)
    reward_pool: int  # Remaining pool (base units)
    window_start: int  # Unix timestamp
    window_end: int  # Unix timestamp
    registrant: str  # Address that funded the escrow


# =============================================================================
# LEDGER TYPES
# =============================================================================


class ContributionDict(TypedDict):
    """Per (user, campaign) contribution state as persisted."""

    user: str
    campaign_id: str
    open_since: Optional[int]  # Start of the open liquidity period
    liquidity_shares: int  # Time-weighted liquidity shares (1e18 scale)
    swap_shares: int  # Volume-weighted swap shares (1e18 scale)
    liquidity: int  # Currently deposited liquidity
    claimed: bool
    claimed_amount: int


class TotalsDict(TypedDict):
    """Global share totals as persisted."""

    total_shares: int
    user_shares: Dict[str, int]  # user -> global shares
    campaign_shares: Dict[str, int]  # campaign_id -> denominator


class SnapshotDict(TypedDict):
    """Complete ledger snapshot (one JSON document)."""

    version: int
    last_timestamp: Optional[int]
    campaigns: List[CampaignDict]
    contributions: List[ContributionDict]
    totals: TotalsDict


# =============================================================================
# ESCROW TYPES
# =============================================================================


class EscrowRequestDict(TypedDict):
    """Outbound escrow request."""

    kind: str  # "deposit" or "payout"
    party: str  # Depositor or payee
    reward_token: str
    amount: int
