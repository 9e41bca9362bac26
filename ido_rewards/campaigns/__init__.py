"""Campaign management module for the IDO Rewards toolkit."""

from .models import Campaign, CampaignStatus, PoolPair, SwapDirection
from .registry import CampaignRegistry

__all__ = [
    "Campaign",
    "CampaignRegistry",
    "CampaignStatus",
    "PoolPair",
    "SwapDirection",
]
