"""Share accounting, allocation and claim settlement."""

from .allocation import AllocationCalculator
from .settlement import ClaimReceipt, ClaimSettlement
from .shares import ShareAccountant

__all__ = [
    "AllocationCalculator",
    "ClaimReceipt",
    "ClaimSettlement",
    "ShareAccountant",
]
