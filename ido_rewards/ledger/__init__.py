"""Per-user contribution state and share totals."""

from .ledger import ContributionLedger
from .models import ContributionPhase, ContributionState
from .totals import GlobalShareTotals

__all__ = [
    "ContributionLedger",
    "ContributionPhase",
    "ContributionState",
    "GlobalShareTotals",
]
