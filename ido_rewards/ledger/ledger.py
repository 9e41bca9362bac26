"""
ContributionLedger - owner of per (user, campaign) contribution state.

Records are created lazily: reading a pair that never contributed returns a
fresh, unsaved ContributionState. Callers compute a new state and hand it
back through ``put`` once every check has passed, so an aborted operation
never leaves a half-updated record behind.
"""

from dataclasses import replace
from typing import Dict, Iterable, List, Tuple

from ido_rewards.ledger.models import ContributionState

LedgerKey = Tuple[str, str]


def ledger_key(user: str, campaign_id: str) -> str:
    """Persistence key of a contribution record."""
    return f"{user}:{campaign_id}"


class ContributionLedger:
    """Holds ContributionState records keyed by (user, campaign_id)."""

    def __init__(self):
        self._states: Dict[LedgerKey, ContributionState] = {}

    def get(self, user: str, campaign_id: str) -> ContributionState:
        """Return a copy of the stored state, or a blank one."""
        state = self._states.get((user, str(campaign_id)))
        if state is None:
            return ContributionState(user=user, campaign_id=str(campaign_id))
        return replace(state)

    def put(self, state: ContributionState) -> None:
        self._states[(state.user, state.campaign_id)] = state

    def accrued_shares(self, user: str, campaign_id: str) -> int:
        state = self._states.get((user, str(campaign_id)))
        return state.accrued_shares if state else 0

    def states(self) -> List[ContributionState]:
        return list(self._states.values())

    def for_campaign(self, campaign_id: str) -> List[ContributionState]:
        campaign_id = str(campaign_id)
        return [
            s for (_, cid), s in self._states.items() if cid == campaign_id
        ]

    def load(self, states: Iterable[ContributionState]) -> None:
        self._states = {(s.user, s.campaign_id): s for s in states}

    def __len__(self) -> int:
        return len(self._states)
