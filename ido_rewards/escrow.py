"""
Outbound port to the reward-token escrow (vault).

The accounting core never moves tokens itself. It only asks the escrow to
pull a campaign's allocation from the registrant on registration and to pay
a user's allocation on claim. Anything implementing the Escrow protocol can
be plugged into a RewardsContext; RecordingEscrow keeps an ordered list of
requests and is what the CLI and the tests use. Requests are queued in an
EscrowOutbox and only reach the escrow once the operation has committed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol

from ido_rewards.shared.logging import get_logger
from ido_rewards.shared.types import EscrowRequestDict

_logger = get_logger(__name__)


class EscrowRequestKind(Enum):
    DEPOSIT = "deposit"
    PAYOUT = "payout"


@dataclass(frozen=True)
class EscrowRequest:
    """A single transfer request sent to the escrow."""

    kind: EscrowRequestKind
    party: str  # Depositor (deposit) or payee (payout)
    reward_token: str
    amount: int

    def to_dict(self) -> EscrowRequestDict:
        return {
            "kind": self.kind.value,
            "party": self.party,
            "reward_token": self.reward_token,
            "amount": self.amount,
        }


class Escrow(Protocol):
    """Vault interface consumed by the registry and the claim settlement."""

    def request_escrow_deposit(
        self, from_party: str, reward_token: str, amount: int
    ) -> None: ...

    def request_escrow_payout(
        self, to_user: str, reward_token: str, amount: int
    ) -> None: ...


class RecordingEscrow:
    """Escrow that records every request in order instead of moving tokens."""

    def __init__(self):
        self.requests: List[EscrowRequest] = []

    def request_escrow_deposit(
        self, from_party: str, reward_token: str, amount: int
    ) -> None:
        _logger.info(
            "Escrow deposit requested: %s of %s from %s",
            amount,
            reward_token,
            from_party,
        )
        self.requests.append(
            EscrowRequest(
                EscrowRequestKind.DEPOSIT, from_party, reward_token, amount
            )
        )

    def request_escrow_payout(
        self, to_user: str, reward_token: str, amount: int
    ) -> None:
        _logger.info(
            "Escrow payout requested: %s of %s to %s",
            amount,
            reward_token,
            to_user,
        )
        self.requests.append(
            EscrowRequest(
                EscrowRequestKind.PAYOUT, to_user, reward_token, amount
            )
        )

    @property
    def deposits(self) -> List[EscrowRequest]:
        return [
            r for r in self.requests if r.kind == EscrowRequestKind.DEPOSIT
        ]

    @property
    def payouts(self) -> List[EscrowRequest]:
        return [
            r for r in self.requests if r.kind == EscrowRequestKind.PAYOUT
        ]


class EscrowOutbox:
    """
    Holds escrow requests until the operation that made them is durable.

    The registry and the claim settlement talk to the outbox; the
    RewardsContext flushes it to the real escrow once the new state has
    been saved, or discards it when the operation is rolled back.
    """

    def __init__(self, escrow: Escrow):
        self.escrow = escrow
        self._pending: List[EscrowRequest] = []

    def request_escrow_deposit(
        self, from_party: str, reward_token: str, amount: int
    ) -> None:
        self._pending.append(
            EscrowRequest(
                EscrowRequestKind.DEPOSIT, from_party, reward_token, amount
            )
        )

    def request_escrow_payout(
        self, to_user: str, reward_token: str, amount: int
    ) -> None:
        self._pending.append(
            EscrowRequest(
                EscrowRequestKind.PAYOUT, to_user, reward_token, amount
            )
        )

    @property
    def pending(self) -> List[EscrowRequest]:
        return list(self._pending)

    def discard(self) -> None:
        if self._pending:
            _logger.warning(
                "Dropping %d escrow request(s) of a rolled back operation",
                len(self._pending),
            )
        self._pending = []

    def flush(self) -> None:
        """Send the queued requests, in order, to the escrow."""
        pending, self._pending = self._pending, []
        for request in pending:
            if request.kind == EscrowRequestKind.DEPOSIT:
                self.escrow.request_escrow_deposit(
                    request.party, request.reward_token, request.amount
                )
            else:
                self.escrow.request_escrow_payout(
                    request.party, request.reward_token, request.amount
                )
