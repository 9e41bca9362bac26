"""
RewardsContext - the handle that owns all ledger state.

One context is built per deployment and passed to whoever needs it (pool
runtime adapter, CLI, tests). It owns the campaign registry, the
contribution ledger and the global share totals, wires the accounting
components to them, and serializes every operation behind a single
re-entrant lock, so no two mutations interleave and the invariant
"grand total == sum of per-user totals" holds under concurrent callers.

Time is supplied by the caller. The context remembers the latest timestamp
it has seen and rejects anything earlier (ClockRegression).

When a StateStore is attached, the state is restored from it on
construction and saved after every committed mutation. Escrow requests are
sent only after that save; if anything fails first, the in-memory state is
rolled back to what it was before the call and no request goes out.
"""

import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, List, Optional

from ido_rewards.accounting.allocation import AllocationCalculator
from ido_rewards.accounting.settlement import ClaimReceipt, ClaimSettlement
from ido_rewards.accounting.shares import ShareAccountant
from ido_rewards.campaigns.models import Campaign, CampaignStatus
from ido_rewards.campaigns.registry import CampaignRegistry
from ido_rewards.escrow import Escrow, EscrowOutbox, RecordingEscrow
from ido_rewards.ledger.ledger import ContributionLedger
from ido_rewards.ledger.models import ContributionState
from ido_rewards.ledger.totals import GlobalShareTotals
from ido_rewards.shared.addresses import require_address
from ido_rewards.shared.exceptions import ClockRegression, RewardsException
from ido_rewards.shared.logging import get_logger
from ido_rewards.shared.types import SnapshotDict
from ido_rewards.storage.store import SNAPSHOT_VERSION, StateStore

_logger = get_logger(__name__)


class RewardsContext:
    """
    Owner of the registry, ledger and totals for one deployment.

    Attributes:
        escrow: Outbound vault port (RecordingEscrow by default)
        store: Optional persistence backend
        registry: Campaign records
        ledger: Per (user, campaign) contribution state
        totals: Global and per-campaign share totals
    """

    def __init__(
        self,
        escrow: Optional[Escrow] = None,
        store: Optional[StateStore] = None,
    ):
        self.escrow = escrow if escrow is not None else RecordingEscrow()
        self.store = store
        self.outbox = EscrowOutbox(self.escrow)
        self.registry = CampaignRegistry(self.outbox)
        self.ledger = ContributionLedger()
        self.totals = GlobalShareTotals()
        self.accountant = ShareAccountant(
            self.registry, self.ledger, self.totals
        )
        self.calculator = AllocationCalculator(
            self.registry, self.ledger, self.totals
        )
        self.settlement = ClaimSettlement(
            self.registry, self.ledger, self.totals, self.outbox
        )
        self.last_timestamp: Optional[int] = None
        self._lock = threading.RLock()

        if store is not None:
            snapshot = store.load()
            if snapshot is not None:
                self.restore(snapshot)
                _logger.info(
                    "Restored %d campaigns and %d contributions",
                    len(self.registry),
                    len(self.ledger),
                )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def _check_clock(self, now: Optional[int]) -> None:
        if (
            now is not None
            and self.last_timestamp is not None
            and now < self.last_timestamp
        ):
            raise ClockRegression(
                f"Timestamp {now} is earlier than {self.last_timestamp}",
                {"now": now, "last_timestamp": self.last_timestamp},
            )

    @contextmanager
    def _transaction(self, now: Optional[int] = None) -> Iterator[None]:
        """
        Run one mutation under the lock.

        On success the clock advances, the state is saved, and only then are
        the queued escrow requests sent. Any failure before that point rolls
        the state back and drops the queued requests.
        """
        with self._lock:
            self._check_clock(now)
            before = self.snapshot()
            try:
                yield
                if now is not None:
                    self.last_timestamp = now
                if self.store is not None:
                    self.store.save(self.snapshot())
            except Exception as e:
                self.outbox.discard()
                self.restore(before)
                if not isinstance(e, RewardsException):
                    _logger.error("Operation failed, state rolled back: %s", e)
                raise

            try:
                self.outbox.flush()
            except Exception:
                _logger.error("Escrow request failed, rolling back")
                self.restore(before)
                if self.store is not None:
                    self.store.save(before)
                raise

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def register_campaign(
        self,
        campaign_id: str,
        reward_token: str,
        pair,
        total_allocation: int,
        window_start: int,
        window_end: int,
        now: int,
        registrant: str,
    ) -> Campaign:
        with self._transaction(now):
            campaign = self.registry.register(
                campaign_id,
                reward_token,
                pair,
                total_allocation,
                window_start,
                window_end,
                now,
                registrant,
            )
        return replace(campaign)

    def record_swap(
        self,
        user: str,
        campaign_id: str,
        pair,
        volume: int,
        now: Optional[int] = None,
    ) -> int:
        user = require_address(user, "user")
        with self._transaction(now):
            return self.accountant.record_swap(user, campaign_id, pair, volume)

    def record_liquidity_added(
        self, user: str, campaign_id: str, pair, amount: int, now: int
    ) -> int:
        user = require_address(user, "user")
        with self._transaction(now):
            return self.accountant.record_liquidity_added(
                user, campaign_id, pair, amount, now
            )

    def record_liquidity_removed(
        self, user: str, campaign_id: str, pair, amount: int, now: int
    ) -> int:
        user = require_address(user, "user")
        with self._transaction(now):
            return self.accountant.record_liquidity_removed(
                user, campaign_id, pair, amount, now
            )

    def claim(self, user: str, campaign_id: str, now: int) -> ClaimReceipt:
        user = require_address(user, "user")
        with self._transaction(now):
            return self.settlement.claim(user, campaign_id, now)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_user_shares(self, user: str) -> int:
        with self._lock:
            return self.totals.user_shares(require_address(user, "user"))

    def get_total_shares(self) -> int:
        with self._lock:
            return self.totals.total_shares

    def get_campaign_shares(self, campaign_id: str) -> int:
        with self._lock:
            return self.totals.campaign_shares(campaign_id)

    def get_accrued_shares(self, user: str, campaign_id: str) -> int:
        with self._lock:
            return self.ledger.accrued_shares(
                require_address(user, "user"), str(campaign_id)
            )

    def get_contribution(
        self, user: str, campaign_id: str
    ) -> ContributionState:
        with self._lock:
            return self.ledger.get(
                require_address(user, "user"), str(campaign_id)
            )

    def get_user_allocation(self, user: str, campaign_id: str) -> int:
        with self._lock:
            return self.calculator.compute_allocation(
                require_address(user, "user"), campaign_id
            )

    def preview_claim(self, user: str, campaign_id: str, now: int) -> int:
        with self._lock:
            return self.calculator.preview_claim(
                require_address(user, "user"), campaign_id, now
            )

    def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        with self._lock:
            campaign = self.registry.get(campaign_id)
            return replace(campaign) if campaign is not None else None

    def get_campaigns(self) -> List[Campaign]:
        with self._lock:
            return [replace(c) for c in self.registry.campaigns()]

    def campaign_status(self, campaign_id: str, now: int) -> CampaignStatus:
        with self._lock:
            return self.registry.status(campaign_id, now)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def snapshot(self) -> SnapshotDict:
        """Serialize the whole state to a JSON-compatible dictionary."""
        with self._lock:
            return {
                "version": SNAPSHOT_VERSION,
                "last_timestamp": self.last_timestamp,
                "campaigns": [c.to_dict() for c in self.registry.campaigns()],
                "contributions": [s.to_dict() for s in self.ledger.states()],
                "totals": self.totals.to_dict(),
            }

    def restore(self, snapshot: SnapshotDict) -> None:
        """Replace the whole state with a snapshot (no escrow requests)."""
        with self._lock:
            self.registry.load(
                Campaign.from_dict(c) for c in snapshot.get("campaigns", [])
            )
            self.ledger.load(
                ContributionState.from_dict(s)
                for s in snapshot.get("contributions", [])
            )
            self.totals.load(snapshot.get("totals", {}))
            self.last_timestamp = snapshot.get("last_timestamp")
