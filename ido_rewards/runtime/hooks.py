"""
PoolRuntimeAdapter - inbound notifications from the pool runtime.

The pool runtime calls these hooks after a swap or a liquidity change. Only
the configured runtime address may call them; the adapter checks the caller,
translates the notification into a ShareAccountant operation on the
RewardsContext and lets any core error propagate unchanged.
"""

from typing import Optional, Union

from ido_rewards.campaigns.models import SwapDirection
from ido_rewards.context import RewardsContext
from ido_rewards.shared.addresses import normalize_address
from ido_rewards.shared.config import Settings, load_settings
from ido_rewards.shared.exceptions import (
    ConfigurationException,
    RewardsException,
    Unauthorized,
)
from ido_rewards.shared.logging import get_logger

_logger = get_logger(__name__)


class PoolRuntimeAdapter:
    """
    Entry point for pool activity notifications.

    Attributes:
        context: Ledger handle receiving the contributions
        runtime_address: Only caller allowed to notify
    """

    def __init__(self, context: RewardsContext, runtime_address: str):
        self.context = context
        self.runtime_address = normalize_address(
            runtime_address, "runtime_address"
        )

    @classmethod
    def from_settings(
        cls, context: RewardsContext, settings: Optional[Settings] = None
    ) -> "PoolRuntimeAdapter":
        """Build an adapter for the runtime named by IDO_RUNTIME_ADDRESS."""
        settings = settings or load_settings()
        if settings.runtime_address is None:
            raise ConfigurationException(
                "IDO_RUNTIME_ADDRESS is required to accept pool notifications"
            )
        return cls(context, settings.runtime_address)

    def _authorize(self, caller: str, hook: str) -> None:
        try:
            caller = normalize_address(caller, "caller")
        except ValueError:
            caller = None
        if caller != self.runtime_address:
            _logger.warning("Rejected %s from unauthorized caller", hook)
            raise Unauthorized(
                f"{hook} may only be called by the pool runtime",
                {"hook": hook},
            )

    def on_swap(
        self,
        caller: str,
        pool_pair,
        user: str,
        campaign_id: str,
        signed_volume: int,
        direction: Union[SwapDirection, str],
        timestamp: Optional[int] = None,
    ) -> int:
        """
        Record a swap. The weight uses the absolute swap volume.

        Returns:
            int: Weighted shares credited
        """
        self._authorize(caller, "on_swap")
        direction = SwapDirection(direction)
        try:
            shares = self.context.record_swap(
                user, campaign_id, pool_pair, abs(signed_volume), now=timestamp
            )
        except RewardsException as e:
            _logger.warning("Swap rejected for %s: %s", campaign_id, e.message)
            raise
        _logger.debug(
            "Swap %s on %s by %s credited %s shares",
            direction.value,
            campaign_id,
            user,
            shares,
        )
        return shares

    def on_liquidity_added(
        self,
        caller: str,
        pool_pair,
        user: str,
        campaign_id: str,
        amount: int,
        timestamp: int,
    ) -> int:
        self._authorize(caller, "on_liquidity_added")
        try:
            return self.context.record_liquidity_added(
                user, campaign_id, pool_pair, amount, timestamp
            )
        except RewardsException as e:
            _logger.warning(
                "Liquidity addition rejected for %s: %s",
                campaign_id,
                e.message,
            )
            raise

    def on_liquidity_removed(
        self,
        caller: str,
        pool_pair,
        user: str,
        campaign_id: str,
        amount: int,
        timestamp: int,
    ) -> int:
        self._authorize(caller, "on_liquidity_removed")
        try:
            return self.context.record_liquidity_removed(
                user, campaign_id, pool_pair, amount, timestamp
            )
        except RewardsException as e:
            _logger.warning(
                "Liquidity removal rejected for %s: %s",
                campaign_id,
                e.message,
            )
            raise
