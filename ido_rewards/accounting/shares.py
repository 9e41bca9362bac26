"""
ShareAccountant - converts pool activity into weighted shares.

Weighting model (shares carry the 1e18 scale; only allocations floor to
reward-token units):
- One unit of swap volume weighs WEIGHT (1.0), whenever the swap happens.
  Swap shares are kept apart from liquidity shares and are never folded.
- One unit of liquidity added at time t in [start, end] weighs
  (end - t) / (end - start): the earlier, the heavier, decaying linearly
  to zero at the window end.

Liquidity periods:
- The first addition opens a period at t and credits amount * ratio(t).
- A further addition while the period is open first folds the liquidity
  shares already accrued forward by the fraction of the window elapsed
  since the period opened, then credits the new amount and restarts the
  period at t.
  This compounding rule is an approximation of a continuous integral and
  is kept as is.
- A removal credits amount * (time provided / window length), with the
  time provided clamped to the window, and closes the period.

Every credited share is mirrored into GlobalShareTotals in the same call, so
the campaign denominator always equals the sum of accrued shares.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from ido_rewards.campaigns.models import Campaign
from ido_rewards.campaigns.registry import CampaignRegistry
from ido_rewards.ledger.ledger import ContributionLedger
from ido_rewards.ledger.models import ContributionState
from ido_rewards.ledger.totals import GlobalShareTotals
from ido_rewards.shared.exceptions import (
    CampaignMismatch,
    OutsideWindow,
    Overflow,
)
from ido_rewards.shared.fixed_point import (
    MAX_UINT256,
    WEIGHT,
    apply_ratio,
    checked_add,
    checked_mul,
    ratio,
)
from ido_rewards.shared.logging import get_logger

_logger = get_logger(__name__)


def as_uint(value: int, name: str, context: Dict[str, Any]) -> int:
    """Check an externally supplied quantity fits uint256."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    if value < 0 or value > MAX_UINT256:
        raise Overflow(f"{name} {value} is outside the uint256 range", context)
    return value


def liquidity_time_ratio(campaign: Campaign, now: int) -> int:
    """Weight of one unit of liquidity added at ``now`` (SCALE fixed point)."""
    return ratio(campaign.window_end - now, campaign.window_length)


def swap_weight(volume: int, context: Optional[Dict[str, Any]] = None) -> int:
    return checked_mul(volume, WEIGHT, context)


def finalize_period(
    state: ContributionState, campaign: Campaign, amount: int, now: int
) -> ContributionState:
    """
    Return a copy of ``state`` with its open period closed at ``now``.

    The time provided runs from open_since to min(now, window_end) and is
    clamped to [0, window length]. A closed state is returned unchanged.
    """
    if not state.is_open:
        return replace(state)

    context = {"user": state.user, "campaign_id": state.campaign_id}
    length = campaign.window_length
    time_provided = min(now, campaign.window_end) - state.open_since
    time_provided = max(0, min(time_provided, length))
    weighted = checked_mul(amount, ratio(time_provided, length), context)

    updated = replace(
        state,
        open_since=None,
        liquidity_shares=checked_add(
            state.liquidity_shares, weighted, context
        ),
        liquidity=max(0, state.liquidity - amount),
    )
    checked_add(updated.liquidity_shares, updated.swap_shares, context)
    return updated


def finalize_campaign(
    ledger: ContributionLedger, campaign: Campaign
) -> List[Tuple[ContributionState, ContributionState]]:
    """
    Close every open period of an ended campaign at its window end.

    Each period is finalized as a removal of the user's deposited liquidity
    at window_end, i.e. the full remaining window is credited.

    Returns:
        (before, after) pairs for the states that were open; nothing is
        written to the ledger
    """
    return [
        (state, finalize_period(
            state, campaign, state.liquidity, campaign.window_end
        ))
        for state in ledger.for_campaign(campaign.campaign_id)
        if state.is_open
    ]


class ShareAccountant:
    """Records swaps and liquidity changes against campaigns."""

    def __init__(
        self,
        registry: CampaignRegistry,
        ledger: ContributionLedger,
        totals: GlobalShareTotals,
    ):
        self.registry = registry
        self.ledger = ledger
        self.totals = totals

    def _matched_campaign(self, campaign_id: str, pair) -> Campaign:
        campaign = self.registry.require(campaign_id)
        context = {"campaign_id": campaign.campaign_id}
        try:
            matched = self.registry.matches(pair, campaign.pair)
        except (TypeError, ValueError) as e:
            raise CampaignMismatch(f"Malformed pool pair: {e}", context) from e
        if not matched:
            raise CampaignMismatch(
                f"Pool pair does not match campaign {campaign.campaign_id}",
                context,
            )
        return campaign

    def _commit(
        self, before: ContributionState, after: ContributionState
    ) -> int:
        """Mirror the accrued-share change into the totals, then store."""
        delta = after.accrued_shares - before.accrued_shares
        self.totals.apply(after.user, delta, after.campaign_id, delta)
        self.ledger.put(after)
        return delta

    def record_swap(
        self, user: str, campaign_id: str, pair, volume: int
    ) -> int:
        """
        Credit swap volume to a user.

        Swaps are not window-gated. Once the user has claimed the campaign,
        further volume only counts towards the global totals.

        Returns:
            int: Weighted shares credited (1e18 scale)
        """
        campaign = self._matched_campaign(campaign_id, pair)
        context = {"user": user, "campaign_id": campaign.campaign_id}
        volume = as_uint(volume, "volume", context)
        weighted = swap_weight(volume, context)

        state = self.ledger.get(user, campaign.campaign_id)
        if state.claimed:
            self.totals.apply(user, weighted)
            _logger.debug(
                "Swap by %s after claim on %s: %s global-only shares",
                user,
                campaign.campaign_id,
                weighted,
            )
            return weighted

        updated = replace(
            state,
            swap_shares=checked_add(state.swap_shares, weighted, context),
        )
        checked_add(updated.liquidity_shares, updated.swap_shares, context)
        self._commit(state, updated)
        _logger.debug(
            "Swap by %s on %s: volume=%s shares=%s",
            user,
            campaign.campaign_id,
            volume,
            weighted,
        )
        return weighted

    def record_liquidity_added(
        self, user: str, campaign_id: str, pair, amount: int, now: int
    ) -> int:
        """
        Credit liquidity added at ``now`` and open (or extend) the period.

        Only liquidity shares are folded forward; swap shares are left as is.

        Returns:
            int: Change of the user's accrued shares (1e18 scale)

        Raises:
            CampaignMismatch: If the pool pair differs from the campaign's
            OutsideWindow: If now is outside [window_start, window_end]
        """
        campaign = self._matched_campaign(campaign_id, pair)
        context = {"user": user, "campaign_id": campaign.campaign_id, "now": now}
        amount = as_uint(amount, "amount", context)
        if not campaign.is_within_window(now):
            raise OutsideWindow(
                f"Liquidity added at {now} outside window "
                f"[{campaign.window_start}, {campaign.window_end}]",
                context,
            )

        weighted = checked_mul(
            amount, liquidity_time_ratio(campaign, now), context
        )
        state = self.ledger.get(user, campaign.campaign_id)

        liquidity_shares = state.liquidity_shares
        if state.is_open:
            elapsed = ratio(now - state.open_since, campaign.window_length)
            liquidity_shares = checked_add(
                liquidity_shares,
                apply_ratio(liquidity_shares, elapsed, context),
                context,
            )
        liquidity_shares = checked_add(liquidity_shares, weighted, context)

        updated = replace(
            state,
            open_since=now,
            liquidity_shares=liquidity_shares,
            liquidity=checked_add(state.liquidity, amount, context),
        )
        checked_add(updated.liquidity_shares, updated.swap_shares, context)
        delta = self._commit(state, updated)
        _logger.debug(
            "Liquidity added by %s on %s at %s: amount=%s weighted=%s delta=%s",
            user,
            campaign.campaign_id,
            now,
            amount,
            weighted,
            delta,
        )
        return delta

    def record_liquidity_removed(
        self, user: str, campaign_id: str, pair, amount: int, now: int
    ) -> int:
        """
        Credit the time liquidity was provided and close the period.

        No-op (returns 0) when no period is open.
        """
        campaign = self._matched_campaign(campaign_id, pair)
        context = {"user": user, "campaign_id": campaign.campaign_id, "now": now}
        amount = as_uint(amount, "amount", context)

        state = self.ledger.get(user, campaign.campaign_id)
        if not state.is_open:
            _logger.debug(
                "Liquidity removed by %s on %s with no open period",
                user,
                campaign.campaign_id,
            )
            return 0

        delta = self._commit(state, finalize_period(state, campaign, amount, now))
        _logger.debug(
            "Liquidity removed by %s on %s at %s: amount=%s delta=%s",
            user,
            campaign.campaign_id,
            now,
            amount,
            delta,
        )
        return delta
