"""
Event-log replay.

Applies a recorded sequence of pool notifications and claims to a
RewardsContext. Each event is applied independently: a rejected event is
reported in the ReplaySummary and the replay moves on, exactly as the pool
runtime would keep running after a failed hook call. Events that are
applied but change nothing in the campaign (a removal without an open
period, a swap after the user claimed) carry a warning.

Event format (JSON list, or {"events": [...]}):

    {"type": "register", "campaign_id": "ido-1", "reward_token": "0x..",
     "pair": ["0x..", "0x.."], "total_allocation": 1000,
     "window_start": 100, "window_end": 200, "timestamp": 50,
     "registrant": "0x.."}
    {"type": "swap", "user": "0x..", "campaign_id": "ido-1",
     "pair": [...], "volume": -250, "timestamp": 120}
    {"type": "add" | "remove", "user": "0x..", "campaign_id": "ido-1",
     "pair": [...], "amount": 100, "timestamp": 101}
    {"type": "claim", "user": "0x..", "campaign_id": "ido-1",
     "timestamp": 201}

Large quantities may be given as decimal strings.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

from ido_rewards.context import RewardsContext
from ido_rewards.shared.logging import get_logger
from ido_rewards.shared.results import ReplaySummary, Result

_logger = get_logger(__name__)

EVENT_TYPES = ("register", "swap", "add", "remove", "claim")


def load_events(path) -> List[Dict[str, Any]]:
    """Read an event log file."""
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("events", [])
    if not isinstance(data, list):
        raise ValueError(f"Event log {path} must hold a list of events")
    return data


def _int(event: Dict[str, Any], key: str) -> int:
    return int(event[key])


def _apply_register(ctx: RewardsContext, e: Dict[str, Any]) -> Result:
    campaign = ctx.register_campaign(
        e["campaign_id"],
        e["reward_token"],
        e["pair"],
        _int(e, "total_allocation"),
        _int(e, "window_start"),
        _int(e, "window_end"),
        _int(e, "timestamp"),
        e["registrant"],
    )
    return Result.ok(campaign.to_dict())


def _apply_swap(ctx: RewardsContext, e: Dict[str, Any]) -> Result:
    timestamp = e.get("timestamp")
    already_claimed = ctx.get_contribution(e["user"], e["campaign_id"]).claimed
    result = Result.ok(
        ctx.record_swap(
            e["user"],
            e["campaign_id"],
            e["pair"],
            abs(_int(e, "volume")),
            now=int(timestamp) if timestamp is not None else None,
        )
    )
    if already_claimed:
        result.add_warning(
            "swap", "Campaign already claimed, credited to global totals only"
        )
    return result


def _apply_add(ctx: RewardsContext, e: Dict[str, Any]) -> Result:
    return Result.ok(
        ctx.record_liquidity_added(
            e["user"], e["campaign_id"], e["pair"], _int(e, "amount"),
            _int(e, "timestamp"),
        )
    )


def _apply_remove(ctx: RewardsContext, e: Dict[str, Any]) -> Result:
    was_open = ctx.get_contribution(e["user"], e["campaign_id"]).is_open
    result = Result.ok(
        ctx.record_liquidity_removed(
            e["user"], e["campaign_id"], e["pair"], _int(e, "amount"),
            _int(e, "timestamp"),
        )
    )
    if not was_open:
        result.add_warning(
            "remove", "No open liquidity period, nothing credited"
        )
    return result


def _apply_claim(ctx: RewardsContext, e: Dict[str, Any]) -> Result:
    receipt = ctx.claim(e["user"], e["campaign_id"], _int(e, "timestamp"))
    return Result.ok(receipt.to_dict())


_HANDLERS: Dict[str, Callable[[RewardsContext, Dict[str, Any]], Result]] = {
    "register": _apply_register,
    "swap": _apply_swap,
    "add": _apply_add,
    "remove": _apply_remove,
    "claim": _apply_claim,
}


def apply_event(ctx: RewardsContext, event: Dict[str, Any]) -> Result:
    """Apply one event, turning any failure into a failed Result."""
    event_type = event.get("type")
    context = {
        k: event[k]
        for k in ("campaign_id", "user", "timestamp")
        if k in event
    }
    handler = _HANDLERS.get(event_type)
    if handler is None:
        return Result.fail_with_message(
            source=str(event_type),
            message=f"Unknown event type {event_type!r}",
            context=context,
        )
    try:
        result = handler(ctx, event)
    except (KeyError, TypeError, ValueError) as e:
        return Result.fail_with_message(
            source=event_type,
            message=f"Malformed {event_type} event: {e}",
            context=context,
            exception=e,
        )
    except Exception as e:
        return Result.from_exception(event_type, e, context)
    for warning in result.errors:
        warning.context = {**context, **warning.context}
    return result


def replay_events(
    ctx: RewardsContext, events: List[Dict[str, Any]]
) -> Tuple[ReplaySummary, List[Result]]:
    """
    Apply every event in order.

    Returns:
        Tuple of the summary and the per-event results

    Stops early only on a CRITICAL error (an exception that is not a core
    rewards error).
    """
    summary = ReplaySummary()
    results: List[Result] = []
    for index, event in enumerate(events):
        result = apply_event(ctx, event)
        for error in result.errors:
            error.context.setdefault("index", index)
        summary.record(str(event.get("type")), result)
        results.append(result)
        if not result.success:
            _logger.warning(
                "Event %d (%s) rejected: %s",
                index,
                event.get("type"),
                "; ".join(result.get_error_messages()),
            )
        elif result.has_warnings():
            _logger.info(
                "Event %d (%s): %s",
                index,
                event.get("type"),
                "; ".join(result.get_error_messages()),
            )
        if summary.has_critical_errors():
            _logger.error("Critical error at event %d, stopping replay", index)
            break
    return summary, results
