"""Shared command helpers and utilities."""

import sys
from typing import Any, Dict, List, Optional

from rich import print as rprint

from ido_rewards.context import RewardsContext
from ido_rewards.shared.exceptions import NonRetryableException
from ido_rewards.storage.store import JsonFileStore


def handle_command_error(error: Exception) -> None:
    """
    Standard error handling for commands: print and exit(1).

    Core rewards errors are printed with their kind so the user sees
    e.g. "NothingToClaim" rather than a bare message.
    """
    if isinstance(error, NonRetryableException):
        rprint(f"[red]{type(error).__name__}:[/red] {error.message}")
    elif isinstance(error, ValueError):
        rprint(f"[red]Error:[/red] {str(error)}")
    else:
        rprint(f"[red]Unexpected error:[/red] {str(error)}")
    sys.exit(1)


def open_context(state_file: Optional[str]) -> RewardsContext:
    """Open a context backed by a JSON state file (or in memory)."""
    if state_file:
        return RewardsContext(store=JsonFileStore(state_file))
    return RewardsContext()


def allocation_rows(
    ctx: RewardsContext, now: Optional[int] = None
) -> List[Dict[str, Any]]:
    """
    Per (user, campaign) rows for display.

    With ``now`` after a campaign's end, the allocation shown is the claim
    preview (open periods virtually finalized); otherwise the snapshot.
    """
    rows = []
    for state in sorted(
        ctx.ledger.states(), key=lambda s: (s.campaign_id, s.user)
    ):
        campaign = ctx.get_campaign(state.campaign_id)
        if now is not None and campaign.has_ended(now):
            allocation = ctx.preview_claim(state.user, state.campaign_id, now)
        else:
            allocation = ctx.get_user_allocation(state.user, state.campaign_id)
        rows.append(
            {
                "campaign_id": state.campaign_id,
                "user": state.user,
                "phase": state.phase.value,
                "accrued_shares": state.accrued_shares,
                "allocation": (
                    state.claimed_amount if state.claimed else allocation
                ),
            }
        )
    return rows
