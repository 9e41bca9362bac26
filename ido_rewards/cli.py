#!/usr/bin/env python3
"""
Unified CLI for the IDO Rewards toolkit.

Examples:
  - Replay an event log and print allocations
    ido-rewards replay events.json --now 1764900000 --output state.json

  - Inspect a saved state
    ido-rewards campaign --state output/state.json --campaign ido-1 --now 1764900000
    ido-rewards allocation --state output/state.json --campaign ido-1 --user 0x...
"""

import argparse
from typing import List, Optional

from ido_rewards.commands.helpers import (
    allocation_rows,
    handle_command_error,
    open_context,
)
from ido_rewards.context import RewardsContext
from ido_rewards.replay import load_events, replay_events
from ido_rewards.shared.addresses import normalize_address
from ido_rewards.shared.config import load_settings
from ido_rewards.shared.logging import set_log_level
from ido_rewards.shared.results import ErrorSeverity
from ido_rewards.utils.formatters import (
    add_campaign_to_table,
    console,
    create_allocations_table,
    create_campaigns_table,
    format_address,
    format_status,
    format_timestamp,
    format_token_amount,
    generate_timestamped_filename,
    save_json_output,
)


def cmd_replay(args: argparse.Namespace) -> None:
    settings = load_settings()
    events = load_events(args.events_file)

    ctx = RewardsContext()
    summary, _ = replay_events(ctx, events)
    now = args.now if args.now is not None else ctx.last_timestamp

    if ctx.get_campaigns():
        table = create_campaigns_table()
        for campaign in ctx.get_campaigns():
            status = campaign.status(now) if now is not None else None
            add_campaign_to_table(table, campaign, status)
        console.print(table)
        console.print()
        console.print(create_allocations_table(allocation_rows(ctx, now)))

    console.print(
        f"\nEvents: {summary.events_applied}/{summary.events_total} applied, "
        f"{summary.events_rejected} rejected, "
        f"{summary.warning_count()} warnings"
    )
    for error in summary.errors:
        color = "yellow" if error.severity == ErrorSeverity.WARNING else "red"
        console.print(
            f"  [{color}]#{error.context.get('index', '?')} "
            f"{error.source}[/{color}] "
            f"{error.kind or error.severity.value}: {error.message}"
        )

    filename = args.output or generate_timestamped_filename("ido_state")
    save_json_output(ctx.snapshot(), filename, output_dir=settings.output_dir)
    if args.summary:
        save_json_output(
            summary.to_dict(), args.summary, output_dir=settings.output_dir
        )


def _state_file(args: argparse.Namespace) -> str:
    state_file = args.state or load_settings().state_file
    if not state_file:
        raise ValueError("No state file: pass --state or set IDO_STATE_FILE")
    return state_file


def cmd_campaign(args: argparse.Namespace) -> None:
    state_file = _state_file(args)
    ctx = open_context(state_file)
    campaign = ctx.get_campaign(args.campaign)
    if campaign is None:
        raise ValueError(f"Campaign {args.campaign} not found in {state_file}")

    now = args.now if args.now is not None else ctx.last_timestamp
    console.print(f"[bold]Campaign {campaign.campaign_id}[/bold]")
    if now is not None:
        console.print(f"Status: {format_status(campaign.status(now))}")
    console.print(f"Reward token: {campaign.reward_token}")
    console.print(
        f"Pair: {campaign.pair.asset0} / {campaign.pair.asset1}"
    )
    console.print(
        f"Window: {format_timestamp(campaign.window_start)} → "
        f"{format_timestamp(campaign.window_end)} UTC"
    )
    console.print(
        f"Pool: {format_token_amount(campaign.reward_pool)} / "
        f"{format_token_amount(campaign.total_allocation)}"
    )
    console.print(
        "Shares: "
        f"{format_token_amount(ctx.get_campaign_shares(campaign.campaign_id))}"
    )

    if args.json:
        save_json_output(
            campaign.to_dict(),
            args.output or f"campaign_{campaign.campaign_id}.json",
            output_dir=load_settings().output_dir,
        )


def cmd_allocation(args: argparse.Namespace) -> None:
    user = normalize_address(args.user, "user")
    state_file = _state_file(args)
    ctx = open_context(state_file)
    campaign = ctx.get_campaign(args.campaign)
    if campaign is None:
        raise ValueError(f"Campaign {args.campaign} not found in {state_file}")

    state = ctx.get_contribution(user, campaign.campaign_id)
    console.print(
        f"[bold]{format_address(user)} in {campaign.campaign_id}[/bold]"
    )
    console.print(f"Phase: {state.phase.value}")
    console.print(f"Open since: {format_timestamp(state.open_since)}")
    console.print(
        f"Accrued shares: {format_token_amount(state.accrued_shares)}"
    )
    console.print(
        f"Global shares: {format_token_amount(ctx.get_user_shares(user))}"
    )
    if state.claimed:
        console.print(
            f"[green]Claimed {format_token_amount(state.claimed_amount)}[/green]"
        )
        return
    console.print(
        "Allocation (snapshot): "
        f"{format_token_amount(ctx.get_user_allocation(user, campaign.campaign_id))}"
    )
    if args.now is not None and campaign.has_ended(args.now):
        preview = ctx.preview_claim(user, campaign.campaign_id, args.now)
        console.print(f"Claimable now: {format_token_amount(preview)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ido-rewards",
        description="Unified CLI for the IDO Rewards toolkit",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # replay
    p_rp = sub.add_parser(
        "replay", help="Apply an event log and show allocations"
    )
    p_rp.add_argument("events_file", type=str)
    p_rp.add_argument(
        "--now", type=int, help="Timestamp used for status and previews"
    )
    p_rp.add_argument("--output", type=str, help="State output filename")
    p_rp.add_argument("--summary", type=str, help="Summary output filename")
    p_rp.set_defaults(func=cmd_replay)

    # campaign
    p_c = sub.add_parser("campaign", help="Show a campaign from a state file")
    p_c.add_argument(
        "--state", type=str, help="State file (default IDO_STATE_FILE)"
    )
    p_c.add_argument("--campaign", type=str, required=True)
    p_c.add_argument("--now", type=int)
    p_c.add_argument("--json", action="store_true", help="Output JSON")
    p_c.add_argument("--output", type=str, help="Output filename")
    p_c.set_defaults(func=cmd_campaign)

    # allocation
    p_a = sub.add_parser(
        "allocation", help="Show a user's shares and allocation"
    )
    p_a.add_argument(
        "--state", type=str, help="State file (default IDO_STATE_FILE)"
    )
    p_a.add_argument("--campaign", type=str, required=True)
    p_a.add_argument("--user", type=str, required=True)
    p_a.add_argument("--now", type=int)
    p_a.set_defaults(func=cmd_allocation)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        set_log_level(load_settings().log_level)
        if args.verbose:
            set_log_level("DEBUG")
        args.func(args)
    except Exception as e:
        handle_command_error(e)


if __name__ == "__main__":
    main()
