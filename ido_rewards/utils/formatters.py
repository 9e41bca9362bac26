"""Shared formatting and file utilities for commands."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from eth_utils import from_wei
from rich.console import Console
from rich.table import Table

from ido_rewards.campaigns.models import Campaign, CampaignStatus

# Shared console instance
console = Console()

_STATUS_STYLES = {
    CampaignStatus.PENDING: "[dim]Pending[/dim]",
    CampaignStatus.ACTIVE: "[green]Active[/green]",
    CampaignStatus.ENDED: "[orange3]Ended[/orange3]",
    CampaignStatus.DEPLETED: "[red]Depleted[/red]",
}


def format_address(address: str, length: int = 10) -> str:
    """
    Format an Ethereum address to show first and last characters.

    Returns:
        Formatted address like "0x1234...5678"
    """
    if not address:
        return "N/A"
    if len(address) <= length:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_timestamp(
    timestamp: Optional[int], format_str: str = "%Y-%m-%d %H:%M"
) -> str:
    """Format a Unix timestamp (UTC) to a readable date string."""
    if timestamp is None:
        return "-"
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return dt.strftime(format_str)


def format_token_amount(amount: int, decimals: int = 18) -> str:
    """Format base units as a token amount (18 decimals by default)."""
    if decimals == 18:
        return f"{from_wei(amount, 'ether'):,.4f}"
    return f"{amount / 10**decimals:,.4f}"


def format_status(status: Optional[CampaignStatus]) -> str:
    if status is None:
        return "-"
    return _STATUS_STYLES.get(status, status.value)


def save_json_output(
    data: Any,
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Returns:
        Full path to saved file
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filepath = output_path / filename

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def generate_timestamped_filename(prefix: str, extension: str = "json") -> str:
    """Generate a filename like "prefix_20240315_123456.json"."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def create_campaigns_table() -> Table:
    """Create a Rich table with standard campaign columns."""
    table = Table(
        show_header=True,
        header_style="bold cyan",
        show_lines=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("ID", width=12)
    table.add_column("Token", width=14)
    table.add_column("Pair", width=28)
    table.add_column("Status", width=10, justify="center")
    table.add_column("Window", width=35)
    table.add_column("Pool", width=14, justify="right")
    table.add_column("Claimed", width=14, justify="right")
    return table


def add_campaign_to_table(
    table: Table, campaign: Campaign, status: Optional[CampaignStatus]
) -> None:
    table.add_row(
        campaign.campaign_id,
        format_address(campaign.reward_token),
        " / ".join(format_address(a) for a in campaign.pair.as_tuple()),
        format_status(status),
        f"{format_timestamp(campaign.window_start)} → "
        f"{format_timestamp(campaign.window_end)}",
        format_token_amount(campaign.reward_pool),
        format_token_amount(campaign.total_claimed),
    )


def create_allocations_table(rows: List[Dict[str, Any]]) -> Table:
    """
    Build a table of per-user shares and allocations.

    Args:
        rows: Dicts with user, campaign_id, accrued_shares, allocation,
            phase
    """
    table = Table(
        show_header=True,
        header_style="bold cyan",
        show_lines=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("Campaign", width=12)
    table.add_column("User", width=14)
    table.add_column("Phase", width=14)
    table.add_column("Shares", justify="right")
    table.add_column("Allocation", justify="right")
    for row in rows:
        table.add_row(
            row["campaign_id"],
            format_address(row["user"]),
            row["phase"],
            format_token_amount(row["accrued_shares"]),
            format_token_amount(row["allocation"]),
        )
    return table
