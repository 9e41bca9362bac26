from ido_rewards.utils.formatters import (
    console,
    format_address,
    format_timestamp,
    format_token_amount,
    save_json_output,
)

__all__ = [
    "console",
    "format_address",
    "format_timestamp",
    "format_token_amount",
    "save_json_output",
]
