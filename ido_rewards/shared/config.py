"""
Environment-driven settings for the IDO Rewards toolkit.

Values are read once from the process environment, after a ``.env`` file
(if any) has been loaded with python-dotenv.

Variables:
- IDO_LOG_LEVEL: log level name (default INFO)
- IDO_STATE_FILE: JSON file used to persist ledger state (optional)
- IDO_RUNTIME_ADDRESS: address of the authorized pool runtime (optional)
- IDO_OUTPUT_DIR: directory for CLI JSON output (default "output")
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address

from ido_rewards.shared.exceptions import ConfigurationException

load_dotenv()

_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration."""

    log_level: str = "INFO"
    state_file: Optional[str] = None
    runtime_address: Optional[str] = None
    output_dir: str = "output"


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ConfigurationException: If a variable holds an invalid value
    """
    log_level = os.getenv("IDO_LOG_LEVEL", "INFO").upper()
    if log_level not in _VALID_LOG_LEVELS:
        raise ConfigurationException(
            f"Invalid IDO_LOG_LEVEL: {log_level}. "
            f"Must be one of {sorted(_VALID_LOG_LEVELS)}"
        )

    runtime_address = os.getenv("IDO_RUNTIME_ADDRESS") or None
    if runtime_address is not None:
        if not is_address(runtime_address):
            raise ConfigurationException(
                f"Invalid IDO_RUNTIME_ADDRESS: {runtime_address} "
                "is not a valid Ethereum address"
            )
        runtime_address = to_checksum_address(runtime_address)

    return Settings(
        log_level=log_level,
        state_file=os.getenv("IDO_STATE_FILE") or None,
        runtime_address=runtime_address,
        output_dir=os.getenv("IDO_OUTPUT_DIR", "output"),
    )
