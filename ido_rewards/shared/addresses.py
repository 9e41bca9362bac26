"""Address normalization shared by the core and the CLI."""

from eth_utils import is_address, to_checksum_address

from ido_rewards.shared.exceptions import InvalidAddress

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_zero_address(address: str) -> bool:
    return int(address, 16) == 0


def normalize_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def require_address(address: str, param_name: str = "address") -> str:
    """normalize_address for core inputs: raises InvalidAddress instead."""
    try:
        return normalize_address(address, param_name)
    except ValueError as e:
        raise InvalidAddress(str(e), {param_name: address}) from e
