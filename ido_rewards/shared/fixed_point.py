"""
Fixed-point arithmetic used by the share accounting.

Weights and time ratios are integers scaled by ``SCALE`` (1e18). Results are
bounded to the uint256 range: every product and sum is checked before it is
used, so an Overflow is raised before anything can be written back to the
ledger. Divisions floor; rounding always favours the reward pool.
"""

from typing import Any, Dict, Optional

from ido_rewards.shared.exceptions import Overflow

SCALE = 10**18
WEIGHT = SCALE  # weight of one unit of swap volume (1.0)
MAX_UINT256 = (2**256) - 1


def _check(value: int, op: str, context: Optional[Dict[str, Any]]) -> int:
    if value < 0 or value > MAX_UINT256:
        raise Overflow(f"uint256 overflow in {op}", context=context)
    return value


def checked_add(a: int, b: int, context: Optional[Dict[str, Any]] = None) -> int:
    return _check(a + b, "add", context)


def checked_sub(a: int, b: int, context: Optional[Dict[str, Any]] = None) -> int:
    """Subtract, raising Overflow on underflow below zero."""
    return _check(a - b, "sub", context)


def checked_mul(a: int, b: int, context: Optional[Dict[str, Any]] = None) -> int:
    return _check(a * b, "mul", context)


def mul_div(
    a: int, b: int, denominator: int, context: Optional[Dict[str, Any]] = None
) -> int:
    """
    Compute floor(a * b / denominator) with the product checked first.

    Args:
        a: First factor (non-negative)
        b: Second factor (non-negative)
        denominator: Strictly positive divisor

    Returns:
        The floored quotient

    Raises:
        Overflow: If a * b exceeds the uint256 range
        ZeroDivisionError: If denominator is zero
    """
    if denominator <= 0:
        raise ZeroDivisionError("mul_div denominator must be positive")
    return checked_mul(a, b, context) // denominator


def ratio(numerator: int, denominator: int) -> int:
    """Return numerator / denominator as a SCALE fixed-point value (floored)."""
    return mul_div(numerator, SCALE, denominator)


def apply_ratio(
    amount: int, scaled_ratio: int, context: Optional[Dict[str, Any]] = None
) -> int:
    """Multiply an amount by a SCALE fixed-point ratio, flooring the result."""
    return mul_div(amount, scaled_ratio, SCALE, context)
