"""
Exception hierarchy for the IDO Rewards toolkit.

Every failure raised by the accounting core is terminal for the call that
triggered it: nothing is retried internally and no state is mutated before
the exception is raised. The caller (pool runtime, CLI, client) decides how
to report it.

Exception Categories:
- NonRetryableException: Permanent failures that won't benefit from retry
- ConfigurationException: Startup/config errors that prevent operation
- RewardsException: Business rule violations raised by the core

Core errors:
- AlreadyRegistered, InvalidWindow, InvalidToken, InvalidAllocation (registry)
- CampaignNotFound, CampaignMismatch, OutsideWindow (contributions)
- CampaignNotEnded, NothingToClaim (claims)
- Overflow, ClockRegression (arithmetic / time guards)
- Unauthorized (runtime adapter)
- InvalidAddress (malformed user or registrant)
"""

from typing import Any, Dict, Optional


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Invalid input data
    - Missing required data
    - Business logic violations
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are missing
    - Invalid configuration values
    """

    pass


class RewardsException(NonRetryableException):
    """
    Base class for every error raised by the accounting core.

    Attributes:
        message: Human-readable error description
        context: Identifiers involved (campaign_id, user, timestamps...)
    """

    def __init__(
        self, message: str, context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.context = context or {}

    @property
    def kind(self) -> str:
        """Error kind name, as reported to the runtime."""
        return type(self).__name__


class AlreadyRegistered(RewardsException):
    """Campaign id is already present in the registry."""


class InvalidWindow(RewardsException):
    """Window starts in the past or does not end after it starts."""


class InvalidToken(RewardsException):
    """Reward token is the zero address or not an address at all."""


class InvalidAllocation(RewardsException):
    """Total allocation is not a positive integer."""


class CampaignNotFound(RewardsException):
    """No campaign registered under the given id."""


class CampaignMismatch(RewardsException):
    """Activity pool pair does not match the campaign pool pair."""


class OutsideWindow(RewardsException):
    """Liquidity contribution outside [window_start, window_end]."""


class CampaignNotEnded(RewardsException):
    """Claim attempted while the campaign window is still open."""


class NothingToClaim(RewardsException):
    """Computed allocation is zero (no shares or already claimed)."""


class Overflow(RewardsException):
    """Checked uint256 arithmetic would overflow."""


class ClockRegression(RewardsException):
    """Supplied timestamp is earlier than the last observed one."""


class Unauthorized(RewardsException):
    """Notification does not originate from the authorized pool runtime."""


class InvalidAddress(RewardsException):
    """A user or registrant address is malformed."""
