"""IDO Rewards Toolkit - contribution-weighted reward accounting for launch pools."""

__version__ = "0.1.0"

from .context import RewardsContext
from .escrow import RecordingEscrow
from .runtime import PoolRuntimeAdapter

__all__ = ["RewardsContext", "RecordingEscrow", "PoolRuntimeAdapter"]
