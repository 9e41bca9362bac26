"""
Pluggable persistence for ledger snapshots.

A RewardsContext writes one SnapshotDict after every committed operation and
reads it back on construction. Campaign records are keyed by campaign id and
contribution records by ``user:campaign_id`` inside the snapshot, so any
key-value backend can store them; two backends ship here:

- MemoryStore: keeps the last snapshot in memory (tests, dry runs)
- JsonFileStore: one JSON document on disk, replaced atomically
"""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from ido_rewards.shared.exceptions import ConfigurationException
from ido_rewards.shared.logging import get_logger
from ido_rewards.shared.types import SnapshotDict

_logger = get_logger(__name__)

SNAPSHOT_VERSION = 1


class StateStore(Protocol):
    """Persistence backend for ledger snapshots."""

    def load(self) -> Optional[SnapshotDict]: ...

    def save(self, snapshot: SnapshotDict) -> None: ...


class MemoryStore:
    """Keeps a deep copy of the last saved snapshot."""

    def __init__(self, snapshot: Optional[SnapshotDict] = None):
        self._snapshot = copy.deepcopy(snapshot)
        self.saves = 0

    def load(self) -> Optional[SnapshotDict]:
        return copy.deepcopy(self._snapshot)

    def save(self, snapshot: SnapshotDict) -> None:
        self._snapshot = copy.deepcopy(snapshot)
        self.saves += 1


class JsonFileStore:
    """File-based snapshot store (one JSON document)."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[SnapshotDict]:
        """Read the snapshot, or None if the file does not exist yet."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationException(
                f"State file {self.path} is not valid JSON: {e}"
            ) from e

        version = data.get("version")
        if version != SNAPSHOT_VERSION:
            raise ConfigurationException(
                f"Unsupported state file version {version} in {self.path}"
            )
        return data

    def save(self, snapshot: SnapshotDict) -> None:
        """Write to a temporary file, then replace the target in one step."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        _logger.debug("Saved ledger snapshot to %s", self.path)
