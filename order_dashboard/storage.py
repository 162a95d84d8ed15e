"""
Snapshot storage

Write-one / read-latest persistence for UploadSnapshot. Older snapshots
are superseded, never deleted. Concurrent uploads race on which becomes
latest; last write wins.
"""
from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from .models import UploadSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "snapshot_"


class SnapshotStore(ABC):
    """Base class for snapshot persistence backends"""

    @abstractmethod
    def insert_latest(self, snapshot: UploadSnapshot) -> None:
        """Persist ``snapshot`` as the newest upload"""
        pass

    @abstractmethod
    def get_latest(self) -> Optional[UploadSnapshot]:
        """Return the newest upload, or None when nothing was stored yet"""
        pass


class InMemorySnapshotStore(SnapshotStore):
    """Process-local store, used by tests and the CLI"""

    def __init__(self):
        self._snapshots: List[UploadSnapshot] = []

    def insert_latest(self, snapshot: UploadSnapshot) -> None:
        self._snapshots.append(snapshot)

    def get_latest(self) -> Optional[UploadSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    def __len__(self) -> int:
        return len(self._snapshots)


class JsonSnapshotStore(SnapshotStore):
    """
    One JSON file per upload under ``directory``.

    File names embed the upload timestamp, so the lexically greatest name
    is the latest snapshot.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path_for(self, snapshot: UploadSnapshot) -> Path:
        stamp = snapshot.submitted_at.strftime("%Y%m%dT%H%M%S%f")
        return self.directory / f"{SNAPSHOT_PREFIX}{stamp}.json"

    def snapshot_files(self) -> List[Path]:
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob(f"{SNAPSHOT_PREFIX}*.json"))

    def insert_latest(self, snapshot: UploadSnapshot) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self._path_for(snapshot)
        tmp = target.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, default=str)
        os.replace(tmp, target)
        logger.info("Saved snapshot to %s", target)

    def get_latest(self) -> Optional[UploadSnapshot]:
        files = self.snapshot_files()
        if not files:
            return None
        with open(files[-1], "r", encoding="utf-8") as f:
            data = json.load(f)
        return UploadSnapshot.from_dict(data)
