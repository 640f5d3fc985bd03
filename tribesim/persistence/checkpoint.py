"""On-disk checkpoints of a running simulation.

Files are named ``{day:06d}_[{label}_]{timestamp}.json`` so that a plain
directory listing already sorts them by day.
"""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from tribesim.errors import SerializationError
from tribesim.persistence.serializer import StateSerializer

if TYPE_CHECKING:
    from tribesim.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S%f"
_NAME_PATTERN = re.compile(r"^(?P<day>\d{6,})_(?:(?P<label>.+)_)?(?P<timestamp>\d{20})$")


def _describe(path: Path) -> dict | None:
    """Metadata for a checkpoint file, or None if the name is not ours."""
    match = _NAME_PATTERN.match(path.stem)
    if match is None:
        return None
    return {
        "path": str(path),
        "day": int(match["day"]),
        "timestamp": match["timestamp"],
        "label": match["label"] or "",
    }


class CheckpointManager:
    """Saves, loads and rotates snapshot files in one directory."""

    def __init__(
        self,
        checkpoint_dir: str = "data/checkpoints",
        auto_interval: int = 0,
        max_checkpoints: int = 10,
    ):
        """Initialize checkpoint manager.

        Args:
            checkpoint_dir: Directory holding the checkpoint files
            auto_interval: Days between automatic checkpoints (0 disables them)
            max_checkpoints: How many files automatic checkpointing keeps
        """
        self._dir = Path(checkpoint_dir)
        self._interval = auto_interval
        self._max = max_checkpoints
        self._serializer = StateSerializer()
        self._last_checkpoint_day = 0

        self._dir.mkdir(parents=True, exist_ok=True)

    def save(self, engine: SimulationEngine, label: str = "") -> str:
        """Write the engine's snapshot and return the new file's path."""
        stamp = datetime.now(UTC).strftime(TIMESTAMP_FORMAT)
        name = "_".join(part for part in (f"{engine.state.day:06d}", label, stamp) if part)
        target = self._dir / f"{name}.json"
        staging = self._dir / f".{target.name}.tmp"

        payload = json.dumps(self._serializer.serialize(engine), indent=2)
        try:
            staging.write_text(payload)
            os.replace(staging, target)
        finally:
            staging.unlink(missing_ok=True)

        logger.info(f"Saved checkpoint {target}")
        return str(target)

    def load(self, path: str, config_override: dict | None = None) -> SimulationEngine:
        """Build a new engine from a checkpoint file.

        Args:
            path: Checkpoint to read
            config_override: Config fields replacing the stored ones

        Raises:
            SerializationError: If the file is not valid JSON or not a snapshot
            OSError: If the file cannot be read
        """
        text = Path(path).read_text()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Checkpoint {path} is not valid JSON: {e}") from e
        return self._serializer.deserialize(data, config_override)

    def auto_checkpoint(self, engine: SimulationEngine) -> str | None:
        """Save once ``auto_interval`` days have passed since the last save.

        Call once per day. Older files beyond ``max_checkpoints`` are removed.
        """
        if self._interval <= 0:
            return None

        day = engine.state.day
        if day - self._last_checkpoint_day < self._interval:
            return None

        path = self.save(engine, label="auto")
        self._last_checkpoint_day = day
        self._prune_old()
        return path

    def list_checkpoints(self) -> list[dict]:
        """Checkpoint metadata (path, day, timestamp, label), oldest first."""
        found = (_describe(p) for p in self._dir.glob("*.json") if not p.name.startswith("."))
        return sorted(
            (info for info in found if info is not None),
            key=lambda info: (info["day"], info["timestamp"]),
        )

    def latest_checkpoint(self) -> str | None:
        checkpoints = self.list_checkpoints()
        return checkpoints[-1]["path"] if checkpoints else None

    def _prune_old(self) -> None:
        checkpoints = self.list_checkpoints()
        excess = len(checkpoints) - self._max
        for info in checkpoints[: max(0, excess)]:
            Path(info["path"]).unlink()
            logger.debug(f"Pruned checkpoint {info['path']}")
