"""Persistence package: save and load simulation state."""

from tribesim.persistence.checkpoint import CheckpointManager
from tribesim.persistence.serializer import StateSerializer

__all__ = ["StateSerializer", "CheckpointManager"]
