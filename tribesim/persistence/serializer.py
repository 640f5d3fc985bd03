"""State serialization: convert SimulationEngine to/from dict.

The snapshot holds the day counter, the victory latch, every agent (living
and dead) and the message log under ``state``, and one entry per satellite
ledger under ``subsystems``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError

from tribesim.errors import SerializationError, UnsupportedSchemaError
from tribesim.simulation.entities import Agent
from tribesim.systems.achievements import VictoryResult
from tribesim.systems.technology import TechTree

if TYPE_CHECKING:
    from tribesim.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)

# Subsystem key -> engine attribute; each exposes serialize() / deserialize(data)
SUBSYSTEMS = {
    "currency": "currency",
    "territory": "territory",
    "buildings": "buildings",
    "diplomacy": "diplomacy",
    "events": "events",
    "achievements": "achievements",
    "quests": "quests",
}


class StateSerializer:
    """Serialize and deserialize full simulation state."""

    SCHEMA_VERSION = 1

    def serialize(self, engine: SimulationEngine) -> dict:
        """Serialize full engine state to dict.

        Args:
            engine: The simulation engine to serialize

        Returns:
            JSON-compatible dictionary containing all engine state
        """
        victory = engine.state.victory
        subsystems = {key: getattr(engine, attr).serialize() for key, attr in SUBSYSTEMS.items()}
        subsystems["technology"] = {
            tribe: tree.serialize() for tribe, tree in engine.tech_trees.items()
        }

        return {
            "schema_version": self.SCHEMA_VERSION,
            "timestamp": datetime.now(UTC).isoformat(),
            "config": engine.config.model_dump(),
            "state": {
                "day": engine.state.day,
                "victory": asdict(victory) if victory else None,
                "rng": self._serialize_rng(engine),
                "agents": [agent.to_dict() for agent in engine.registry.all_agents()],
                "messages": engine.messages.serialize(),
            },
            "subsystems": subsystems,
        }

    def deserialize(self, data: dict, config_override: dict | None = None) -> SimulationEngine:
        """Reconstruct a new engine from a serialized dict.

        Args:
            data: Serialized state dictionary
            config_override: Optional config fields to override (for branching)

        Returns:
            Reconstructed SimulationEngine
        """
        self._check_version(data)

        from tribesim.config import SimulationConfig

        config_dict = dict(data.get("config", {}))
        if config_override:
            config_dict.update(config_override)
        try:
            config = SimulationConfig(**config_dict)
        except ValidationError as e:
            raise SerializationError(f"Snapshot config is invalid: {e}") from e

        from tribesim.simulation.engine import SimulationEngine

        engine = SimulationEngine(config)
        self.restore(engine, data)
        return engine

    def restore(self, engine: SimulationEngine, data: dict) -> None:
        """Load a snapshot into an existing engine, replacing its state.

        Subsystems missing from the snapshot are reset to their defaults.
        """
        self._check_version(data)

        state = data.get("state", {})
        engine.state.day = int(state.get("day", 0))
        victory = state.get("victory")
        engine.state.victory = VictoryResult(**victory) if victory else None

        self._restore_rng(engine, state.get("rng"))

        engine.registry.clear()
        try:
            for raw in state.get("agents", []):
                engine.registry.add(Agent.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Malformed agent record: {e}") from e

        engine.messages.deserialize(state.get("messages", {}))

        subsystems = data.get("subsystems", {})
        for key, attr in SUBSYSTEMS.items():
            section = subsystems.get(key)
            if section is None:
                logger.warning(f"Snapshot has no {key!r} subsystem; using defaults")
                section = {}
            getattr(engine, attr).deserialize(section)

        if "currency" not in subsystems:
            # A fresh ledger has no wallets; reopen one per restored agent
            for agent in engine.registry.all_agents():
                engine.currency.create_account(agent.id, agent.tribe)

        technology = subsystems.get("technology")
        if technology is None:
            logger.warning("Snapshot has no 'technology' subsystem; using defaults")
            technology = {}
        engine.tech_trees = {}
        for tribe in engine.config.tribes:
            tree = TechTree()
            tree.deserialize(technology.get(tribe, {}))
            engine.tech_trees[tribe] = tree

    def _check_version(self, data: dict) -> None:
        version = data.get("schema_version", self.SCHEMA_VERSION)
        if not isinstance(version, int):
            raise SerializationError(f"Invalid schema_version: {version!r}")
        if version > self.SCHEMA_VERSION:
            raise UnsupportedSchemaError(version, self.SCHEMA_VERSION)

    def _serialize_rng(self, engine: SimulationEngine) -> list | None:
        # Only random.Random-like sources can be captured
        getstate = getattr(engine.rng, "getstate", None)
        if getstate is None:
            return None
        version, internal, gauss = getstate()
        return [version, list(internal), gauss]

    def _restore_rng(self, engine: SimulationEngine, raw: list | None) -> None:
        setstate = getattr(engine.rng, "setstate", None)
        if raw is None or setstate is None:
            return
        version, internal, gauss = raw
        setstate((version, tuple(internal), gauss))
