"""Shared test fixtures for the tribesim test suite."""

from __future__ import annotations

import pytest

from tribesim.agents.registry import AgentRegistry
from tribesim.config import SimulationConfig
from tribesim.simulation.engine import SimulationEngine
from tribesim.simulation.messages import MessageLog


@pytest.fixture
def config() -> SimulationConfig:
    """Default config with small tribes for fast tests."""
    return SimulationConfig(seed=42, agents_per_tribe=4, max_days=100)


@pytest.fixture
def engine(config: SimulationConfig) -> SimulationEngine:
    """A fresh, unpopulated simulation engine."""
    return SimulationEngine(config)


@pytest.fixture
def populated_engine(engine: SimulationEngine) -> SimulationEngine:
    """An engine with every tribe spawned."""
    engine.setup_tribes()
    return engine


@pytest.fixture
def registry(config: SimulationConfig) -> AgentRegistry:
    """An empty registry on the config's grid."""
    return AgentRegistry(config.grid_size, config.tribes)


@pytest.fixture
def messages() -> MessageLog:
    return MessageLog(cap=100)
