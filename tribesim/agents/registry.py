"""Agent registry: manages agent lifecycle (spawn, death, lookup)."""

from __future__ import annotations

import itertools
from collections.abc import Iterator
from typing import TYPE_CHECKING

from tribesim.errors import ConfigurationError
from tribesim.simulation.entities import Agent

if TYPE_CHECKING:
    from tribesim.agents.identity import Specialization
    from tribesim.simulation.entities import Resources


class AgentRegistry:
    """Ordered store of every agent ever created.

    Single source of truth for all agents in the simulation. Iteration order
    is creation order, and dead agents stay registered for history.
    """

    def __init__(self, grid_size: int, tribes: list[str]):
        self._grid_size = grid_size
        self._tribes = list(tribes)
        self._agents: dict[str, Agent] = {}
        self._ids = itertools.count()

    def spawn(
        self,
        name: str,
        tribe: str,
        x: int,
        y: int,
        world_x: float = 0.0,
        world_z: float = 0.0,
        resources: Resources | None = None,
        skills: list[str] | None = None,
        specialization: Specialization | None = None,
    ) -> Agent:
        """Create and register a new agent.

        Validates the tribe and that the grid cell is on the map.
        """
        if tribe not in self._tribes:
            raise ConfigurationError(f"Cannot spawn agent into unknown tribe {tribe!r}")
        if not (0 <= x < self._grid_size and 0 <= y < self._grid_size):
            raise ConfigurationError(f"Cannot spawn agent at ({x}, {y}): out of bounds")

        agent_id = f"agent-{next(self._ids)}"
        while agent_id in self._agents:
            agent_id = f"agent-{next(self._ids)}"

        agent = Agent(
            id=agent_id, name=name, tribe=tribe, x=x, y=y, world_x=world_x, world_z=world_z
        )
        if resources is not None:
            agent.resources = resources
        if skills is not None:
            agent.skills = list(skills)
        if specialization is not None:
            agent.specialization = specialization
        self._agents[agent_id] = agent
        return agent

    def add(self, agent: Agent) -> None:
        """Register an already-built agent (used when restoring snapshots)."""
        self._agents[agent.id] = agent

    def kill(self, agent_id: str) -> bool:
        """Mark an agent dead. Returns False if it is unknown or already dead."""
        agent = self._agents.get(agent_id)
        if agent is None or not agent.alive:
            return False
        agent.die()
        return True

    def get(self, agent_id: str) -> Agent | None:
        """Look up any agent, living or dead, by ID."""
        return self._agents.get(agent_id)

    def living_agents(self) -> list[Agent]:
        """All living agents, in spawn order."""
        return [a for a in self._agents.values() if a.alive]

    def all_agents(self) -> list[Agent]:
        """All agents including dead, in spawn order."""
        return list(self._agents.values())

    def by_tribe(self, tribe: str, alive_only: bool = True) -> list[Agent]:
        """Members of a tribe, in spawn order."""
        return [
            a for a in self._agents.values() if a.tribe == tribe and (a.alive or not alive_only)
        ]

    def nearby(self, agent: Agent, radius: float) -> list[Agent]:
        """Living agents other than ``agent`` within ``radius`` on world coordinates."""
        return [
            other
            for other in self._agents.values()
            if other.id != agent.id and other.alive and agent.distance_to(other) <= radius
        ]

    def clear(self) -> None:
        self._agents.clear()
        self._ids = itertools.count()

    def __iter__(self) -> Iterator[Agent]:
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        return len(self._agents)

    @property
    def tribes(self) -> list[str]:
        return list(self._tribes)

    @property
    def count_living(self) -> int:
        return sum(1 for a in self._agents.values() if a.alive)

    @property
    def count_dead(self) -> int:
        return len(self._agents) - self.count_living
