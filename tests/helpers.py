"""Shared test doubles for the tribesim test suite.

These are dataclass-based test doubles, not unittest.mock.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from tribesim.agents.registry import AgentRegistry
from tribesim.config import SimulationConfig
from tribesim.simulation.actions import ActionResolver
from tribesim.simulation.entities import Agent, Resources
from tribesim.simulation.interactions import InteractionResolver
from tribesim.simulation.messages import MessageLog
from tribesim.systems.currency import TokenLedger
from tribesim.systems.events import EventOutcome, WorldEvent
from tribesim.systems.territory import TerritoryMap

# ============================================================================
# Random sources
# ============================================================================


@dataclass
class ScriptedRandom:
    """Replays scripted ``random()`` values, then returns ``default``.

    ``choice`` always picks the first element, ``sample`` the first k and
    ``randint`` the next scripted int (or the lower bound).
    """

    values: list[float] = field(default_factory=list)
    default: float = 0.99
    ints: list[int] = field(default_factory=list)
    calls: int = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default

    def randint(self, a: int, b: int) -> int:
        if self.ints:
            return self.ints.pop(0)
        return a

    def choice(self, seq: Sequence[Any]) -> Any:
        return seq[0]

    def sample(self, population: Sequence[Any], k: int) -> list[Any]:
        return list(population)[:k]


# ============================================================================
# Agents
# ============================================================================


def make_agent(
    agent_id: str,
    tribe: str = "Alpha",
    skills: Sequence[str] = (),
    x: int = 5,
    y: int = 5,
    world_x: float = 0.0,
    world_z: float = 0.0,
    **stocks: float,
) -> Agent:
    """Agent with default stocks, overridden by keyword (food=40, ...)."""
    return Agent(
        id=agent_id,
        name=f"{agent_id}-name",
        tribe=tribe,
        x=x,
        y=y,
        world_x=world_x,
        world_z=world_z,
        resources=Resources(**stocks),
        skills=list(skills),
    )


# ============================================================================
# Collaborator doubles
# ============================================================================


@dataclass
class StubProposal:
    id: str
    from_tribe: str
    to_tribe: str
    type: Any


@dataclass
class StubDiplomacy:
    """Diplomacy ledger with fixed answers that records every call."""

    modifier: float = 1.0
    allow_combat: bool = True
    proposal_type: Any = None  # a ProposalType to propose, or None
    accept: bool = True
    agreement_days: list[int] = field(default_factory=list)
    generated: list[tuple[str, str]] = field(default_factory=list)
    responses: list[tuple[str, bool]] = field(default_factory=list)

    def trade_modifier(self, tribe_a: str, tribe_b: str) -> float:
        return self.modifier

    def can_fight(self, tribe_a: str, tribe_b: str) -> bool:
        return self.allow_combat

    def update_agreements(self, day: int) -> None:
        self.agreement_days.append(day)

    def generate_proposal(self, from_tribe, to_tribe, from_members, to_members, rng, day):
        self.generated.append((from_tribe, to_tribe))
        if self.proposal_type is None:
            return None
        return StubProposal(
            f"p-{len(self.generated)}", from_tribe, to_tribe, self.proposal_type
        )

    def evaluate(self, proposal: StubProposal) -> tuple[bool, str]:
        return self.accept, "stub"

    def respond(self, proposal_id: str, accept: bool) -> bool:
        self.responses.append((proposal_id, accept))
        return True

    def serialize(self) -> dict:
        return {}

    def deserialize(self, data: dict) -> None:
        pass


@dataclass
class StubEvents:
    """Event table that fires ``event`` once and kills ``casualties`` members."""

    event: WorldEvent | None = None
    casualties: int = 0
    expire_on_day: int | None = None
    fired: bool = False
    day: int = 0

    def check_for_event(self, day: int, rng) -> WorldEvent | None:
        self.day = day
        if self.event is None or self.fired:
            return None
        self.fired = True
        return self.event

    def apply_effects(self, event: WorldEvent, members, rng) -> EventOutcome:
        outcome = EventOutcome()
        for member in members:
            if not member.alive:
                continue
            if len(outcome.casualties) < self.casualties:
                member.alive = False
                member.resources.food = 0.0
                outcome.casualties.append(member.id)
            else:
                outcome.affected.append(member.id)
        return outcome

    def tick_active(self) -> list[WorldEvent]:
        if self.event is not None and self.day == self.expire_on_day:
            return [self.event]
        return []

    def serialize(self) -> dict:
        return {}

    def deserialize(self, data: dict) -> None:
        pass


@dataclass
class StubAchievements:
    """Achievement tracker that declares ``victory`` and counts its calls."""

    victory: Any = None
    achievement_checks: int = 0
    victory_checks: int = 0

    def check_achievements(self, view) -> list:
        self.achievement_checks += 1
        return []

    def check_victory(self, view):
        self.victory_checks += 1
        return self.victory

    def unlocked(self) -> list:
        return []

    def serialize(self) -> dict:
        return {}

    def deserialize(self, data: dict) -> None:
        pass


# ============================================================================
# A hand-built world for resolver tests
# ============================================================================


@dataclass
class ResolverWorld:
    """Real registry, log and ledgers wired to both resolvers."""

    config: SimulationConfig
    rng: ScriptedRandom
    registry: AgentRegistry
    messages: MessageLog
    currency: TokenLedger
    territory: TerritoryMap
    diplomacy: StubDiplomacy
    interactions: InteractionResolver
    actions: ActionResolver


def build_world(
    config: SimulationConfig,
    *agents: Agent,
    rng: ScriptedRandom | None = None,
    diplomacy: StubDiplomacy | None = None,
) -> ResolverWorld:
    rng = rng or ScriptedRandom()
    diplomacy = diplomacy or StubDiplomacy()
    registry = AgentRegistry(config.grid_size, config.tribes)
    messages = MessageLog(config.message_log_cap)
    currency = TokenLedger(config.tribes)
    territory = TerritoryMap()
    for agent in agents:
        registry.add(agent)
        currency.create_account(agent.id, agent.tribe)
    interactions = InteractionResolver(config, rng, registry, messages, currency, diplomacy)
    actions = ActionResolver(config, rng, registry, messages, currency, territory, interactions)
    return ResolverWorld(
        config, rng, registry, messages, currency, territory, diplomacy, interactions, actions
    )


@dataclass
class StubView:
    """Fixed civilization statistics for achievement and victory checks."""

    day: int = 0
    tribes: list[str] = field(default_factory=lambda: ["Alpha", "Beta", "Gamma"])
    members: dict[str, int] = field(default_factory=dict)
    food: dict[str, float] = field(default_factory=dict)
    techs: dict[str, int] = field(default_factory=dict)
    buildings: dict[str, int] = field(default_factory=dict)
    land: dict[str, int] = field(default_factory=dict)
    combats: int = 0

    def tribe_agent_count(self, tribe: str) -> int:
        return self.members.get(tribe, 1)

    def tribe_total_resources(self, tribe: str) -> dict[str, float]:
        return {"food": self.food.get(tribe, 0.0)}

    def researched_tech_count(self, tribe: str) -> int:
        return self.techs.get(tribe, 0)

    def completed_building_count(self, tribe: str) -> int:
        return self.buildings.get(tribe, 0)

    def territory_count(self, tribe: str) -> int:
        return self.land.get(tribe, 0)

    def combat_count(self) -> int:
        return self.combats

    def alive_tribes(self) -> list[str]:
        return [t for t in self.tribes if self.tribe_agent_count(t) > 0]
