"""Simulation engine for the tribe civilization world.

Owns the day loop and wires the resolvers to the satellite subsystems. Every
collaborator is passed in (or defaulted) at construction so tests can swap
any of them for a double.
"""

from __future__ import annotations

import copy
import logging
import random
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tribesim.agents.identity import determine_specialization, generate_name, generate_skills
from tribesim.agents.registry import AgentRegistry
from tribesim.config import SimulationConfig
from tribesim.errors import ConfigurationError, EngineStateError
from tribesim.simulation.actions import ActionResolver
from tribesim.simulation.entities import RESOURCE_NAMES, Resources
from tribesim.simulation.interactions import InteractionResolver
from tribesim.simulation.messages import SYSTEM_SOURCE, Message, MessageLog, MessageType
from tribesim.systems.achievements import AchievementTracker, VictoryResult
from tribesim.systems.buildings import BUILDING_TYPES, Building, BuildingRegistry
from tribesim.systems.currency import TokenLedger
from tribesim.systems.diplomacy import TribeDiplomacy
from tribesim.systems.events import WorldEventTable
from tribesim.systems.quests import Quest, QuestBoard
from tribesim.systems.technology import TechTree
from tribesim.systems.territory import Territory, TerritoryMap

if TYPE_CHECKING:
    from tribesim.metrics.timing import PerformanceMonitor
    from tribesim.simulation.entities import Agent
    from tribesim.simulation.protocols import (
        AchievementEvaluator,
        BuildingLedger,
        CurrencyLedger,
        DiplomacyLedger,
        EventTable,
        RandomSource,
        TerritoryLedger,
    )

logger = logging.getLogger(__name__)

SYSTEM_NAME = "System"
GLOBAL_TRIBE = "Global"


@dataclass
class SimulationState:
    """Mutable day counter and victory latch."""

    day: int = 0
    victory: VictoryResult | None = None


@dataclass
class DayRecord:
    """What happened on one day, for renderers and tests."""

    day: int
    event_id: str | None = None
    casualties: list[str] = field(default_factory=list)
    expired_events: list[str] = field(default_factory=list)
    achievements: list[str] = field(default_factory=list)
    agents_acted: int = 0
    deaths: list[str] = field(default_factory=list)
    proposals_accepted: int = 0


@dataclass
class WorldState:
    """Read-only snapshot of the world. Agents and buildings are copies."""

    day: int
    agents: list[Agent]
    messages: list[Message]
    buildings: list[Building]
    territories: list[Territory]
    victory: VictoryResult | None


class SimulationEngine:
    """Tick orchestrator for the tribe simulation.

    One ``advance_day`` call runs the whole day in a fixed order: progress
    checks, world events, buildings, every living agent, then periodic
    territory and diplomacy upkeep.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: RandomSource | None = None,
        registry: AgentRegistry | None = None,
        messages: MessageLog | None = None,
        currency: CurrencyLedger | None = None,
        territory: TerritoryLedger | None = None,
        tech_trees: dict[str, TechTree] | None = None,
        buildings: BuildingLedger | None = None,
        diplomacy: DiplomacyLedger | None = None,
        events: EventTable | None = None,
        achievements: AchievementEvaluator | None = None,
        quests: QuestBoard | None = None,
    ):
        self.config = config or SimulationConfig()
        tribes = self.config.tribes
        self.rng: RandomSource = rng if rng is not None else random.Random(self.config.seed)
        self.registry = (
            registry if registry is not None else AgentRegistry(self.config.grid_size, tribes)
        )
        self.messages = (
            messages if messages is not None else MessageLog(self.config.message_log_cap)
        )
        self.currency = currency if currency is not None else TokenLedger(tribes)
        self.territory = territory if territory is not None else TerritoryMap()
        self.tech_trees = tech_trees if tech_trees is not None else {t: TechTree() for t in tribes}
        self.buildings = buildings if buildings is not None else BuildingRegistry()
        self.diplomacy = diplomacy if diplomacy is not None else TribeDiplomacy(tribes)
        self.events = events if events is not None else WorldEventTable()
        self.achievements = achievements if achievements is not None else AchievementTracker()
        self.quests = quests if quests is not None else QuestBoard(self.config.grid_size)
        self.state = SimulationState()
        self.last_record: DayRecord | None = None

        self.interactions = InteractionResolver(
            self.config, self.rng, self.registry, self.messages, self.currency, self.diplomacy
        )
        self.actions = ActionResolver(
            self.config,
            self.rng,
            self.registry,
            self.messages,
            self.currency,
            self.territory,
            self.interactions,
        )

        # Performance monitoring (lazy init)
        self._perf_monitor: PerformanceMonitor | None = None

    @property
    def perf_monitor(self) -> PerformanceMonitor:
        """Get or create performance monitor (lazy init)."""
        if self._perf_monitor is None:
            from tribesim.metrics.timing import PerformanceMonitor

            self._perf_monitor = PerformanceMonitor()
        return self._perf_monitor

    # --- Setup ---

    def setup_tribes(self) -> None:
        """Populate every tribe with randomized agents around its center."""
        if len(self.registry):
            raise EngineStateError("World is already populated")

        cfg = self.config
        for tribe in cfg.tribes:
            if tribe not in cfg.tribe_centers:
                raise ConfigurationError(f"No world center configured for tribe {tribe!r}")
            cx, cz = cfg.tribe_centers[tribe]
            for _ in range(cfg.agents_per_tribe):
                skills = generate_skills(self.rng)
                world_x = cx + (self.rng.random() - 0.5) * cfg.spawn_spread
                world_z = cz + (self.rng.random() - 0.5) * cfg.spawn_spread
                agent = self.registry.spawn(
                    name=generate_name(tribe, self.rng),
                    tribe=tribe,
                    x=self.rng.randint(0, cfg.grid_size - 1),
                    y=self.rng.randint(0, cfg.grid_size - 1),
                    world_x=world_x,
                    world_z=world_z,
                    resources=Resources(
                        food=cfg.starting_food,
                        energy=cfg.starting_energy,
                        materials=cfg.starting_materials,
                        knowledge=cfg.starting_knowledge,
                        social_capital=cfg.starting_social_capital,
                    ),
                    skills=skills,
                    specialization=determine_specialization(skills),
                )
                self.currency.create_account(agent.id, tribe)
        logger.info(f"Spawned {len(self.registry)} agents across {len(cfg.tribes)} tribes")

    # --- The day loop ---

    def advance_day(self) -> None:
        """Advance the simulation by one day."""
        day_start = time.perf_counter()
        self.state.day += 1
        day = self.state.day
        record = DayRecord(day=day)

        t0 = time.perf_counter()
        if self.state.victory is None:
            self._check_progress(record)
        t1 = time.perf_counter()

        self._trigger_event(record)
        self._expire_events(record)
        t2 = time.perf_counter()

        self.update_buildings()
        t3 = time.perf_counter()

        for agent in self.registry.all_agents():
            if not agent.alive:
                continue
            result = self.actions.resolve(agent, day)
            record.agents_acted += 1
            if not result.survived:
                record.deaths.append(agent.id)
        t4 = time.perf_counter()

        if day % self.config.territory_decay_interval == 0:
            lost = self.territory.decay()
            logger.debug(f"Day {day}: territory decay removed {lost} claims")
        if day % self.config.diplomacy_interval == 0:
            record.proposals_accepted = self._run_diplomacy()
        t5 = time.perf_counter()

        self.last_record = record

        if self._perf_monitor is not None:
            from tribesim.metrics.timing import DayTiming

            self._perf_monitor.record_day(
                DayTiming(
                    checks_ms=(t1 - t0) * 1000,
                    events_ms=(t2 - t1) * 1000,
                    buildings_ms=(t3 - t2) * 1000,
                    agents_ms=(t4 - t3) * 1000,
                    periodic_ms=(t5 - t4) * 1000,
                    total_ms=(t5 - day_start) * 1000,
                    agents_acted=record.agents_acted,
                )
            )

    def _check_progress(self, record: DayRecord) -> None:
        """Announce new achievements and latch the first victory."""
        for achievement in self.achievements.check_achievements(self):
            record.achievements.append(achievement.id)
            self._system_message(
                f"Achievement Unlocked: {achievement.name} - {achievement.description}",
                MessageType.CELEBRATION,
            )

        victory = self.achievements.check_victory(self)
        if victory is not None:
            self.state.victory = victory
            self._system_message(f"VICTORY! {victory.reason}", MessageType.CELEBRATION)
            logger.info(f"Day {self.state.day}: {victory.winner} wins by {victory.condition}")

    def _trigger_event(self, record: DayRecord) -> None:
        event = self.events.check_for_event(self.state.day, self.rng)
        if event is None:
            return
        record.event_id = event.id
        self._system_message(
            f"{event.name}: {event.description}",
            MessageType.COMBAT if event.is_disaster else MessageType.CELEBRATION,
        )

        outcome = self.events.apply_effects(event, self.registry.all_agents(), self.rng)
        for agent_id in outcome.casualties:
            agent = self.registry.get(agent_id)
            if agent is None:
                continue
            record.casualties.append(agent_id)
            self.messages.emit(
                agent.id,
                agent.name,
                agent.tribe,
                f"{agent.name} perished in the {event.name}!",
                self.state.day,
                MessageType.COMBAT,
            )

    def _expire_events(self, record: DayRecord) -> None:
        for event in self.events.tick_active():
            record.expired_events.append(event.id)
            self._system_message(f"The {event.name} has ended.", MessageType.CELEBRATION)

    def update_buildings(self) -> None:
        """Advance construction, then share finished buildings' yields with their tribe."""
        for building in self.buildings.all():
            self.buildings.advance(building.id)
            if not building.complete:
                continue
            members = self.registry.by_tribe(building.tribe)
            share = max(1, len(members))
            for resource, amount in building.benefits.items():
                if resource not in RESOURCE_NAMES:
                    continue
                for member in members:
                    member.resources.add(resource, amount / share)

    def _run_diplomacy(self) -> int:
        """Age agreements, then let every tribe pair propose in both directions."""
        day = self.state.day
        self.diplomacy.update_agreements(day)

        accepted = 0
        tribes = self.config.tribes
        for first in tribes:
            for second in tribes:
                if first >= second:
                    continue
                for proposer, receiver in ((first, second), (second, first)):
                    proposal = self.diplomacy.generate_proposal(
                        proposer,
                        receiver,
                        self.registry.by_tribe(proposer),
                        self.registry.by_tribe(receiver),
                        self.rng,
                        day,
                    )
                    if proposal is None:
                        continue
                    accept, reason = self.diplomacy.evaluate(proposal)
                    if not accept:
                        logger.debug(f"{receiver} declined {proposal.type.value}: {reason}")
                        continue
                    self.diplomacy.respond(proposal.id, True)
                    accepted += 1
                    label = proposal.type.value.replace("_", " ")
                    self.messages.emit(
                        SYSTEM_SOURCE,
                        SYSTEM_NAME,
                        proposer,
                        f"{proposer} and {receiver} have formed a {label}!",
                        day,
                        MessageType.DIPLOMACY,
                    )
        return accepted

    # --- Queries ---

    def get_world_state(self) -> WorldState:
        """Snapshot for renderers; mutating it does not affect the simulation."""
        return WorldState(
            day=self.state.day,
            agents=copy.deepcopy(self.registry.all_agents()),
            messages=list(self.messages),
            buildings=copy.deepcopy(self.buildings.all()),
            territories=copy.deepcopy(self.territory.cells()),
            victory=self.state.victory,
        )

    def get_alive_agents(self) -> list[Agent]:
        return self.registry.living_agents()

    def get_recent_messages(self, limit: int = 20) -> list[Message]:
        return self.messages.recent(limit)

    def add_message(self, message: Message) -> None:
        """Append an externally built message to the log."""
        self.messages.append(message)

    def is_victory_achieved(self) -> bool:
        return self.state.victory is not None

    def is_over(self) -> bool:
        """Check if the run should stop."""
        return self.registry.count_living == 0 or self.state.day >= self.config.max_days

    def _system_message(self, content: str, type: MessageType) -> Message:
        return self.messages.emit(
            SYSTEM_SOURCE, SYSTEM_NAME, GLOBAL_TRIBE, content, self.state.day, type
        )

    # --- Civilization view (consumed by the achievement tracker) ---

    @property
    def day(self) -> int:
        return self.state.day

    @property
    def tribes(self) -> list[str]:
        return list(self.config.tribes)

    def tribe_agent_count(self, tribe: str) -> int:
        return len(self.registry.by_tribe(tribe))

    def tribe_total_resources(self, tribe: str) -> dict[str, float]:
        totals = dict.fromkeys(RESOURCE_NAMES, 0.0)
        for member in self.registry.by_tribe(tribe):
            for name, value in member.resources.as_dict().items():
                totals[name] += value
        return totals

    def researched_tech_count(self, tribe: str) -> int:
        tree = self.tech_trees.get(tribe)
        return len(tree.researched()) if tree else 0

    def completed_building_count(self, tribe: str) -> int:
        return len(self.buildings.completed(tribe))

    def territory_count(self, tribe: str) -> int:
        return int(self.territory.count(tribe))

    def combat_count(self) -> int:
        return self.messages.total(MessageType.COMBAT)

    def alive_tribes(self) -> list[str]:
        return [t for t in self.config.tribes if self.tribe_agent_count(t) > 0]

    # --- Tribe-level actions ---

    def research_tech(self, tribe: str, tech_id: str) -> bool:
        """Research a tech with the tribe's pooled stocks.

        The cost is split evenly across living members.

        Returns:
            False if the tribe is unknown or empty, or the research is infeasible
        """
        tree = self.tech_trees.get(tribe)
        members = self.registry.by_tribe(tribe)
        if tree is None or not members:
            return False
        if not tree.research(tech_id, self.tribe_total_resources(tribe)):
            return False

        tech = tree.get(tech_id)
        assert tech is not None
        self._charge(members, tech.cost)
        self.messages.emit(
            tribe, tribe, tribe, f"Research complete: {tech.name}!", self.state.day,
            MessageType.CELEBRATION,
        )  # fmt: skip
        logger.info(f"{tribe} researched {tech_id}")
        return True

    def start_building(self, tribe: str, building_type: str, x: float, z: float) -> bool:
        """Found a building paid from the tribe's pooled stocks."""
        tree = self.tech_trees.get(tribe)
        members = self.registry.by_tribe(tribe)
        if tree is None or not members:
            return False
        researched = {t.id for t in tree.researched()}
        if not self.buildings.can_build(
            building_type, self.tribe_total_resources(tribe), researched
        ):
            return False

        self._charge(members, BUILDING_TYPES[building_type].cost)
        self.buildings.start_construction(tribe, building_type, x, z)
        self.messages.emit(
            tribe, tribe, tribe, f"Construction started on {building_type}!", self.state.day,
            MessageType.CELEBRATION,
        )  # fmt: skip
        return True

    @staticmethod
    def _charge(members: list[Agent], cost: dict[str, float]) -> None:
        for resource, amount in cost.items():
            per_member = amount / len(members)
            for member in members:
                member.resources.add(resource, -per_member)

    def resource_bonus(self, tribe: str, resource: str) -> float:
        """Tech multiplier times a 10%-per-point building bonus."""
        tree = self.tech_trees.get(tribe)
        tech_bonus = tree.bonus(resource) if tree else 1.0
        building_bonus = 1 + self.buildings.tribe_benefits(tribe).get(resource, 0.0) * 0.1
        return tech_bonus * building_bonus

    # --- Quests ---

    def assign_quest(self, agent_id: str) -> Quest | None:
        agent = self.registry.get(agent_id)
        if agent is None or not agent.alive:
            return None
        return self.quests.generate(agent, self.rng, self.state.day)

    def advance_quest(self, quest_id: str, amount: float) -> bool:
        """Record quest progress and pay out the rewards on completion."""
        if not self.quests.advance(quest_id, amount):
            return False
        quest = self.quests.get(quest_id)
        agent = self.registry.get(quest.agent_id) if quest else None
        if quest is None or agent is None or not agent.alive:
            return True

        self.currency.earn_tokens(agent.id, quest.reward_tokens, f"quest:{quest.type}")
        for resource, amount_gained in quest.reward_resources.items():
            agent.resources.add(resource, amount_gained)
        self.actions.grant_experience(agent, quest.reward_experience, self.state.day)
        self.messages.emit(
            agent.id, agent.name, agent.tribe, f"{agent.name} completed {quest.name}!",
            self.state.day, MessageType.CELEBRATION,
        )  # fmt: skip
        return True

    def agent_quests(self, agent_id: str) -> list[Quest]:
        return self.quests.for_agent(agent_id)

    def expire_quests(self) -> list[Quest]:
        return self.quests.expire(self.state.day)

    # --- Persistence ---

    def serialize(self) -> dict:
        """Full versioned snapshot of the world and every subsystem."""
        from tribesim.persistence.serializer import StateSerializer

        return StateSerializer().serialize(self)

    def deserialize(self, data: dict) -> None:
        """Restore a snapshot into this engine in place."""
        from tribesim.persistence.serializer import StateSerializer

        StateSerializer().restore(self, data)
