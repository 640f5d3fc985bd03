"""Per-agent daily action resolution.

One call to ``ActionResolver.resolve`` is one agent's whole day: upkeep,
interactions with neighbours, specialization ability, skill production,
regeneration, dialogue, a random step and an occasional territory claim.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tribesim.agents.identity import Specialization
from tribesim.simulation.dialogue import pick_dialogue
from tribesim.simulation.messages import MessageType

if TYPE_CHECKING:
    from tribesim.agents.registry import AgentRegistry
    from tribesim.config import SimulationConfig
    from tribesim.simulation.entities import Agent
    from tribesim.simulation.interactions import InteractionResolver
    from tribesim.simulation.messages import MessageLog
    from tribesim.simulation.protocols import CurrencyLedger, RandomSource, TerritoryLedger

logger = logging.getLogger(__name__)


class Direction(enum.Enum):
    """Grid steps, in the order a random roll picks them."""

    WEST = (-1, 0)
    EAST = (1, 0)
    NORTH = (0, -1)
    SOUTH = (0, 1)


@dataclass(frozen=True)
class Production:
    """What one production skill yields per day."""

    skill: str
    resource: str
    amount: float
    tokens: int
    experience: int


@dataclass
class ActionResult:
    """Summary of one agent's day."""

    agent_id: str
    survived: bool
    primary_action: str = "greeting"
    interactions: list[str] = field(default_factory=list)
    ability_used: bool = False
    levels_gained: int = 0
    spoke: bool = False
    claimed_territory: bool = False


class ActionResolver:
    """Applies one agent's daily routine in a fixed order."""

    def __init__(
        self,
        config: SimulationConfig,
        rng: RandomSource,
        registry: AgentRegistry,
        messages: MessageLog,
        currency: CurrencyLedger,
        territory: TerritoryLedger,
        interactions: InteractionResolver,
    ):
        self.config = config
        self._rng = rng
        self._registry = registry
        self._messages = messages
        self._currency = currency
        self._territory = territory
        self._interactions = interactions
        self._production = (
            Production(
                "farming", "food", config.farming_yield, config.farming_tokens, config.farming_xp
            ),
            Production(
                "mining", "materials", config.mining_yield, config.mining_tokens, config.mining_xp
            ),
            Production(
                "research",
                "knowledge",
                config.research_yield,
                config.research_tokens,
                config.research_xp,
            ),
        )

    def resolve(self, agent: Agent, day: int) -> ActionResult:
        """Run one day for a living agent.

        Args:
            agent: The acting agent (must be alive)
            day: Current day, stamped on any logged message

        Returns:
            ActionResult describing what happened
        """
        result = ActionResult(agent_id=agent.id, survived=True)
        if not agent.alive:
            result.survived = False
            return result

        # Upkeep, then the death check ends the day for a starved agent
        agent.resources.food -= self.config.food_upkeep
        agent.resources.energy -= self.config.energy_upkeep
        if agent.resources.food <= 0 or agent.resources.energy <= 0:
            agent.die()
            logger.debug(f"{agent.name} ({agent.id}) starved on day {day}")
            result.survived = False
            return result

        level_before = agent.level
        result.interactions = self._interactions.resolve_interactions(agent, day)

        result.ability_used = self.use_ability(agent, day)

        result.primary_action = self._produce(agent, day)

        agent.resources.food += self.config.food_regen
        agent.resources.energy += self.config.energy_regen

        result.spoke = self._speak(agent, result.primary_action, day)
        self._tick_message_timer(agent)

        self._move(agent)
        result.claimed_territory = self._maybe_claim(agent)

        result.levels_gained = agent.level - level_before
        return result

    def grant_experience(self, agent: Agent, amount: int, day: int) -> int:
        """Add experience and apply every level-up it pays for.

        Each level costs ``level * xp_per_level`` and leftover experience
        carries over, so one large grant can cascade through several levels.

        Returns:
            Number of levels gained
        """
        agent.experience += amount
        gained = 0
        while agent.experience >= agent.level * self.config.xp_per_level:
            agent.experience -= agent.level * self.config.xp_per_level
            agent.level += 1
            gained += 1
            self._currency.earn_tokens(
                agent.id, agent.level * self.config.level_up_reward, "level_up"
            )
            self._messages.emit(
                agent.id,
                agent.name,
                agent.tribe,
                f"{agent.name} reached Level {agent.level}!",
                day,
                MessageType.CELEBRATION,
            )
            logger.debug(f"{agent.name} reached level {agent.level}")
        return gained

    def use_ability(self, agent: Agent, day: int) -> bool:
        """Roll for and apply the agent's specialization ability.

        Returns:
            True if the ability fired
        """
        if agent.specialization is Specialization.NONE:
            return False
        if self._rng.random() >= self.config.ability_chance:
            return False

        spec = agent.specialization
        if spec is Specialization.HEALER:
            for other in self._registry.nearby(agent, self.config.ability_radius):
                if other.tribe == agent.tribe and other.resources.food < 50:
                    other.resources.food += 10
                    other.resources.energy += 5
                    self.grant_experience(agent, 5, day)
        elif spec is Specialization.MERCHANT:
            self._currency.earn_tokens(agent.id, 15, "merchant_bonus")
            self.grant_experience(agent, 3, day)
        elif spec is Specialization.WARRIOR:
            self.grant_experience(agent, 4, day)
        elif spec is Specialization.BUILDER:
            agent.resources.materials += 8
            self.grant_experience(agent, 3, day)
        elif spec is Specialization.SCOUT:
            agent.resources.knowledge += 5
            self.grant_experience(agent, 3, day)
        elif spec is Specialization.LEADER:
            for other in self._registry.nearby(agent, self.config.ability_radius):
                if other.tribe == agent.tribe:
                    other.resources.social_capital += 5
                    self._currency.earn_tokens(other.id, 5, "leadership_bonus")
            self.grant_experience(agent, 5, day)
        elif spec is Specialization.CRAFTSMAN:
            agent.resources.materials += 5
            agent.resources.knowledge += 3
            self._currency.earn_tokens(agent.id, 8, "crafting")
            self.grant_experience(agent, 4, day)
        return True

    def _produce(self, agent: Agent, day: int) -> str:
        """Apply every production skill the agent holds; return the last label."""
        primary = "greeting"
        for production in self._production:
            if not agent.has_skill(production.skill):
                continue
            agent.resources.add(production.resource, production.amount)
            primary = production.skill
            self._currency.earn_tokens(agent.id, production.tokens, production.skill)
            self.grant_experience(agent, production.experience, day)
        return primary

    def _speak(self, agent: Agent, primary_action: str, day: int) -> bool:
        if self._rng.random() >= self.config.dialogue_chance:
            return False
        line = pick_dialogue(
            agent, primary_action, self._rng, self.config.celebration_dialogue_chance
        )
        if agent.current_message:
            return False
        agent.say(line, self.config.message_display_ticks)
        self._messages.emit(agent.id, agent.name, agent.tribe, line, day, MessageType.CHAT)
        return True

    def _tick_message_timer(self, agent: Agent) -> None:
        if agent.current_message is None:
            return
        agent.message_timer -= 1
        if agent.message_timer <= 0:
            agent.current_message = None
            agent.message_timer = 0

    def _move(self, agent: Agent) -> None:
        dx, dy = self._rng.choice(list(Direction)).value
        limit = self.config.grid_size - 1
        agent.x = min(limit, max(0, agent.x + dx))
        agent.y = min(limit, max(0, agent.y + dy))

    def _maybe_claim(self, agent: Agent) -> bool:
        if self._rng.random() >= self.config.territory_claim_chance:
            return False
        return self._territory.claim(
            agent.x, agent.y, agent.tribe, self.config.territory_claim_strength
        )
