"""Pairwise interaction resolution between neighbouring agents.

For each living neighbour the resolver tries diplomacy, then trade, then
combat, and stops at the first one that succeeds. A failed attempt changes
nothing and falls through to the next type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tribesim.simulation.entities import TRADE_GOODS
from tribesim.simulation.messages import MessageType

if TYPE_CHECKING:
    from tribesim.agents.registry import AgentRegistry
    from tribesim.config import SimulationConfig
    from tribesim.simulation.entities import Agent
    from tribesim.simulation.messages import MessageLog
    from tribesim.simulation.protocols import CurrencyLedger, DiplomacyLedger, RandomSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InteractionOutcome:
    """One resolved pairwise interaction."""

    kind: str  # "diplomacy" | "trade" | "combat"
    other_id: str
    detail: str = ""


class InteractionResolver:
    """Resolves diplomacy, trade and combat for one initiating agent."""

    def __init__(
        self,
        config: SimulationConfig,
        rng: RandomSource,
        registry: AgentRegistry,
        messages: MessageLog,
        currency: CurrencyLedger,
        diplomacy: DiplomacyLedger,
    ):
        self.config = config
        self._rng = rng
        self._registry = registry
        self._messages = messages
        self._currency = currency
        self._diplomacy = diplomacy

    def resolve_interactions(self, agent: Agent, day: int) -> list[InteractionOutcome]:
        """Resolve at most one interaction with each living neighbour.

        Neighbours are collected once, on live world coordinates. A neighbour
        that dies earlier in the same pass is skipped.

        Args:
            agent: The initiating agent
            day: Current day

        Returns:
            The interactions that succeeded, in resolution order
        """
        outcomes: list[InteractionOutcome] = []
        for other in self._registry.nearby(agent, self.config.interaction_radius):
            if not agent.alive:
                break
            if not other.alive:
                continue

            outcome = self.try_diplomacy(agent, other, day)
            if outcome is None:
                outcome = self.try_trade(agent, other, day)
            if outcome is None and (agent.tribe != other.tribe or other.id in agent.enemies):
                outcome = self.try_combat(agent, other, day)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    # --- Diplomacy ---

    def try_diplomacy(self, agent: Agent, other: Agent, day: int) -> InteractionOutcome | None:
        """Form an alliance with a tribemate or make peace with an enemy."""
        if not agent.has_skill("diplomacy"):
            return None

        if agent.tribe == other.tribe and other.id not in agent.allies:
            if self._rng.random() < self.config.alliance_chance:
                agent.allies.add(other.id)
                other.allies.add(agent.id)
                agent.resources.social_capital += self.config.alliance_social_gain
                other.resources.social_capital += self.config.alliance_social_gain

                line = self._rng.choice(
                    (
                        f"Formed alliance with {other.name}!",
                        f"{other.name} and I are now allies!",
                        f"Strong bond formed with {other.name}!",
                    )
                )
                agent.say(line, self.config.message_display_ticks)
                self._log(agent, line, day, MessageType.DIPLOMACY)

                self._currency.earn_tokens(agent.id, self.config.alliance_reward, "alliance_formed")
                self._currency.earn_tokens(other.id, self.config.alliance_reward, "alliance_formed")
                return InteractionOutcome("diplomacy", other.id, "alliance")

        if other.id in agent.enemies and self._rng.random() < self.config.reconcile_chance:
            agent.enemies.discard(other.id)
            other.enemies.discard(agent.id)
            agent.resources.social_capital += self.config.peace_social_gain

            agent.say(f"Made peace with {other.name}!", self.config.message_display_ticks)
            self._log(
                agent,
                f"Diplomatic success! Peace established with {other.name}.",
                day,
                MessageType.DIPLOMACY,
            )

            self._currency.earn_tokens(agent.id, self.config.peace_reward, "peace_treaty")
            self._currency.earn_tokens(other.id, self.config.peace_reward, "peace_treaty")
            return InteractionOutcome("diplomacy", other.id, "peace")

        return None

    # --- Trade ---

    def try_trade(self, agent: Agent, other: Agent, day: int) -> InteractionOutcome | None:
        """Swap a fixed amount of each side's first surplus resource.

        The two surpluses must differ; otherwise there is nothing to trade.
        """
        if not agent.has_skill("trade") or not other.has_skill("trade"):
            return None

        offered = self._surplus(agent)
        wanted = self._surplus(other)
        if offered is None or wanted is None or offered == wanted:
            return None

        amount = self.config.trade_amount
        agent.resources.add(offered, -amount)
        agent.resources.add(wanted, amount)
        other.resources.add(wanted, -amount)
        other.resources.add(offered, amount)

        qty = f"{amount:g}"
        line = self._rng.choice(
            (
                f"Traded {qty} {offered} for {qty} {wanted} with {other.name}!",
                f"Excellent trade with {other.name}!",
                f"Deal struck with {other.name} - {offered} for {wanted}!",
            )
        )
        agent.say(line, self.config.message_display_ticks)
        self._log(agent, line, day, MessageType.TRADE)

        modifier = self._diplomacy.trade_modifier(agent.tribe, other.tribe)
        reward = round(self.config.trade_reward * modifier)
        self._currency.earn_tokens(agent.id, reward, "trade")
        self._currency.earn_tokens(other.id, reward, "trade")
        return InteractionOutcome("trade", other.id, f"{offered}->{wanted}")

    def _surplus(self, agent: Agent) -> str | None:
        for name in TRADE_GOODS:
            if agent.resources.get(name) > self.config.trade_threshold:
                return name
        return None

    # --- Combat ---

    def try_combat(self, attacker: Agent, defender: Agent, day: int) -> InteractionOutcome | None:
        """Fight a neighbour and apply theft or the counter-attack penalty."""
        if not attacker.has_skill("combat"):
            return None
        if (
            attacker.tribe == defender.tribe
            and self._rng.random() >= self.config.same_tribe_fight_chance
        ):
            return None
        if not self._diplomacy.can_fight(attacker.tribe, defender.tribe):
            return None

        attacker.target_agent_id = defender.id
        self._rally_defenders(attacker, defender)

        attack = self.combat_power(attacker)
        defense = self.combat_power(defender) * (0.8 + self._rng.random() * 0.4)

        if attack > defense:
            detail = self._attacker_wins(attacker, defender, day)
        else:
            detail = self._defender_wins(attacker, defender, day)

        self._currency.earn_tokens(attacker.id, self.config.combat_reward, "combat_victory")
        return InteractionOutcome("combat", defender.id, detail)

    @staticmethod
    def combat_power(agent: Agent) -> float:
        return agent.resources.energy * 0.5 + agent.resources.materials * 0.3

    def _rally_defenders(self, attacker: Agent, defender: Agent) -> None:
        """Point up to ``max_defenders`` armed tribemates of the defender at the attacker."""
        rallied = 0
        for ally in self._registry.nearby(defender, self.config.support_radius):
            if rallied >= self.config.max_defenders:
                break
            if ally.id == attacker.id:
                continue
            if ally.tribe == defender.tribe and ally.has_skill("combat"):
                ally.target_agent_id = attacker.id
                rallied += 1

    def _attacker_wins(self, attacker: Agent, defender: Agent, day: int) -> str:
        fraction = self.config.steal_fraction
        food = min(max(0.0, defender.resources.food) * fraction, self.config.max_stolen_food)
        materials = min(
            max(0.0, defender.resources.materials) * fraction, self.config.max_stolen_materials
        )

        attacker.resources.food += food
        attacker.resources.materials += materials
        defender.resources.food -= food
        defender.resources.materials -= materials
        attacker.resources.clamp_physical()
        defender.resources.clamp_physical()

        attacker.say(f"Victory over {defender.name}!", self.config.message_display_ticks)
        defender.say(f"Beaten by {attacker.name}!", self.config.message_display_ticks)
        attacker.target_agent_id = None
        defender.enemies.add(attacker.id)

        self._log(
            attacker,
            f"Defeated {defender.name} in combat and took "
            f"{round(food)} food, {round(materials)} materials!",
            day,
            MessageType.COMBAT,
        )
        logger.debug(f"{attacker.name} beat {defender.name}: +{food:.1f} food +{materials:.1f} mat")

        if defender.resources.food <= 0:
            defender.die()
            self._log(defender, f"{defender.name} has fallen in battle!", day, MessageType.COMBAT)
            logger.debug(f"{defender.name} ({defender.id}) killed in combat on day {day}")
            return "attacker_won_kill"
        return "attacker_won"

    def _defender_wins(self, attacker: Agent, defender: Agent, day: int) -> str:
        attacker.resources.energy -= self.config.counter_damage
        attacker.resources.clamp_physical()

        defender.say(f"Repelled {attacker.name}!", self.config.message_display_ticks)
        attacker.target_agent_id = None
        defender.target_agent_id = None

        self._log(
            defender,
            f"Successfully defended against {attacker.name}!",
            day,
            MessageType.COMBAT,
        )
        return "defender_won"

    def _log(self, agent: Agent, content: str, day: int, type: MessageType) -> None:
        self._messages.emit(agent.id, agent.name, agent.tribe, content, day, type)
