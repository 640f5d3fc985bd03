"""Tests for the per-agent daily action resolver."""

from __future__ import annotations

from tests.helpers import ScriptedRandom, build_world, make_agent
from tribesim.agents.identity import Specialization
from tribesim.config import SimulationConfig
from tribesim.simulation.messages import MessageType


class TestUpkeepAndDeath:
    """Survival cost and the death check."""

    def test_starving_agent_dies_and_does_nothing_else(self, config: SimulationConfig):
        agent = make_agent("a", skills=["farming"], food=1, energy=50)
        world = build_world(config, agent)

        result = world.actions.resolve(agent, day=1)

        assert not result.survived
        assert not agent.alive
        assert agent.resources.food == -1
        assert agent.resources.energy == 49
        assert (agent.x, agent.y) == (5, 5)
        assert world.rng.calls == 0
        assert len(world.messages) == 0
        assert world.currency.balance("a") == 100

    def test_exhausted_agent_dies(self, config: SimulationConfig):
        agent = make_agent("a", food=50, energy=1)
        world = build_world(config, agent)

        world.actions.resolve(agent, day=1)

        assert not agent.alive

    def test_dead_agent_is_left_untouched(self, config: SimulationConfig):
        agent = make_agent("a", food=50)
        agent.alive = False
        world = build_world(config, agent)

        result = world.actions.resolve(agent, day=1)

        assert not result.survived
        assert agent.resources.food == 50

    def test_upkeep_then_regen_for_idle_agent(self, config: SimulationConfig):
        agent = make_agent("a")
        world = build_world(config, agent)

        result = world.actions.resolve(agent, day=1)

        assert result.survived
        assert agent.resources.food == 99
        assert agent.resources.energy == 100
        assert result.primary_action == "greeting"


class TestProduction:
    """Skill-driven production."""

    def test_farming_yields_food_tokens_and_experience(self, config: SimulationConfig):
        agent = make_agent("a", skills=["farming"])
        world = build_world(config, agent)

        result = world.actions.resolve(agent, day=1)

        assert agent.resources.food == 100 - 2 + 12 + 1
        assert agent.experience == 2
        assert world.currency.balance("a") == 102
        assert result.primary_action == "farming"

    def test_every_production_skill_applies_and_last_sets_label(self, config: SimulationConfig):
        agent = make_agent("a", skills=["research", "farming", "mining"])
        world = build_world(config, agent)

        result = world.actions.resolve(agent, day=1)

        assert agent.resources.food == 111
        assert agent.resources.materials == 58
        assert agent.resources.knowledge == 5
        assert agent.experience == 2 + 3 + 5
        assert world.currency.balance("a") == 100 + 2 + 3 + 5
        assert result.primary_action == "research"


class TestLeveling:
    """Experience grants and cascading level-ups."""

    def test_single_level_up(self, config: SimulationConfig):
        agent = make_agent("a")
        world = build_world(config, agent)

        gained = world.actions.grant_experience(agent, 120, day=4)

        assert gained == 1
        assert agent.level == 2
        assert agent.experience == 20
        assert world.currency.balance("a") == 100 + 2 * 50

    def test_large_grant_cascades_and_keeps_remainder(self, config: SimulationConfig):
        agent = make_agent("a")
        world = build_world(config, agent)

        gained = world.actions.grant_experience(agent, 350, day=4)

        # 350 - 100 (level 1) - 200 (level 2) = 50 left at level 3
        assert gained == 2
        assert agent.level == 3
        assert agent.experience == 50
        assert world.currency.balance("a") == 100 + 100 + 150

    def test_level_up_is_celebrated(self, config: SimulationConfig):
        agent = make_agent("a")
        world = build_world(config, agent)

        world.actions.grant_experience(agent, 100, day=7)

        [message] = world.messages.recent()
        assert message.type is MessageType.CELEBRATION
        assert message.content == "a-name reached Level 2!"
        assert message.day == 7

    def test_grant_below_threshold_only_accumulates(self, config: SimulationConfig):
        agent = make_agent("a")
        agent.experience = 40
        world = build_world(config, agent)

        assert world.actions.grant_experience(agent, 59, day=1) == 0
        assert agent.level == 1
        assert agent.experience == 99


class TestAbilities:
    """Specialization abilities."""

    def test_none_specialization_never_rolls(self, config: SimulationConfig):
        agent = make_agent("a")
        world = build_world(config, agent, rng=ScriptedRandom(default=0.0))

        assert not world.actions.use_ability(agent, day=1)
        assert world.rng.calls == 0

    def test_failed_roll_does_nothing(self, config: SimulationConfig):
        agent = make_agent("a")
        agent.specialization = Specialization.BUILDER
        world = build_world(config, agent, rng=ScriptedRandom([0.5]))

        assert not world.actions.use_ability(agent, day=1)
        assert agent.resources.materials == 50

    def test_merchant_earns_bonus(self, config: SimulationConfig):
        agent = make_agent("a")
        agent.specialization = Specialization.MERCHANT
        world = build_world(config, agent, rng=ScriptedRandom([0.05]))

        assert world.actions.use_ability(agent, day=1)
        assert world.currency.balance("a") == 115
        assert agent.experience == 3

    def test_builder_gains_materials(self, config: SimulationConfig):
        agent = make_agent("a")
        agent.specialization = Specialization.BUILDER
        world = build_world(config, agent, rng=ScriptedRandom([0.0]))

        world.actions.use_ability(agent, day=1)

        assert agent.resources.materials == 58

    def test_healer_feeds_hungry_tribemates_nearby(self, config: SimulationConfig):
        healer = make_agent("h")
        healer.specialization = Specialization.HEALER
        hungry = make_agent("x", world_x=1.5, food=40, energy=60)
        fed = make_agent("y", world_x=1.0, food=80)
        stranger = make_agent("z", tribe="Beta", world_x=0.5, food=10)
        far = make_agent("f", world_x=30.0, food=10)
        world = build_world(config, healer, hungry, fed, stranger, far, rng=ScriptedRandom([0.0]))

        world.actions.use_ability(healer, day=1)

        assert (hungry.resources.food, hungry.resources.energy) == (50, 65)
        assert fed.resources.food == 80
        assert stranger.resources.food == 10
        assert far.resources.food == 10
        assert healer.experience == 5

    def test_leader_rewards_nearby_tribemates(self, config: SimulationConfig):
        leader = make_agent("l")
        leader.specialization = Specialization.LEADER
        mate = make_agent("m", world_x=1.0)
        world = build_world(config, leader, mate, rng=ScriptedRandom([0.0]))

        world.actions.use_ability(leader, day=1)

        assert mate.resources.social_capital == 55
        assert world.currency.balance("m") == 105
        assert leader.experience == 5

    def test_craftsman_and_scout(self, config: SimulationConfig):
        crafter = make_agent("c")
        crafter.specialization = Specialization.CRAFTSMAN
        scout = make_agent("s", world_x=50.0)
        scout.specialization = Specialization.SCOUT
        world = build_world(config, crafter, scout, rng=ScriptedRandom([0.0, 0.0]))

        world.actions.use_ability(crafter, day=1)
        world.actions.use_ability(scout, day=1)

        assert crafter.resources.materials == 55
        assert crafter.resources.knowledge == 3
        assert world.currency.balance("c") == 108
        assert scout.resources.knowledge == 5


class TestDialogueAndTimers:
    """Dialogue emission and speech-bubble countdown."""

    def test_agent_speaks_on_successful_roll(self, config: SimulationConfig):
        agent = make_agent("a")
        world = build_world(config, agent, rng=ScriptedRandom([0.0]))

        result = world.actions.resolve(agent, day=2)

        assert result.spoke
        assert agent.current_message == "Greetings, fellow agent!"
        # The countdown runs in the same day the line is spoken
        assert agent.message_timer == config.message_display_ticks - 1
        [message] = world.messages.recent()
        assert message.type is MessageType.CHAT
        assert message.agent_id == "a"

    def test_hungry_agent_complains(self, config: SimulationConfig):
        agent = make_agent("a", food=20)
        world = build_world(config, agent, rng=ScriptedRandom([0.0]))

        world.actions.resolve(agent, day=2)

        assert agent.current_message == "Resources are running low..."

    def test_existing_message_suppresses_new_line(self, config: SimulationConfig):
        agent = make_agent("a")
        agent.say("Busy", 3)
        world = build_world(config, agent, rng=ScriptedRandom([0.0]))

        result = world.actions.resolve(agent, day=2)

        assert not result.spoke
        assert agent.current_message == "Busy"
        assert agent.message_timer == 2
        assert len(world.messages) == 0

    def test_expired_message_is_cleared(self, config: SimulationConfig):
        agent = make_agent("a")
        agent.say("Fading", 1)
        world = build_world(config, agent)

        world.actions.resolve(agent, day=2)

        assert agent.current_message is None
        assert agent.message_timer == 0


class TestMovementAndTerritory:
    """Random step and territory claims."""

    def test_step_moves_one_cell(self, config: SimulationConfig):
        agent = make_agent("a", x=5, y=5)
        world = build_world(config, agent)

        world.actions.resolve(agent, day=1)

        # The scripted source always picks the first direction (west)
        assert (agent.x, agent.y) == (4, 5)

    def test_step_stays_on_grid(self, config: SimulationConfig):
        agent = make_agent("a", x=0, y=3)
        world = build_world(config, agent)

        world.actions.resolve(agent, day=1)

        assert (agent.x, agent.y) == (0, 3)

    def test_claim_uses_cell_after_moving(self, config: SimulationConfig):
        agent = make_agent("a", x=5, y=5)
        # dialogue roll fails, claim roll succeeds
        world = build_world(config, agent, rng=ScriptedRandom([0.99, 0.0]))

        result = world.actions.resolve(agent, day=1)

        assert result.claimed_territory
        assert world.territory.owner(4, 5) == "Alpha"
        assert world.territory.owner(5, 5) is None

    def test_no_claim_on_failed_roll(self, config: SimulationConfig):
        agent = make_agent("a")
        world = build_world(config, agent)

        result = world.actions.resolve(agent, day=1)

        assert not result.claimed_territory
        assert world.territory.count("Alpha") == 0
