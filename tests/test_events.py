"""Tests for the world event table."""

from __future__ import annotations

from tests.helpers import ScriptedRandom, make_agent
from tribesim.systems.events import EVENT_INDEX, WorldEvent, WorldEventTable


class TestEventSelection:
    """Cooldown, daily roll and weighted pick."""

    def test_cooldown_blocks_early_days(self):
        table = WorldEventTable()
        rng = ScriptedRandom([0.0, 0.0])

        assert table.check_for_event(9, rng) is None
        assert rng.calls == 0

    def test_failed_daily_roll(self):
        table = WorldEventTable()

        assert table.check_for_event(10, ScriptedRandom([0.10])) is None
        assert table.last_event_day == 0

    def test_weighted_pick_respects_min_day(self):
        table = WorldEventTable()

        event = table.check_for_event(10, ScriptedRandom([0.05, 0.0]))

        # Only the storm and the harvest are eligible on day 10
        assert event.id == "storm"
        assert table.last_event_day == 10
        assert table.history() == [(10, "storm")]

    def test_upper_end_of_the_pick_selects_last_eligible(self):
        table = WorldEventTable()

        event = table.check_for_event(10, ScriptedRandom([0.05, 0.999]))

        assert event.id == "bountiful_harvest"

    def test_pick_past_the_total_weight_starts_nothing(self):
        table = WorldEventTable()

        assert table.check_for_event(10, ScriptedRandom([0.05, 1.5])) is None
        assert table.last_event_day == 0
        assert table.history() == []
        assert table.check_for_event(10, ScriptedRandom([0.05, 0.0])) is not None

    def test_new_cooldown_after_an_event(self):
        table = WorldEventTable()
        table.check_for_event(10, ScriptedRandom([0.05, 0.0]))

        assert table.check_for_event(19, ScriptedRandom([0.0, 0.0])) is None


class TestApplyEffects:
    def test_effects_clamp_physical_stocks(self):
        table = WorldEventTable()
        member = make_agent("a", materials=10.0, knowledge=5.0)

        outcome = table.apply_effects(EVENT_INDEX["earthquake"], [member], ScriptedRandom())

        assert member.resources.materials == 0.0
        assert outcome.affected == ["a"]
        assert outcome.casualties == []

    def test_social_capital_is_not_clamped(self):
        table = WorldEventTable()
        member = make_agent("a", social_capital=10.0)

        table.apply_effects(EVENT_INDEX["territory_dispute"], [member], ScriptedRandom())

        assert member.resources.social_capital == -20.0

    def test_casualties_die_with_empty_stores(self):
        table = WorldEventTable()
        healthy = make_agent("a")
        unlucky = make_agent("b")
        rng = ScriptedRandom([0.5, 0.1])

        outcome = table.apply_effects(EVENT_INDEX["plague"], [healthy, unlucky], rng)

        assert outcome.casualties == ["b"]
        assert not unlucky.alive
        assert unlucky.resources.food == 0.0
        assert healthy.alive
        assert healthy.resources.energy == 70.0

    def test_dead_and_untargeted_members_are_skipped(self):
        raid = WorldEvent("raid", "Raid", "", "conflict", 1, {"food": -10}, tribe="Beta")
        table = WorldEventTable([raid])
        alpha = make_agent("a", tribe="Alpha")
        beta = make_agent("b", tribe="Beta")
        corpse = make_agent("c", tribe="Beta")
        corpse.alive = False

        outcome = table.apply_effects(raid, [alpha, beta, corpse], ScriptedRandom())

        assert outcome.affected == ["b"]
        assert alpha.resources.food == 100.0
        assert corpse.resources.food == 100.0


class TestActiveEvents:
    def test_duration_events_tick_out(self):
        table = WorldEventTable()
        table.check_for_event(10, ScriptedRandom([0.05, 0.0]))

        assert table.tick_active() == []
        assert table.tick_active() == []
        assert [e.id for e in table.tick_active()] == ["storm"]
        assert table.active() == []

    def test_roundtrip_keeps_active_events(self):
        table = WorldEventTable()
        table.check_for_event(10, ScriptedRandom([0.05, 0.0]))
        table.tick_active()

        restored = WorldEventTable()
        restored.deserialize(table.serialize())

        assert [(a.event.id, a.remaining) for a in restored.active()] == [("storm", 2)]
        assert restored.last_event_day == 10
