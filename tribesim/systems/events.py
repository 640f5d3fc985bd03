"""Random world events: disasters, discoveries, blessings and conflicts.

At most one event starts per day, and only after a cooldown since the
previous one. Events with a duration stay active until they tick out.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tribesim.simulation.entities import RESOURCE_NAMES

if TYPE_CHECKING:
    from tribesim.simulation.protocols import RandomSource, TribeMember

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorldEvent:
    """Static definition of an event."""

    id: str
    name: str
    description: str
    kind: str  # disaster | discovery | blessing | conflict
    weight: float
    effects: dict[str, float]
    duration: int = 0
    min_day: int = 0
    agent_damage: float = 0.0  # percent chance per member of becoming a casualty
    tribe: str | None = None  # None affects every tribe

    @property
    def is_disaster(self) -> bool:
        return self.kind == "disaster"


@dataclass
class ActiveEvent:
    event: WorldEvent
    remaining: int


@dataclass
class EventOutcome:
    """Who an applied event touched."""

    affected: list[str] = field(default_factory=list)
    casualties: list[str] = field(default_factory=list)


WORLD_EVENTS: tuple[WorldEvent, ...] = (
    # Disasters
    WorldEvent("drought", "Great Drought",
               "A terrible drought plagues the land. Food production is halved!",
               "disaster", 15, {"food": -50}, duration=5, min_day=20),
    WorldEvent("plague", "Mysterious Plague",
               "A plague spreads through the tribes, weakening many agents.",
               "disaster", 10, {"energy": -30}, min_day=30, agent_damage=15),
    WorldEvent("earthquake", "Great Earthquake",
               "An earthquake shakes the land! Buildings are damaged.",
               "disaster", 8, {"materials": -40}, min_day=15),
    WorldEvent("storm", "Great Storm",
               "A massive storm batters all tribes. Energy reserves are depleted.",
               "disaster", 12, {"energy": -20}, duration=3, min_day=10),
    # Discoveries
    WorldEvent("ancient_ruins", "Ancient Ruins Discovered",
               "Explorers find ancient ruins filled with knowledge!",
               "discovery", 10, {"knowledge": 100}, min_day=25),
    WorldEvent("fertile_land", "Fertile Land Found",
               "New farming land discovered! Food production increases.",
               "discovery", 12, {"food": 80}, min_day=15),
    WorldEvent("rich_deposit", "Rich Mineral Deposit",
               "A massive mineral deposit is found!",
               "discovery", 11, {"materials": 100}, min_day=20),
    WorldEvent("alien_artifact", "Alien Artifact",
               "A mysterious artifact of unknown origin is discovered!",
               "discovery", 5, {"knowledge": 150, "social_capital": 50}, min_day=40),
    # Blessings
    WorldEvent("bountiful_harvest", "Bountiful Harvest",
               "The harvest is exceptionally good this season!",
               "blessing", 15, {"food": 60}, min_day=10),
    WorldEvent("enlightenment", "Age of Enlightenment",
               "A wave of creativity and discovery sweeps through the tribes!",
               "blessing", 8, {"knowledge": 80, "social_capital": 30}, min_day=35),
    WorldEvent("peace_treaty", "Grand Peace Treaty",
               "The tribes come together in a moment of unity.",
               "blessing", 7, {"social_capital": 100}, min_day=30),
    WorldEvent("merchant_caravan", "Merchant Caravan Arrival",
               "Foreign merchants bring exotic goods and wealth!",
               "blessing", 10, {"materials": 50, "social_capital": 40}, min_day=20),
    # Conflicts
    WorldEvent("territory_dispute", "Territory Dispute",
               "Tensions rise as tribes dispute border lands!",
               "conflict", 12, {"social_capital": -30}, min_day=25),
    WorldEvent("resource_shortage", "Resource Shortage",
               "Critical materials become scarce across all tribes.",
               "conflict", 10, {"materials": -30, "food": -20}, duration=4, min_day=20),
    WorldEvent("raid", "Marauder Raid",
               "Unknown raiders attack tribal settlements!",
               "conflict", 8, {"food": -40, "materials": -20}, min_day=15),
)  # fmt: skip

EVENT_INDEX: dict[str, WorldEvent] = {e.id: e for e in WORLD_EVENTS}


class WorldEventTable:
    """Selects, applies and expires world events."""

    COOLDOWN_DAYS = 10
    DAILY_CHANCE = 0.10

    def __init__(self, events: Sequence[WorldEvent] = WORLD_EVENTS):
        self._events = list(events)
        self._active: dict[str, ActiveEvent] = {}
        self._last_event_day = 0
        self._history: list[tuple[int, str]] = []

    def check_for_event(self, day: int, rng: RandomSource) -> WorldEvent | None:
        """Maybe start a new event today.

        Args:
            day: Current day
            rng: Random source for the daily roll and the weighted pick

        Returns:
            The event that fired, or None
        """
        if day - self._last_event_day < self.COOLDOWN_DAYS:
            return None
        if rng.random() >= self.DAILY_CHANCE:
            return None

        eligible = [e for e in self._events if day >= e.min_day]
        if not eligible:
            return None

        pick = rng.random() * sum(e.weight for e in eligible)
        for event in eligible:
            pick -= event.weight
            if pick <= 0:
                break
        else:
            return None

        self._last_event_day = day
        self._history.append((day, event.id))
        if event.duration > 0:
            self._active[event.id] = ActiveEvent(event=event, remaining=event.duration)
        logger.info(f"Day {day}: world event {event.id}")
        return event

    def apply_effects(
        self, event: WorldEvent, members: Sequence[TribeMember], rng: RandomSource
    ) -> EventOutcome:
        """Apply an event's stock changes and casualty rolls to living members.

        Casualties lose all food and die. Food, energy and materials are
        floored at zero afterwards.
        """
        outcome = EventOutcome()
        for member in members:
            if not member.alive:
                continue
            if event.tribe is not None and member.tribe != event.tribe:
                continue

            for resource, delta in event.effects.items():
                if resource in RESOURCE_NAMES:
                    member.resources.add(resource, delta)

            if event.agent_damage and rng.random() * 100 < event.agent_damage:
                member.resources.food = 0.0
                member.alive = False
                outcome.casualties.append(member.id)
            else:
                outcome.affected.append(member.id)

            member.resources.clamp_physical()
        return outcome

    def tick_active(self) -> list[WorldEvent]:
        """Count down active events; return those that just ended."""
        expired = []
        for event_id, active in list(self._active.items()):
            active.remaining -= 1
            if active.remaining <= 0:
                del self._active[event_id]
                expired.append(active.event)
        return expired

    def active(self) -> list[ActiveEvent]:
        return list(self._active.values())

    def history(self) -> list[tuple[int, str]]:
        return list(self._history)

    @property
    def last_event_day(self) -> int:
        return self._last_event_day

    def serialize(self) -> dict:
        return {
            "version": 1,
            "last_event_day": self._last_event_day,
            "active": {eid: a.remaining for eid, a in self._active.items()},
            "history": [list(h) for h in self._history],
        }

    def deserialize(self, data: dict) -> None:
        self._last_event_day = int(data.get("last_event_day", 0))
        self._active = {}
        for event_id, remaining in data.get("active", {}).items():
            event = EVENT_INDEX.get(event_id)
            if event is not None:
                self._active[event_id] = ActiveEvent(event=event, remaining=int(remaining))
        self._history = [(int(day), eid) for day, eid in data.get("history", [])]
