"""Achievements and victory conditions.

Both are evaluated against a read-only ``CivilizationView``; the tracker
never touches agents directly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tribesim.systems.technology import TECHNOLOGIES

if TYPE_CHECKING:
    from tribesim.simulation.protocols import CivilizationView


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    requirement: Callable[[CivilizationView], bool]


@dataclass(frozen=True)
class VictoryResult:
    """A decided game."""

    winner: str
    condition: str  # domination | technology | economy
    reason: str


ECONOMIC_VICTORY_FOOD = 10000.0


def _best(view: CivilizationView, metric: Callable[[str], float]) -> float:
    return max((metric(tribe) for tribe in view.tribes), default=0)


def _any_tribe_survives(view: CivilizationView, day: int, members: int) -> bool:
    return view.day >= day and any(view.tribe_agent_count(t) >= members for t in view.tribes)


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(
        "first_blood", "First Contact", "Witness your first combat",
        lambda v: v.combat_count() > 0,
    ),
    Achievement(
        "survivor", "Survivor", "Reach day 10 with at least 10 agents alive in one tribe",
        lambda v: _any_tribe_survives(v, 10, 10),
    ),
    Achievement(
        "merchant_king", "Merchant King", "Stockpile 1000 food in one tribe",
        lambda v: _best(v, lambda t: v.tribe_total_resources(t)["food"]) >= 1000,
    ),
    Achievement(
        "tech_founder", "Tech Founder", "Research 5 technologies",
        lambda v: _best(v, v.researched_tech_count) >= 5,
    ),
    Achievement(
        "builder", "Master Builder", "Construct 5 buildings",
        lambda v: _best(v, v.completed_building_count) >= 5,
    ),
    Achievement(
        "territory_expansionist", "Land Grabber", "Control 20 territories",
        lambda v: _best(v, v.territory_count) >= 20,
    ),
    Achievement(
        "enlightenment", "Age of Enlightenment", "Research every technology",
        lambda v: _best(v, v.researched_tech_count) >= len(TECHNOLOGIES),
    ),
    Achievement(
        "world_dominion", "World Dominator", "Eliminate all other tribes",
        lambda v: len(v.alive_tribes()) <= 1,
    ),
    Achievement(
        "golden_age", "Golden Age", "Keep 20 members of a tribe alive until day 50",
        lambda v: _any_tribe_survives(v, 50, 20),
    ),
    Achievement(
        "pacifist", "Pacifist", "Reach day 30 with at most 5 combat reports",
        lambda v: v.day >= 30 and v.combat_count() <= 5,
    ),
    Achievement(
        "economic_powerhouse", "Economic Powerhouse", "Every tribe stockpiles 5000 food",
        lambda v: all(v.tribe_total_resources(t)["food"] >= 5000 for t in v.tribes),
    ),
)  # fmt: skip


class AchievementTracker:
    """Unlocks achievements once and decides victory."""

    def __init__(self, achievements: tuple[Achievement, ...] = ACHIEVEMENTS):
        self._achievements = {a.id: a for a in achievements}
        self._unlocked: dict[str, int] = {}  # id -> day unlocked

    def check_achievements(self, view: CivilizationView) -> list[Achievement]:
        """Return achievements that unlocked on this call."""
        newly = []
        for achievement in self._achievements.values():
            if achievement.id in self._unlocked:
                continue
            if achievement.requirement(view):
                self._unlocked[achievement.id] = view.day
                newly.append(achievement)
        return newly

    def check_victory(self, view: CivilizationView) -> VictoryResult | None:
        """Domination, then technology, then economy; first match wins."""
        alive = view.alive_tribes()
        if len(alive) == 1:
            winner = alive[0]
            return VictoryResult(
                winner, "domination", f"{winner} tribe has eliminated all other tribes!"
            )
        for tribe in view.tribes:
            if view.researched_tech_count(tribe) >= len(TECHNOLOGIES):
                return VictoryResult(
                    tribe, "technology", f"{tribe} tribe achieves technological supremacy!"
                )
        for tribe in view.tribes:
            if view.tribe_total_resources(tribe)["food"] >= ECONOMIC_VICTORY_FOOD:
                return VictoryResult(tribe, "economy", f"Economic dominance achieved by {tribe}!")
        return None

    def unlocked(self) -> list[Achievement]:
        return [self._achievements[a] for a in self._unlocked if a in self._achievements]

    def all(self) -> list[Achievement]:
        return list(self._achievements.values())

    def serialize(self) -> dict:
        return {"version": 1, "unlocked": dict(self._unlocked)}

    def deserialize(self, data: dict) -> None:
        self._unlocked = {
            k: int(v) for k, v in data.get("unlocked", {}).items() if k in self._achievements
        }
