"""Technology tree: one instance per tribe.

Definitions are static; a tree only tracks which techs its tribe has
researched. Costs are paid from the tribe's pooled stocks by the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Tech:
    """Static definition of one technology."""

    id: str
    name: str
    description: str
    cost: dict[str, float]  # food / knowledge / social_capital
    requirements: tuple[str, ...] = ()
    resource_bonus: dict[str, float] = field(default_factory=dict)
    unlock_buildings: tuple[str, ...] = ()


def _cost(food: float, knowledge: float, social: float) -> dict[str, float]:
    return {"food": food, "knowledge": knowledge, "social_capital": social}


TECHNOLOGIES: tuple[Tech, ...] = (
    # Tier 1
    Tech("agriculture", "Agriculture", "Basic farming techniques",
         _cost(50, 20, 10), (), {"food": 1.2}),
    Tech("tool_making", "Tool Making", "Craft basic tools",
         _cost(30, 40, 10), (), {"materials": 1.3}),
    Tech("writing", "Writing", "Record knowledge and history",
         _cost(40, 50, 20), (), {"knowledge": 1.4}),
    # Tier 2
    Tech("irrigation", "Irrigation", "Water management for farms",
         _cost(100, 60, 30), ("agriculture",), {"food": 1.5}),
    Tech("metallurgy", "Metallurgy", "Work with metals",
         _cost(80, 100, 40), ("tool_making",), {"materials": 1.6}),
    Tech("mathematics", "Mathematics", "Advanced calculations",
         _cost(60, 120, 30), ("writing",), {"knowledge": 1.7}),
    Tech("trade_routes", "Trade Routes", "Establish trade networks",
         _cost(70, 50, 80), ("writing",), {"social_capital": 1.5}),
    # Tier 3
    Tech("architecture", "Architecture", "Design grand structures",
         _cost(150, 150, 100), ("irrigation", "metallurgy"), {"materials": 1.3},
         ("monument", "granary")),
    Tech("philosophy", "Philosophy", "Understand the nature of existence",
         _cost(100, 200, 120), ("mathematics", "writing"),
         {"knowledge": 2.0, "social_capital": 1.3}),
    Tech("currency", "Currency", "Standardized monetary system",
         _cost(120, 100, 150), ("trade_routes", "metallurgy"), {"social_capital": 2.0}),
    # Tier 4
    Tech("engineering", "Engineering", "Advanced construction techniques",
         _cost(200, 250, 150), ("architecture", "mathematics"), {"materials": 1.8},
         ("wonder", "fortress")),
    Tech("governance", "Governance", "Organized society management",
         _cost(150, 200, 250), ("philosophy", "currency"), {"social_capital": 2.5}),
    Tech("enlightenment", "Enlightenment", "Age of reason and discovery",
         _cost(250, 400, 200), ("engineering", "governance"), {"knowledge": 3.0}),
)  # fmt: skip

TECH_INDEX: dict[str, Tech] = {t.id: t for t in TECHNOLOGIES}


class TechTree:
    """Research state of one tribe."""

    def __init__(self) -> None:
        self._researched: set[str] = set()

    def get(self, tech_id: str) -> Tech | None:
        return TECH_INDEX.get(tech_id)

    def is_researched(self, tech_id: str) -> bool:
        return tech_id in self._researched

    def can_research(self, tech_id: str) -> bool:
        """True if the tech exists, is new, and every prerequisite is done."""
        tech = TECH_INDEX.get(tech_id)
        if tech is None or tech_id in self._researched:
            return False
        return all(req in self._researched for req in tech.requirements)

    def research(self, tech_id: str, pooled: dict[str, float]) -> bool:
        """Mark a tech researched if prerequisites and pooled stocks allow it.

        Args:
            tech_id: Technology to research
            pooled: Tribe-wide stock totals keyed by resource name

        Returns:
            True on success. The caller deducts the cost.
        """
        if not self.can_research(tech_id):
            return False
        tech = TECH_INDEX[tech_id]
        for resource, amount in tech.cost.items():
            if pooled.get(resource, 0.0) < amount:
                return False
        self._researched.add(tech_id)
        return True

    def available(self) -> list[Tech]:
        return [t for t in TECHNOLOGIES if self.can_research(t.id)]

    def researched(self) -> list[Tech]:
        return [t for t in TECHNOLOGIES if t.id in self._researched]

    def progress(self) -> tuple[int, int]:
        return len(self._researched), len(TECHNOLOGIES)

    def bonus(self, resource: str) -> float:
        """Product of every researched multiplier for ``resource``."""
        multiplier = 1.0
        for tech in self.researched():
            multiplier *= tech.resource_bonus.get(resource, 1.0)
        return multiplier

    def unlocks_building(self, building_type: str) -> bool:
        return any(building_type in t.unlock_buildings for t in self.researched())

    def serialize(self) -> dict:
        return {"version": 1, "researched": sorted(self._researched)}

    def deserialize(self, data: dict) -> None:
        self._researched = {t for t in data.get("researched", []) if t in TECH_INDEX}
