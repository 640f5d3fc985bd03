"""Building registry: construction, upkeep and tribe-wide benefits."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BuildingType:
    """Static definition of a building kind."""

    key: str
    name: str
    cost: dict[str, float]  # food / materials / knowledge
    health: float
    benefits: dict[str, float]
    required_tech: str


def _cost(food: float, materials: float, knowledge: float) -> dict[str, float]:
    return {"food": food, "materials": materials, "knowledge": knowledge}


BUILDING_TYPES: dict[str, BuildingType] = {
    b.key: b
    for b in (
        BuildingType("farm", "Farm", _cost(50, 30, 0), 100, {"food": 5}, "agriculture"),
        BuildingType("mine", "Mine", _cost(30, 50, 0), 150, {"materials": 3}, "tool_making"),
        BuildingType("library", "Library", _cost(40, 40, 20), 80, {"knowledge": 2}, "writing"),
        BuildingType(
            "market", "Market", _cost(60, 60, 30), 100, {"social_capital": 4}, "trade_routes"
        ),
        BuildingType("granary", "Granary", _cost(100, 80, 40), 200, {"food": 10}, "irrigation"),
        BuildingType(
            "workshop", "Workshop", _cost(80, 100, 50), 150, {"materials": 6}, "metallurgy"
        ),
        BuildingType(
            "university", "University", _cost(100, 100, 100), 120, {"knowledge": 8}, "mathematics"
        ),
        BuildingType(
            "temple", "Temple", _cost(120, 80, 60), 180, {"social_capital": 8}, "philosophy"
        ),
        BuildingType(
            "monument", "Monument", _cost(200, 200, 150), 300, {"social_capital": 15},
            "architecture",
        ),
        BuildingType(
            "fortress", "Fortress", _cost(150, 250, 100), 500, {"social_capital": 5},
            "engineering",
        ),
        BuildingType(
            "wonder",
            "Great Wonder",
            _cost(500, 500, 400),
            1000,
            {"food": 20, "knowledge": 20, "social_capital": 20},
            "enlightenment",
        ),
    )
}

CONSTRUCTION_STEP = 10.0


@dataclass
class Building:
    """A building placed by a tribe."""

    id: str
    type: str
    name: str
    tribe: str
    x: float
    z: float
    health: float
    max_health: float
    level: int = 1
    construction_progress: float = 0.0
    benefits: dict[str, float] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return self.construction_progress >= 100


class BuildingRegistry:
    """All buildings in the world, keyed by id in placement order."""

    def __init__(self) -> None:
        self._buildings: dict[str, Building] = {}
        self._next_id = 0

    def can_build(
        self, building_type: str, pooled: dict[str, float], researched: set[str] | list[str]
    ) -> bool:
        """True if the type exists, its tech is known and the pool covers the cost."""
        kind = BUILDING_TYPES.get(building_type)
        if kind is None:
            return False
        if kind.required_tech and kind.required_tech not in researched:
            return False
        return all(pooled.get(r, 0.0) >= amount for r, amount in kind.cost.items())

    def start_construction(
        self, tribe: str, building_type: str, x: float, z: float
    ) -> Building | None:
        """Place a new building at 10% health and 0% progress.

        Returns:
            The new building, or None for an unknown type
        """
        kind = BUILDING_TYPES.get(building_type)
        if kind is None:
            return None
        building = Building(
            id=f"building-{self._next_id + 1}",
            type=kind.key,
            name=kind.name,
            tribe=tribe,
            x=x,
            z=z,
            health=kind.health * 0.1,
            max_health=kind.health,
            benefits=dict(kind.benefits),
        )
        self._next_id += 1
        self._buildings[building.id] = building
        return building

    def advance(self, building_id: str) -> bool:
        """One day of work: +10% construction, or +1 health once complete."""
        building = self._buildings.get(building_id)
        if building is None:
            return False
        if not building.complete:
            building.construction_progress += CONSTRUCTION_STEP
            if building.complete:
                building.construction_progress = 100.0
                building.health = building.max_health
            return True
        if building.health < building.max_health:
            building.health = min(building.max_health, building.health + 1)
        return True

    def damage(self, building_id: str, amount: float) -> bool:
        """Damage a building. Returns True if it was destroyed."""
        building = self._buildings.get(building_id)
        if building is None:
            return False
        building.health -= amount
        if building.health <= 0:
            del self._buildings[building_id]
            return True
        return False

    def get(self, building_id: str) -> Building | None:
        return self._buildings.get(building_id)

    def all(self) -> list[Building]:
        return list(self._buildings.values())

    def by_tribe(self, tribe: str) -> list[Building]:
        return [b for b in self._buildings.values() if b.tribe == tribe]

    def completed(self, tribe: str) -> list[Building]:
        return [b for b in self.by_tribe(tribe) if b.complete]

    def tribe_benefits(self, tribe: str) -> dict[str, float]:
        """Summed benefits of a tribe's completed buildings."""
        totals: dict[str, float] = {}
        for building in self.completed(tribe):
            for resource, amount in building.benefits.items():
                totals[resource] = totals.get(resource, 0.0) + amount
        return totals

    def serialize(self) -> dict:
        return {
            "version": 1,
            "next_id": self._next_id,
            "buildings": [
                {
                    "id": b.id,
                    "type": b.type,
                    "name": b.name,
                    "tribe": b.tribe,
                    "x": b.x,
                    "z": b.z,
                    "health": b.health,
                    "max_health": b.max_health,
                    "level": b.level,
                    "construction_progress": b.construction_progress,
                    "benefits": dict(b.benefits),
                }
                for b in self._buildings.values()
            ],
        }

    def deserialize(self, data: dict) -> None:
        self._buildings = {}
        for raw in data.get("buildings", []):
            building = Building(**raw)
            self._buildings[building.id] = building
        self._next_id = int(data.get("next_id", len(self._buildings)))
