"""Entities in the simulation: agents and their resource stocks.

Agents live on two coordinate systems. The grid cell (x, y) drives movement
and territory claims; the continuous world coordinate (world_x, world_z)
drives proximity for interactions. The core does not keep them in sync.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tribesim.agents.identity import Specialization

RESOURCE_NAMES: tuple[str, ...] = ("food", "energy", "materials", "knowledge", "social_capital")

# Resources agents can swap in trade, in surplus-scan order
TRADE_GOODS: tuple[str, ...] = ("food", "energy", "materials", "knowledge")


@dataclass
class Resources:
    """The five named stocks an agent holds.

    Stocks are conventionally non-negative but not bounded: only event and
    combat effects clamp at zero.
    """

    food: float = 100.0
    energy: float = 100.0
    materials: float = 50.0
    knowledge: float = 0.0
    social_capital: float = 50.0

    def get(self, name: str) -> float:
        """Read a stock by name."""
        value: float = getattr(self, name)
        return value

    def add(self, name: str, amount: float) -> None:
        """Add ``amount`` (possibly negative) to a stock without clamping."""
        setattr(self, name, getattr(self, name) + amount)

    def clamp_physical(self) -> None:
        """Floor food, energy and materials at zero."""
        self.food = max(0.0, self.food)
        self.energy = max(0.0, self.energy)
        self.materials = max(0.0, self.materials)

    def as_dict(self) -> dict[str, float]:
        """Return stocks as a flat dictionary."""
        return {name: getattr(self, name) for name in RESOURCE_NAMES}

    @classmethod
    def from_dict(cls, data: dict[str, float]) -> Resources:
        return cls(**{name: float(data.get(name, 0.0)) for name in RESOURCE_NAMES})


@dataclass
class Agent:
    """A tribe member: identity, position, stocks, skills and relationships."""

    id: str
    name: str
    tribe: str
    x: int
    y: int
    world_x: float = 0.0
    world_z: float = 0.0
    resources: Resources = field(default_factory=Resources)
    skills: list[str] = field(default_factory=list)
    specialization: Specialization = Specialization.NONE
    alive: bool = True
    level: int = 1
    experience: int = 0

    # Speech bubble shown by a renderer, cleared when the timer runs out
    current_message: str | None = None
    message_timer: int = 0

    # Set on the attacker (and recruited defenders) during combat
    target_agent_id: str | None = None

    # References by agent id; an agent never owns another agent
    allies: set[str] = field(default_factory=set)
    enemies: set[str] = field(default_factory=set)

    def has_skill(self, skill: str) -> bool:
        return skill in self.skills

    def distance_to(self, other: Agent) -> float:
        """Euclidean distance on world coordinates."""
        dx = self.world_x - other.world_x
        dz = self.world_z - other.world_z
        return float((dx * dx + dz * dz) ** 0.5)

    def say(self, text: str, ticks: int) -> None:
        """Show a speech bubble for ``ticks`` days."""
        self.current_message = text
        self.message_timer = ticks

    def die(self) -> None:
        """Mark the agent dead. Death is permanent."""
        self.alive = False
        self.target_agent_id = None

    def to_dict(self) -> dict:
        """Plain-data form used in snapshots."""
        return {
            "id": self.id,
            "name": self.name,
            "tribe": self.tribe,
            "x": self.x,
            "y": self.y,
            "world_x": self.world_x,
            "world_z": self.world_z,
            "resources": self.resources.as_dict(),
            "skills": list(self.skills),
            "specialization": self.specialization.value,
            "alive": self.alive,
            "level": self.level,
            "experience": self.experience,
            "current_message": self.current_message,
            "message_timer": self.message_timer,
            "target_agent_id": self.target_agent_id,
            "allies": sorted(self.allies),
            "enemies": sorted(self.enemies),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Agent:
        return cls(
            id=data["id"],
            name=data["name"],
            tribe=data["tribe"],
            x=int(data["x"]),
            y=int(data["y"]),
            world_x=float(data.get("world_x", 0.0)),
            world_z=float(data.get("world_z", 0.0)),
            resources=Resources.from_dict(data.get("resources", {})),
            skills=list(data.get("skills", [])),
            specialization=Specialization(data.get("specialization", "none")),
            alive=bool(data.get("alive", True)),
            level=int(data.get("level", 1)),
            experience=int(data.get("experience", 0)),
            current_message=data.get("current_message"),
            message_timer=int(data.get("message_timer", 0)),
            target_agent_id=data.get("target_agent_id"),
            allies=set(data.get("allies", [])),
            enemies=set(data.get("enemies", [])),
        )
