"""Protocols for the collaborators the simulation core talks to.

The engine receives every satellite subsystem through its constructor, so
any object with the matching methods (including a test double) may stand
in for the default implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from tribesim.simulation.entities import Resources

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Seedable source of randomness. ``random.Random`` satisfies it."""

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        ...

    def randint(self, a: int, b: int) -> int:
        """Uniform integer in [a, b]."""
        ...

    def choice(self, seq: Sequence[T]) -> T:
        """One element of a non-empty sequence."""
        ...

    def sample(self, population: Sequence[T], k: int) -> list[T]:
        """k distinct elements of a sequence."""
        ...


@runtime_checkable
class TribeMember(Protocol):
    """The slice of an agent that satellite subsystems may see."""

    id: str
    tribe: str
    alive: bool
    resources: Resources
    skills: list[str]


@runtime_checkable
class CivilizationView(Protocol):
    """Read-only civilization statistics used by the achievement evaluator."""

    day: int
    tribes: list[str]

    def tribe_agent_count(self, tribe: str) -> int: ...

    def tribe_total_resources(self, tribe: str) -> dict[str, float]: ...

    def researched_tech_count(self, tribe: str) -> int: ...

    def completed_building_count(self, tribe: str) -> int: ...

    def territory_count(self, tribe: str) -> int: ...

    def combat_count(self) -> int: ...

    def alive_tribes(self) -> list[str]: ...


@runtime_checkable
class CurrencyLedger(Protocol):
    """Token bookkeeping."""

    def create_account(self, agent_id: str, tribe: str) -> bool: ...

    def earn_tokens(self, agent_id: str, amount: float, reason: str) -> bool: ...

    def balance(self, agent_id: str) -> float: ...

    def richest(self, limit: int = 5) -> list[Any]: ...

    def serialize(self) -> dict: ...

    def deserialize(self, data: dict) -> None: ...


@runtime_checkable
class TerritoryLedger(Protocol):
    """Grid cell ownership."""

    def claim(self, x: int, y: int, tribe: str, strength: float = 10.0) -> bool: ...

    def decay(self) -> int: ...

    def count(self, tribe: str) -> int: ...

    def owner(self, x: int, y: int) -> str | None: ...

    def cells(self, tribe: str | None = None) -> list[Any]: ...

    def serialize(self) -> dict: ...

    def deserialize(self, data: dict) -> None: ...


@runtime_checkable
class DiplomacyLedger(Protocol):
    """Tribe-to-tribe relationships and proposals."""

    def trade_modifier(self, tribe_a: str, tribe_b: str) -> float: ...

    def can_fight(self, tribe_a: str, tribe_b: str) -> bool: ...

    def update_agreements(self, day: int) -> None: ...

    def generate_proposal(
        self,
        from_tribe: str,
        to_tribe: str,
        from_members: Sequence[TribeMember],
        to_members: Sequence[TribeMember],
        rng: RandomSource,
        day: int,
    ) -> Any | None: ...

    def evaluate(self, proposal: Any) -> tuple[bool, str]: ...

    def respond(self, proposal_id: str, accept: bool) -> bool: ...

    def serialize(self) -> dict: ...

    def deserialize(self, data: dict) -> None: ...


@runtime_checkable
class EventTable(Protocol):
    """Random world events."""

    def check_for_event(self, day: int, rng: RandomSource) -> Any | None: ...

    def apply_effects(
        self, event: Any, members: Sequence[TribeMember], rng: RandomSource
    ) -> Any: ...

    def tick_active(self) -> list[Any]: ...

    def serialize(self) -> dict: ...

    def deserialize(self, data: dict) -> None: ...


@runtime_checkable
class BuildingLedger(Protocol):
    """Construction and building benefits."""

    def all(self) -> list[Any]: ...

    def advance(self, building_id: str) -> bool: ...

    def can_build(
        self, building_type: str, pooled: dict[str, float], researched: set[str] | list[str]
    ) -> bool: ...

    def start_construction(self, tribe: str, building_type: str, x: float, z: float) -> Any: ...

    def completed(self, tribe: str) -> list[Any]: ...

    def tribe_benefits(self, tribe: str) -> dict[str, float]: ...

    def serialize(self) -> dict: ...

    def deserialize(self, data: dict) -> None: ...


@runtime_checkable
class AchievementEvaluator(Protocol):
    """Achievement unlocks and the victory decision."""

    def check_achievements(self, view: CivilizationView) -> list[Any]: ...

    def check_victory(self, view: CivilizationView) -> Any | None: ...

    def unlocked(self) -> list[Any]: ...

    def serialize(self) -> dict: ...

    def deserialize(self, data: dict) -> None: ...
