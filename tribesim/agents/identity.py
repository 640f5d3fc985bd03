"""Agent identity: skills, specializations, and names."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tribesim.simulation.protocols import RandomSource


SKILLS: tuple[str, ...] = (
    "farming",
    "mining",
    "research",
    "trade",
    "combat",
    "building",
    "diplomacy",
    "crafting",
    "leadership",
)


class Specialization(str, Enum):
    """Derived agent role, fixed at creation from the skill combination."""

    WARRIOR = "warrior"
    MERCHANT = "merchant"
    BUILDER = "builder"
    CRAFTSMAN = "craftsman"
    LEADER = "leader"
    HEALER = "healer"
    SCOUT = "scout"
    NONE = "none"


NAME_PREFIXES: dict[str, tuple[str, ...]] = {
    "Alpha": ("Zar", "Thor", "Rax", "Kael", "Vorn", "Jax", "Mor", "Xan"),
    "Beta": ("Luna", "Aura", "Vea", "Sol", "Nyx", "Cela", "Mira", "Zia"),
    "Gamma": ("Grog", "Brak", "Zogg", "Krull", "Drog", "Varg", "Hulk", "Thrak"),
}
NAME_SUFFIXES: tuple[str, ...] = ("ian", "ara", "on", "ix", "us", "is", "or", "a")


def generate_skills(rng: RandomSource) -> list[str]:
    """Draw two or three distinct skills from the vocabulary."""
    count = rng.randint(2, 3)
    return list(rng.sample(SKILLS, count))


def determine_specialization(skills: Sequence[str]) -> Specialization:
    """Derive a specialization from a skill set.

    Rules are checked in priority order and the first match wins.

    Args:
        skills: The agent's skill tags

    Returns:
        The matching specialization, or ``Specialization.NONE``
    """
    owned = set(skills)
    if {"combat", "leadership"} <= owned:
        return Specialization.WARRIOR
    if {"trade", "diplomacy"} <= owned:
        return Specialization.MERCHANT
    if "building" in owned:
        return Specialization.BUILDER
    if {"research", "crafting"} <= owned:
        return Specialization.CRAFTSMAN
    if {"diplomacy", "leadership"} <= owned:
        return Specialization.LEADER
    if "farming" in owned and len(skills) < 3:
        return Specialization.HEALER
    if "trade" in owned and len(skills) < 3:
        return Specialization.SCOUT
    return Specialization.NONE


def generate_name(tribe: str, rng: RandomSource) -> str:
    """Build a tribe-flavoured display name (prefix + suffix)."""
    prefixes = NAME_PREFIXES.get(tribe, NAME_PREFIXES["Alpha"])
    return rng.choice(prefixes) + rng.choice(NAME_SUFFIXES)
