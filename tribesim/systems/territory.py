"""Territory map: tribes claim grid cells, and claims decay over time."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Territory:
    """A claimed grid cell."""

    x: int
    y: int
    tribe: str
    strength: float
    structures: list[str] = field(default_factory=list)


class TerritoryMap:
    """Cell ownership keyed by (x, y)."""

    DECAY_AMOUNT = 0.1

    def __init__(self) -> None:
        self._cells: dict[tuple[int, int], Territory] = {}

    def claim(self, x: int, y: int, tribe: str, strength: float = 10.0) -> bool:
        """Claim a cell. An existing claim is replaced only by a stronger one."""
        existing = self._cells.get((x, y))
        if existing is not None and strength <= existing.strength:
            return False
        self._cells[(x, y)] = Territory(x=x, y=y, tribe=tribe, strength=strength)
        return True

    def decay(self, amount: float | None = None) -> int:
        """Weaken every claim and drop those that reach zero.

        Returns:
            Number of claims removed
        """
        step = self.DECAY_AMOUNT if amount is None else amount
        lost = []
        for key, cell in self._cells.items():
            cell.strength = max(0.0, cell.strength - step)
            if cell.strength <= 0:
                lost.append(key)
        for key in lost:
            del self._cells[key]
        return len(lost)

    def owner(self, x: int, y: int) -> str | None:
        cell = self._cells.get((x, y))
        return cell.tribe if cell else None

    def get(self, x: int, y: int) -> Territory | None:
        return self._cells.get((x, y))

    def cells(self, tribe: str | None = None) -> list[Territory]:
        return [c for c in self._cells.values() if tribe is None or c.tribe == tribe]

    def count(self, tribe: str) -> int:
        return sum(1 for c in self._cells.values() if c.tribe == tribe)

    def add_structure(self, x: int, y: int, structure: str) -> bool:
        cell = self._cells.get((x, y))
        if cell is None:
            return False
        cell.structures.append(structure)
        return True

    def serialize(self) -> dict:
        return {
            "version": 1,
            "cells": [
                {
                    "x": c.x,
                    "y": c.y,
                    "tribe": c.tribe,
                    "strength": c.strength,
                    "structures": list(c.structures),
                }
                for c in self._cells.values()
            ],
        }

    def deserialize(self, data: dict) -> None:
        self._cells = {}
        for raw in data.get("cells", []):
            cell = Territory(
                x=int(raw["x"]),
                y=int(raw["y"]),
                tribe=raw["tribe"],
                strength=float(raw["strength"]),
                structures=list(raw.get("structures", [])),
            )
            self._cells[(cell.x, cell.y)] = cell
