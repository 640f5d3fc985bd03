"""Tests for the territory map."""

from __future__ import annotations

import pytest

from tribesim.systems.territory import TerritoryMap


class TestClaims:
    def test_claim_free_cell(self):
        territory = TerritoryMap()

        assert territory.claim(1, 2, "Alpha")
        assert territory.owner(1, 2) == "Alpha"
        assert territory.count("Alpha") == 1

    def test_equal_strength_does_not_replace(self):
        territory = TerritoryMap()
        territory.claim(1, 2, "Alpha", 10)

        assert not territory.claim(1, 2, "Beta", 10)
        assert territory.owner(1, 2) == "Alpha"

    def test_stronger_claim_replaces(self):
        territory = TerritoryMap()
        territory.claim(1, 2, "Alpha", 10)

        assert territory.claim(1, 2, "Beta", 12)
        assert territory.owner(1, 2) == "Beta"
        assert territory.count("Alpha") == 0

    def test_cells_filter_by_tribe(self):
        territory = TerritoryMap()
        territory.claim(0, 0, "Alpha")
        territory.claim(0, 1, "Beta")
        territory.claim(0, 2, "Alpha")

        assert len(territory.cells()) == 3
        assert {(c.x, c.y) for c in territory.cells("Alpha")} == {(0, 0), (0, 2)}


class TestDecay:
    def test_decay_weakens_and_removes(self):
        territory = TerritoryMap()
        territory.claim(0, 0, "Alpha", 0.1)
        territory.claim(0, 1, "Alpha", 5.0)

        removed = territory.decay()

        assert removed == 1
        assert territory.owner(0, 0) is None
        assert territory.get(0, 1).strength == pytest.approx(4.9)

    def test_custom_decay_amount(self):
        territory = TerritoryMap()
        territory.claim(0, 0, "Alpha", 5.0)

        assert territory.decay(5.0) == 1
        assert territory.count("Alpha") == 0


class TestStructures:
    def test_structure_needs_claimed_cell(self):
        territory = TerritoryMap()
        assert not territory.add_structure(0, 0, "wall")

        territory.claim(0, 0, "Alpha")
        assert territory.add_structure(0, 0, "wall")
        assert territory.get(0, 0).structures == ["wall"]

    def test_roundtrip(self):
        territory = TerritoryMap()
        territory.claim(3, 4, "Gamma", 7.5)
        territory.add_structure(3, 4, "tower")

        restored = TerritoryMap()
        restored.deserialize(territory.serialize())

        cell = restored.get(3, 4)
        assert (cell.tribe, cell.strength, cell.structures) == ("Gamma", 7.5, ["tower"])
