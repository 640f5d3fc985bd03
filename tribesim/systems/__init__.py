"""Satellite subsystems: self-contained registries the engine integrates.

Each exposes ``serialize()``/``deserialize(data)``; deserializing an empty
dict yields the default state. Infeasible operations return False/None.
"""

from tribesim.systems.achievements import AchievementTracker, VictoryResult
from tribesim.systems.buildings import BuildingRegistry
from tribesim.systems.currency import TokenLedger
from tribesim.systems.diplomacy import TribeDiplomacy
from tribesim.systems.events import WorldEventTable
from tribesim.systems.quests import QuestBoard
from tribesim.systems.technology import TechTree
from tribesim.systems.territory import TerritoryMap

__all__ = [
    "AchievementTracker",
    "BuildingRegistry",
    "QuestBoard",
    "TechTree",
    "TerritoryMap",
    "TokenLedger",
    "TribeDiplomacy",
    "VictoryResult",
    "WorldEventTable",
]
