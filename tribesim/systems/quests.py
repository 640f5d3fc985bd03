"""Quest board: skill-gated missions assigned to individual agents."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tribesim.simulation.protocols import RandomSource, TribeMember

TIME_LIMITS = {"easy": 50, "medium": 75, "hard": 100}


@dataclass(frozen=True)
class QuestTemplate:
    type: str
    difficulty: str
    name: str
    description: str
    skills: tuple[str, ...]  # any one of these qualifies
    target: Callable[[TribeMember, RandomSource], dict]
    tokens: int
    experience: int
    resources: dict[str, float] = field(default_factory=dict)


def _next_tribe(tribe: str) -> str:
    return {"Alpha": "Beta", "Beta": "Gamma"}.get(tribe, "Alpha")


QUEST_TEMPLATES: tuple[QuestTemplate, ...] = (
    QuestTemplate(
        "gather", "easy", "Resource Gathering", "Gather resources for the tribe",
        ("farming", "mining"),
        lambda a, r: {
            "resource": "food" if r.random() < 0.5 else "materials",
            "amount": 50 + r.randint(0, 99),
        },
        25, 30,
    ),
    QuestTemplate(
        "combat", "medium", "Eliminate Target", "Eliminate an enemy agent",
        ("combat",),
        lambda a, r: {"tribe": _next_tribe(a.tribe)},
        50, 75,
    ),
    QuestTemplate(
        "research", "easy", "Study Knowledge", "Conduct research for the tribe",
        ("research",),
        lambda a, r: {"resource": "knowledge", "amount": 30 + r.randint(0, 49)},
        35, 50, {"knowledge": 20},
    ),
    QuestTemplate(
        "build", "medium", "Construction Project", "Gather materials for construction",
        ("building",),
        lambda a, r: {"resource": "materials", "amount": 80 + r.randint(0, 119)},
        40, 60,
    ),
    QuestTemplate(
        "explore", "easy", "Explore Territory", "Explore and claim new lands",
        ("trade", "diplomacy"),
        lambda a, r: {"amount": 3 + r.randint(0, 4)},
        30, 40, {"social_capital": 15},
    ),
    QuestTemplate(
        "trade", "medium", "Trade Mission", "Complete profitable trades",
        ("trade",),
        lambda a, r: {"amount": 2 + r.randint(0, 2)},
        45, 50, {"social_capital": 25},
    ),
    QuestTemplate(
        "diplomacy", "hard", "Diplomatic Mission", "Form alliances with other agents",
        ("diplomacy",),
        lambda a, r: {"amount": 2 + r.randint(0, 1)},
        60, 80, {"social_capital": 40},
    ),
)  # fmt: skip


@dataclass
class Quest:
    id: str
    type: str
    name: str
    description: str
    difficulty: str
    agent_id: str
    target: dict
    max_progress: float
    start_day: int
    time_limit: int
    reward_tokens: int
    reward_experience: int
    reward_resources: dict[str, float] = field(default_factory=dict)
    progress: float = 0.0
    status: str = "active"  # active | completed | failed | abandoned


class QuestBoard:
    """Creates quests and tracks their progress."""

    def __init__(self, grid_size: int = 10):
        self._grid_size = grid_size
        self._quests: dict[str, Quest] = {}
        self._count = 0

    def generate(self, member: TribeMember, rng: RandomSource, day: int) -> Quest | None:
        """Offer a random quest the member's skills qualify for.

        Returns:
            The new quest, or None for a dead member or one with no fitting skill
        """
        if not member.alive:
            return None
        fitting = [t for t in QUEST_TEMPLATES if any(s in member.skills for s in t.skills)]
        if not fitting:
            return None

        template = rng.choice(fitting)
        target = template.target(member, rng)
        target["location"] = [
            rng.randint(0, self._grid_size - 1),
            rng.randint(0, self._grid_size - 1),
        ]
        quest = Quest(
            id=f"quest-{self._count}",
            type=template.type,
            name=template.name,
            description=template.description,
            difficulty=template.difficulty,
            agent_id=member.id,
            target=target,
            max_progress=float(target.get("amount", 1)),
            start_day=day,
            time_limit=TIME_LIMITS[template.difficulty],
            reward_tokens=template.tokens,
            reward_experience=template.experience,
            reward_resources=dict(template.resources),
        )
        self._count += 1
        self._quests[quest.id] = quest
        return quest

    def get(self, quest_id: str) -> Quest | None:
        return self._quests.get(quest_id)

    def for_agent(self, agent_id: str) -> list[Quest]:
        return [q for q in self._quests.values() if q.agent_id == agent_id]

    def active(self) -> list[Quest]:
        return [q for q in self._quests.values() if q.status == "active"]

    def advance(self, quest_id: str, amount: float) -> bool:
        """Add progress. Returns True only when this call completes the quest."""
        quest = self._quests.get(quest_id)
        if quest is None or quest.status != "active":
            return False
        quest.progress += amount
        if quest.progress >= quest.max_progress:
            quest.status = "completed"
            return True
        return False

    def complete(self, quest_id: str) -> Quest | None:
        quest = self._quests.get(quest_id)
        if quest is None:
            return None
        quest.status = "completed"
        return quest

    def fail(self, quest_id: str) -> bool:
        return self._set_status(quest_id, "failed")

    def abandon(self, quest_id: str) -> bool:
        return self._set_status(quest_id, "abandoned")

    def _set_status(self, quest_id: str, status: str) -> bool:
        quest = self._quests.get(quest_id)
        if quest is None:
            return False
        quest.status = status
        return True

    def expire(self, day: int) -> list[Quest]:
        """Fail every active quest older than its time limit."""
        expired = []
        for quest in self._quests.values():
            if quest.status == "active" and day - quest.start_day > quest.time_limit:
                quest.status = "failed"
                expired.append(quest)
        return expired

    def serialize(self) -> dict:
        return {
            "version": 1,
            "count": self._count,
            "quests": [asdict(q) for q in self._quests.values()],
        }

    def deserialize(self, data: dict) -> None:
        self._quests = {}
        for raw in data.get("quests", []):
            quest = Quest(**raw)
            self._quests[quest.id] = quest
        self._count = int(data.get("count", len(self._quests)))
