"""In-world message log: chat, trade, diplomacy, combat and celebrations."""

from __future__ import annotations

import itertools
from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum


class MessageType(str, Enum):
    """Category tag for a logged message."""

    CHAT = "chat"
    TRADE = "trade"
    DIPLOMACY = "diplomacy"
    COMBAT = "combat"
    CELEBRATION = "celebration"


SYSTEM_SOURCE = "system"


@dataclass(frozen=True)
class Message:
    """Immutable log record."""

    id: str
    agent_id: str
    agent_name: str
    tribe: str
    content: str
    day: int
    type: MessageType

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "tribe": self.tribe,
            "content": self.content,
            "day": self.day,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Message:
        return cls(
            id=data["id"],
            agent_id=data["agent_id"],
            agent_name=data["agent_name"],
            tribe=data["tribe"],
            content=data["content"],
            day=int(data["day"]),
            type=MessageType(data["type"]),
        )


class MessageLog:
    """Bounded FIFO log of messages.

    Once the cap is exceeded the oldest entries are evicted first. Per-type
    totals are cumulative and survive eviction.
    """

    def __init__(self, cap: int = 100):
        self._cap = cap
        self._entries: deque[Message] = deque(maxlen=cap)
        self._totals: Counter[str] = Counter()
        self._ids = itertools.count(1)

    def append(self, message: Message) -> None:
        self._entries.append(message)
        self._totals[message.type.value] += 1

    def emit(
        self,
        agent_id: str,
        agent_name: str,
        tribe: str,
        content: str,
        day: int,
        type: MessageType,
    ) -> Message:
        """Build a message with a fresh id and append it."""
        message = Message(
            id=f"{type.value}-{day}-{next(self._ids)}",
            agent_id=agent_id,
            agent_name=agent_name,
            tribe=tribe,
            content=content,
            day=day,
            type=type,
        )
        self.append(message)
        return message

    def recent(self, limit: int = 20) -> list[Message]:
        """The newest ``limit`` messages, oldest first."""
        if limit <= 0:
            return []
        return list(self._entries)[-limit:]

    def total(self, type: MessageType) -> int:
        """Number of messages of this type ever logged."""
        return self._totals[type.value]

    @property
    def cap(self) -> int:
        return self._cap

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def serialize(self) -> dict:
        return {
            "version": 1,
            "cap": self._cap,
            "entries": [m.to_dict() for m in self._entries],
            "totals": dict(self._totals),
        }

    def deserialize(self, data: dict) -> None:
        self._cap = int(data.get("cap", self._cap))
        self._entries = deque(
            (Message.from_dict(m) for m in data.get("entries", [])), maxlen=self._cap
        )
        self._totals = Counter(data.get("totals", {}))
        self._ids = itertools.count(sum(self._totals.values()) + 1)
