"""Tests for the message log and dialogue tables."""

from __future__ import annotations

from tests.helpers import ScriptedRandom, make_agent
from tribesim.simulation.dialogue import DIALOGUE_LINES, pick_dialogue
from tribesim.simulation.messages import Message, MessageLog, MessageType


def _chat(log: MessageLog, n: int, type: MessageType = MessageType.CHAT) -> None:
    for i in range(n):
        log.emit("agent-0", "Zarian", "Alpha", f"line {i}", i, type)


class TestMessageLog:
    def test_emit_builds_ids(self, messages):
        message = messages.emit("agent-0", "Zarian", "Alpha", "hi", 4, MessageType.TRADE)

        assert message.id == "trade-4-1"
        assert list(messages) == [message]

    def test_cap_evicts_oldest_first(self):
        log = MessageLog(cap=3)
        _chat(log, 5)

        assert len(log) == 3
        assert [m.content for m in log] == ["line 2", "line 3", "line 4"]

    def test_totals_survive_eviction(self):
        log = MessageLog(cap=2)
        _chat(log, 3, MessageType.COMBAT)
        _chat(log, 1)

        assert log.total(MessageType.COMBAT) == 3
        assert log.total(MessageType.CHAT) == 1
        assert log.total(MessageType.TRADE) == 0

    def test_recent(self, messages):
        _chat(messages, 5)

        assert [m.content for m in messages.recent(2)] == ["line 3", "line 4"]
        assert len(messages.recent(50)) == 5
        assert messages.recent(0) == []

    def test_append_prebuilt_message(self, messages):
        message = Message("x", "system", "System", "Global", "hello", 1, MessageType.DIPLOMACY)

        messages.append(message)

        assert messages.recent(1) == [message]
        assert messages.total(MessageType.DIPLOMACY) == 1

    def test_roundtrip_continues_ids(self):
        log = MessageLog(cap=2)
        _chat(log, 3)

        restored = MessageLog()
        restored.deserialize(log.serialize())
        extra = restored.emit("agent-1", "Lunara", "Beta", "again", 9, MessageType.CHAT)

        assert restored.cap == 2
        assert restored.total(MessageType.CHAT) == 4
        assert extra.id == "chat-9-4"
        assert [m.content for m in restored] == ["line 2", "again"]


class TestDialogue:
    def test_low_resources_take_priority(self):
        hungry = make_agent("a", food=10.0)
        rng = ScriptedRandom([0.0])

        line = pick_dialogue(hungry, "farming", rng)

        assert line == DIALOGUE_LINES["low_resources"][0]
        assert rng.calls == 0

    def test_celebration_roll(self):
        agent = make_agent("a")

        line = pick_dialogue(agent, "farming", ScriptedRandom([0.1]))

        assert line == DIALOGUE_LINES["celebration"][0]

    def test_action_table(self):
        agent = make_agent("a")

        assert pick_dialogue(agent, "mining", ScriptedRandom([0.5])) == "Struck something valuable!"

    def test_unknown_action_greets(self):
        agent = make_agent("a")

        assert pick_dialogue(agent, "idle", ScriptedRandom([0.5])) == "Greetings, fellow agent!"
