"""Tests for conversation context assembly."""

import pytest

from jinoca.context import ContextBuilder, build_context
from jinoca.persona import SYSTEM_PROMPT
from jinoca.transport.base import HistoryMessage


def _history(n: int, start: int = 0) -> list[HistoryMessage]:
    return [
        HistoryMessage(id=f"H{i}", body=f"msg {i}", from_me=(i % 2 == 1), timestamp=float(i))
        for i in range(start, start + n)
    ]


class TestBuildContext:

    def test_no_history(self, make_message):
        msg = make_message("oi")
        result = build_context(msg, [], limit=10)
        assert [m.role for m in result] == ["system", "user"]
        assert result[0].content == SYSTEM_PROMPT
        assert result[-1].content == "oi"

    def test_roles_follow_sender(self, make_message):
        msg = make_message("e aí?")
        result = build_context(msg, _history(4), limit=10)
        assert [m.role for m in result] == ["system", "user", "assistant", "user", "assistant", "user"]
        assert [m.content for m in result[1:-1]] == ["msg 0", "msg 1", "msg 2", "msg 3"]

    def test_limit_keeps_most_recent(self, make_message):
        msg = make_message("agora")
        result = build_context(msg, _history(15), limit=10)
        assert len(result) == 12
        assert result[1].content == "msg 5"
        assert result[-2].content == "msg 14"

    def test_zero_limit_disables_history(self, make_message):
        msg = make_message("oi")
        result = build_context(msg, _history(5), limit=0)
        assert len(result) == 2
        assert result[0].role == "system"
        assert result[1].content == "oi"

    def test_current_message_not_duplicated(self, make_message):
        msg = make_message("oi", id="CURRENT")
        history = _history(3) + [HistoryMessage(id="CURRENT", body="oi", from_me=False, timestamp=99)]
        result = build_context(msg, history, limit=10)
        assert [m.content for m in result].count("oi") == 1
        assert result[-1].content == "oi"

    def test_empty_turns_dropped(self, make_message):
        msg = make_message("oi")
        history = [
            HistoryMessage(id="A", body="", from_me=False),
            HistoryMessage(id="B", body="   ", from_me=True),
            HistoryMessage(id="C", body="ola", from_me=False),
        ]
        result = build_context(msg, history, limit=10)
        assert [m.content for m in result[1:]] == ["ola", "oi"]

    def test_single_system_turn(self, make_message):
        msg = make_message("oi")
        result = build_context(msg, _history(20), limit=10)
        assert result[0].role == "system"
        assert all(m.role != "system" for m in result[1:])


class TestContextBuilder:

    @pytest.mark.asyncio
    async def test_fetches_one_extra(self, transport, make_message):
        transport.history = _history(3)
        builder = ContextBuilder(transport, history_limit=10)
        result = await builder.build(make_message("oi"))
        assert transport.history_requests == [("5511999990000@c.us", 11)]
        assert len(result) == 5

    @pytest.mark.asyncio
    async def test_zero_limit_skips_fetch(self, transport, make_message):
        transport.history = _history(3)
        builder = ContextBuilder(transport, history_limit=0)
        result = await builder.build(make_message("oi"))
        assert transport.history_requests == []
        assert len(result) == 2

    @pytest.mark.asyncio
    async def test_history_failure_degrades(self, transport, make_message):
        transport.fail_history = True
        builder = ContextBuilder(transport, history_limit=10)
        result = await builder.build(make_message("oi"))
        assert [m.role for m in result] == ["system", "user"]
