"""
Unit tests for ChatSession and CalendarService.

Tests:
- loading today's events, access denial and load errors
- one turn at a time
- quick-create through the calendar service
"""

import asyncio
import json
from datetime import timedelta

import pytest

from calendar_copilot.domain import MessageRole, RepeatFrequency
from calendar_copilot.intent import EMPTY_SUMMARY
from calendar_copilot.orchestrator import TurnState

from conftest import REFERENCE, FakeCompletion, at, build_session, make_event


class BlockingCompletion(FakeCompletion):
    """Holds the first request open until ``release`` is set."""

    def __init__(self, responses):
        super().__init__(responses)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def respond(self, prompt: str) -> str:
        self.started.set()
        await self.release.wait()
        return await super().respond(prompt)


class TestLoadTodayEvents:
    @pytest.mark.asyncio
    async def test_loads_sorted_snapshot_and_summary(self, store):
        store.seed([make_event("Lunch", 12, location="Cafe"), make_event("Standup", 9)])
        session = build_session(store, FakeCompletion())

        assert await session.load_today_events() is True

        assert [event.title for event in session.events] == ["Standup", "Lunch"]
        assert session.context_summary == (
            "- Standup from 09:00 to 09:30\n- Lunch @ Cafe from 12:00 to 12:30"
        )

    @pytest.mark.asyncio
    async def test_empty_day(self, store):
        session = build_session(store, FakeCompletion())

        await session.load_today_events()

        assert session.events == []
        assert session.context_summary == EMPTY_SUMMARY

    @pytest.mark.asyncio
    async def test_permission_denied_keeps_snapshot(self, store):
        store.permission_granted = False
        session = build_session(store, FakeCompletion())

        assert await session.load_today_events() is False

        assert session.calendar.access_denied is True
        assert "list_events" not in store.call_names()

    @pytest.mark.asyncio
    async def test_store_error_is_exposed(self, store):
        store.seed([make_event("Standup", 9)])
        session = build_session(store, FakeCompletion())
        await session.load_today_events()
        store.fail_on = "list_events"

        assert await session.load_today_events() is False

        assert session.calendar.error_message == "list_events exploded"
        assert [event.title for event in session.events] == ["Standup"]
        assert session.calendar.is_loading is False


class TestSendMessage:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", None])
    async def test_blank_input_is_ignored(self, store, text):
        completion = FakeCompletion()
        session = build_session(store, completion)

        assert await session.send_message(text) is None

        assert session.messages == []
        assert completion.prompts == []

    @pytest.mark.asyncio
    async def test_create_through_chat_updates_snapshot(self, store):
        completion = FakeCompletion(
            [json.dumps({"action": "create", "events": [{"title": "Lunch", "startTime": "12:00", "durationMinutes": 45}]})]
        )
        session = build_session(store, completion)
        await session.load_today_events()

        reply = await session.send_message("  lunch at noon  ")

        assert reply.role is MessageRole.ASSISTANT
        assert reply.text == "Created 1 event(s) for today."
        assert [message.text for message in session.messages] == ["lunch at noon", reply.text]
        assert session.events[0].ends_at == at(12, 45)
        assert session.context_summary == "- Lunch from 12:00 to 12:45"
        assert session.last_result.state is TurnState.APPLYING
        assert session.is_processing is False

    @pytest.mark.asyncio
    async def test_second_message_during_turn_is_dropped(self, store):
        completion = BlockingCompletion([json.dumps({"action": "unknown"}), "Hi!"])
        session = build_session(store, completion)

        first = asyncio.create_task(session.send_message("hello"))
        await completion.started.wait()

        assert session.is_processing is True
        assert await session.send_message("again") is None

        completion.release.set()
        reply = await first

        assert reply.text == "Hi!"
        assert [message.text for message in session.messages] == ["hello", "Hi!"]
        assert session.is_processing is False

    @pytest.mark.asyncio
    async def test_history_reaches_fallback_prompt(self, store):
        completion = FakeCompletion(["not json", "First answer", "still not json", "Second answer"])
        session = build_session(store, completion)

        await session.send_message("first question")
        await session.send_message("second question")

        fallback_prompt = completion.prompts[-1]
        assert "User: first question" in fallback_prompt
        assert "Assistant: First answer" in fallback_prompt

    @pytest.mark.asyncio
    async def test_first_turn_loads_snapshot_before_matching(self, store):
        store.seed([make_event("Standup", 9)])
        completion = FakeCompletion([json.dumps({"action": "delete", "events": [{"title": "standup"}]})])
        session = build_session(store, completion)

        reply = await session.send_message("cancel standup")

        assert reply.text == "Deleted 1 event(s) for today."
        assert store.events_by_id == {}
        assert store.call_names() == ["list_events", "delete_many", "list_events"]
        assert session.events == []

    @pytest.mark.asyncio
    async def test_later_turns_reuse_snapshot(self, store):
        completion = FakeCompletion([json.dumps({"action": "unknown"}), "Hi", json.dumps({"action": "unknown"}), "Hi"])
        session = build_session(store, completion)

        await session.send_message("hello")
        await session.send_message("hello again")

        assert store.call_names() == ["list_events"]

    @pytest.mark.asyncio
    async def test_access_denied_during_turn_sets_flag(self, store):
        completion = FakeCompletion([json.dumps({"action": "delete", "events": [{"title": "Standup"}]})])
        store.seed([make_event("Standup", 9)])
        session = build_session(store, completion)
        await session.load_today_events()
        store.permission_granted = False

        reply = await session.send_message("cancel standup")

        assert session.calendar.access_denied is True
        assert session.error_message == reply.text
        assert [event.title for event in session.events] == ["Standup"]


class TestQuickCreate:
    @pytest.mark.asyncio
    async def test_blank_fields_become_defaults(self, store):
        session = build_session(store, FakeCompletion())

        created = await session.calendar.create_event(
            "  ",
            at(15),
            20,
            location=" ",
            notes="Bring slides",
            repeat_rule=RepeatFrequency.WEEKLY,
        )

        assert created.title == "New Event"
        assert created.location is None
        assert created.notes == "Bring slides"
        assert created.duration == timedelta(minutes=20)
        assert [event.external_id for event in session.events] == [created.external_id]

    @pytest.mark.asyncio
    async def test_failure_sets_error_message(self, store):
        store.fail_on = "create"
        session = build_session(store, FakeCompletion())

        assert await session.calendar.create_event("Call", at(15), 30) is None

        assert session.calendar.error_message == "create exploded"

    @pytest.mark.asyncio
    async def test_non_positive_duration_is_rejected(self, store):
        session = build_session(store, FakeCompletion())

        assert await session.calendar.create_event("Call", at(15), 0) is None

        assert session.calendar.error_message
        assert store.calls == []


def test_today_uses_clock(store):
    session = build_session(store, FakeCompletion())
    day = session.calendar.today()
    assert day.start == REFERENCE.replace(hour=0)
    assert day.end - day.start == timedelta(days=1)
