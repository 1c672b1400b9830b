"""
Unit tests for the Supabase-backed event repository.

The Supabase client is replaced by a recording fake of its query builder, so
these tests check the queries issued and how responses are mapped.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from calendar_copilot.config import SupabaseSettings
from calendar_copilot.data import SupabaseEventRepository, SupabaseGateway, SupabaseNotConfiguredError
from calendar_copilot.domain import DayRange, EventNotFoundError, TransientStoreError

from conftest import REFERENCE, at, make_event


@dataclass
class FakeQuery:
    table: str
    rows: List[Dict[str, Any]]
    steps: List[tuple] = field(default_factory=list)
    error: Exception = None

    def __getattr__(self, name):
        def step(*args, **kwargs):
            self.steps.append((name, args, kwargs))
            return self

        return step

    def execute(self):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=self.rows)


class FakeClient:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.queries: List[FakeQuery] = []

    def table(self, name):
        query = FakeQuery(name, self.rows, error=self.error)
        self.queries.append(query)
        return query


def _settings(url="https://example.supabase.co", key="anon"):
    return SupabaseSettings(url=url, anon_key=key, events_table="calendar_events", user_id=None)


def _repository(client, user_id="user-1"):
    gateway = SupabaseGateway(_settings(), _client=client)
    return SupabaseEventRepository(gateway=gateway, table_name="calendar_events", user_id=user_id)


def _step_names(query):
    return [name for name, _, _ in query.steps]


@pytest.mark.asyncio
async def test_list_events_scopes_and_maps_rows():
    rows = [
        dict(make_event("Lunch", 12, external_id="b").to_record(), user_id="user-1"),
        dict(make_event("Standup", 9, external_id="a").to_record(), user_id="user-1"),
    ]
    client = FakeClient(rows)

    events = await _repository(client).list_events(DayRange.containing(REFERENCE))

    assert [event.external_id for event in events] == ["a", "b"]
    (query,) = client.queries
    assert query.table == "calendar_events"
    assert _step_names(query) == ["select", "lt", "gt", "order", "eq"]
    assert query.steps[-1][1] == ("user_id", "user-1")


@pytest.mark.asyncio
async def test_create_sends_record_with_generated_id():
    client = FakeClient()

    created = await _repository(client).create(make_event("Lunch", 12))

    (query,) = client.queries
    name, args, _ = query.steps[0]
    assert name == "insert"
    payload = args[0]
    assert payload["user_id"] == "user-1"
    assert payload["title"] == "Lunch"
    assert created.external_id == payload["id"]


@pytest.mark.asyncio
async def test_update_without_rows_is_not_found():
    repository = _repository(FakeClient([]), user_id=None)

    with pytest.raises(EventNotFoundError):
        await repository.update("abc", title="x", starts_at=at(9), duration=timedelta(minutes=30))


@pytest.mark.asyncio
async def test_delete_reports_ids_missing_from_response():
    client = FakeClient([{"id": "a"}])

    with pytest.raises(EventNotFoundError) as excinfo:
        await _repository(client).delete_many(["a", "b"])

    assert excinfo.value.event_ids == ("b",)
    assert _step_names(client.queries[0]) == ["delete", "in_", "eq"]


@pytest.mark.asyncio
async def test_client_errors_become_transient():
    repository = _repository(FakeClient(error=ConnectionError("offline")))

    with pytest.raises(TransientStoreError, match="offline"):
        await repository.list_events(DayRange.containing(REFERENCE))


@pytest.mark.asyncio
async def test_unconfigured_gateway():
    gateway = SupabaseGateway(_settings(url=None))
    repository = SupabaseEventRepository(gateway=gateway, table_name="calendar_events")

    assert await repository.check_or_request_permission() is False
    with pytest.raises(SupabaseNotConfiguredError):
        await repository.create(make_event("Lunch", 12))
