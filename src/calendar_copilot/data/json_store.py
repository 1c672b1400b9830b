from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import orjson

from ..config import DATA_DIR
from ..domain import CalendarEvent, DayRange, EventNotFoundError, TransientStoreError
from .base import sort_events

logger = logging.getLogger(__name__)

EVENTS_FILE = DATA_DIR / "events.json"

DEFAULT_STATE: Dict[str, Any] = {
    "events": [],
    "counters": {"event": 0},
    "metadata": {"schema_version": 1},
}


class JsonEventStore:
    """Event store persisted to a local JSON document."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or EVENTS_FILE
        self._state: Optional[Dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_materialized(self) -> Dict[str, Any]:
        if self._state is not None:
            return self._state
        try:
            if not self._path.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._state = deepcopy(DEFAULT_STATE)
                self._persist()
                return self._state
            raw = self._path.read_bytes()
            state = orjson.loads(raw) if raw.strip() else deepcopy(DEFAULT_STATE)
        except (OSError, orjson.JSONDecodeError) as exc:
            raise TransientStoreError(f"Could not read {self._path}: {exc}") from exc
        # Backfill missing keys when upgrading.
        for key, value in DEFAULT_STATE.items():
            state.setdefault(key, deepcopy(value))
        self._state = state
        return state

    def _persist(self) -> None:
        if self._state is None:
            return
        payload = orjson.dumps(self._state, option=orjson.OPT_INDENT_2)
        try:
            self._path.write_bytes(payload + b"\n")
        except OSError as exc:
            raise TransientStoreError(f"Could not write {self._path}: {exc}") from exc

    def _mutate(self, callback: Callable[[Dict[str, Any]], Any]) -> Any:
        state = self._ensure_materialized()
        snapshot = deepcopy(state)
        result = callback(state)
        try:
            self._persist()
        except TransientStoreError:
            self._state = snapshot
            raise
        return result

    def _consume_id(self, state: Dict[str, Any]) -> str:
        counters = state.setdefault("counters", {})
        current = counters.get("event", 0) + 1
        counters["event"] = current
        return f"event_{current:04d}"

    def _load_events(self) -> List[CalendarEvent]:
        events = []
        for record in self._ensure_materialized()["events"]:
            try:
                events.append(CalendarEvent.from_record(record))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping malformed event record %r: %s", record.get("id"), exc)
        return events

    async def check_or_request_permission(self) -> bool:
        self._ensure_materialized()
        return True

    async def list_events(self, day: DayRange) -> List[CalendarEvent]:
        return sort_events(event for event in self._load_events() if day.overlaps(event))

    async def create(self, event: CalendarEvent) -> CalendarEvent:
        def _create(state: Dict[str, Any]) -> CalendarEvent:
            stored = replace(event, external_id=self._consume_id(state))
            state["events"].append(stored.to_record())
            return stored

        created = self._mutate(_create)
        logger.debug("Created event %s (%s)", created.external_id, created.title)
        return created

    async def update(
        self,
        event_id: str,
        *,
        title: str,
        starts_at: datetime,
        duration: timedelta,
    ) -> CalendarEvent:
        def _update(state: Dict[str, Any]) -> CalendarEvent:
            for index, record in enumerate(state["events"]):
                if record.get("id") == event_id:
                    existing = CalendarEvent.from_record(record)
                    updated = replace(existing, title=title, starts_at=starts_at, ends_at=starts_at + duration)
                    state["events"][index] = updated.to_record()
                    return updated
            raise EventNotFoundError(event_id)

        return self._mutate(_update)

    async def delete_many(self, event_ids: Sequence[str]) -> None:
        wanted = set(event_ids)

        def _delete(state: Dict[str, Any]) -> List[str]:
            present = {record.get("id") for record in state["events"]}
            state["events"] = [record for record in state["events"] if record.get("id") not in wanted]
            return [event_id for event_id in event_ids if event_id not in present]

        missing = self._mutate(_delete)
        if missing:
            raise EventNotFoundError(*missing)
