"""Structured diagnostic events for the intent pipeline.

Each skip or fallback decision made while handling a turn is reported as a
:class:`Diagnostic`. Sinks decide where they go: the logging sink writes
them to the standard logger, the JSONL sink appends them to a file for later
inspection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Protocol, runtime_checkable

import orjson

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class Diagnostic:
    event: str
    level: int = logging.INFO
    fields: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "event": self.event,
            "level": logging.getLevelName(self.level),
            "fields": self.fields,
        }


@runtime_checkable
class DiagnosticSink(Protocol):
    def emit(self, diagnostic: Diagnostic) -> None: ...


class LoggingDiagnosticSink:
    def __init__(self, name: str = "calendar_copilot.diagnostics") -> None:
        self._logger = logging.getLogger(name)

    def emit(self, diagnostic: Diagnostic) -> None:
        details = " ".join(f"{key}={value!r}" for key, value in diagnostic.fields.items())
        self._logger.log(diagnostic.level, "%s %s", diagnostic.event, details)


class JsonlDiagnosticSink:
    def __init__(self, path: Path) -> None:
        self.path = path

    def emit(self, diagnostic: Diagnostic) -> None:
        line = orjson.dumps(diagnostic.to_dict(), default=_json_default)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("ab") as handle:
                handle.write(line + b"\n")
        except OSError as exc:
            # A broken diagnostics file must not break the chat turn.
            logger.warning("Could not write diagnostic to %s: %s", self.path, exc)


class FanOutDiagnosticSink:
    def __init__(self, sinks: Iterable[DiagnosticSink]) -> None:
        self.sinks = list(sinks)

    def emit(self, diagnostic: Diagnostic) -> None:
        for sink in self.sinks:
            sink.emit(diagnostic)
