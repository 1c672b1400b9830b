"""Intent-first orchestration: completion client, reconciler, fallback chat."""

from __future__ import annotations

from .completion import CompletionClient, OpenAICompletionClient
from .diagnostics import (
    Diagnostic,
    DiagnosticSink,
    FanOutDiagnosticSink,
    JsonlDiagnosticSink,
    LoggingDiagnosticSink,
)
from .fallback import ConversationalFallback, FallbackReply
from .reconciler import IntentReconciler, TurnResult, TurnState

__all__ = [
    "CompletionClient",
    "ConversationalFallback",
    "Diagnostic",
    "DiagnosticSink",
    "FallbackReply",
    "FanOutDiagnosticSink",
    "IntentReconciler",
    "JsonlDiagnosticSink",
    "LoggingDiagnosticSink",
    "OpenAICompletionClient",
    "TurnResult",
    "TurnState",
]
