"""
Unit tests for event title matching and the context summary.
"""

from calendar_copilot.intent import EMPTY_SUMMARY, match_event, render_context_summary

from conftest import make_event


class TestMatchEvent:
    def test_empty_snapshot(self):
        assert match_event([], "anything") is None

    def test_blank_queries(self):
        events = [make_event("Standup", 9)]
        assert match_event(events, "") is None
        assert match_event(events, "  ") is None
        assert match_event(events, None) is None

    def test_earliest_match_wins(self):
        events = [make_event("Standup", 9), make_event("Standup Notes", 10)]
        assert match_event(events, "standup").starts_at.hour == 9

    def test_case_insensitive_substring(self):
        events = [make_event("Dentist appointment", 14)]
        assert match_event(events, "  DENTIST ").title == "Dentist appointment"

    def test_no_match(self):
        events = [make_event("Gym", 7)]
        assert match_event(events, "yoga") is None


class TestRenderContextSummary:
    def test_empty(self):
        assert render_context_summary([]) == EMPTY_SUMMARY == "No events scheduled for today."

    def test_lines_with_and_without_location(self):
        events = [
            make_event("Standup", 9, minutes=15),
            make_event("Lunch", 12, minutes=60, location="Cafe Rio"),
        ]
        assert render_context_summary(events) == (
            "- Standup from 09:00 to 09:15\n"
            "- Lunch @ Cafe Rio from 12:00 to 13:00"
        )
