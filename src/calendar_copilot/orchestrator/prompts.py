from __future__ import annotations

SYSTEM_PROMPT = """You are Calendar Copilot, a focused personal assistant that knows today's calendar.
- Keep replies short and clear. No code fences.
- Use the calendar context when the user asks about their day."""

INTENT_PROMPT_TEMPLATE = """You turn a user's message into a calendar action for today ({today}, current time {now}).
Respond with ONLY a JSON object of this shape:
{{
  "action": "create" | "edit" | "delete" | "unknown",
  "clarification": "question for the user, empty if none",
  "events": [
    {{"title": "string", "newTitle": "string", "startTime": "ISO 8601 or HH:mm",
      "endTime": "ISO 8601 or HH:mm", "durationMinutes": number}}
  ]
}}
Rules:
- "create" adds events, "edit" changes existing events, "delete" removes them.
- For "edit" and "delete", "title" names the existing event; "newTitle" renames it.
- Use "unknown" with an empty events list when the message is not a calendar request.
- Only ask for clarification when the request cannot be carried out at all.

Today's events:
{summary}

User message:
{utterance}"""

FALLBACK_PROMPT_TEMPLATE = """Calendar context for today:
{summary}

Recent conversation:
{transcript}

User: {utterance}"""


def build_intent_prompt(*, utterance: str, summary: str, today: str, now: str) -> str:
    return INTENT_PROMPT_TEMPLATE.format(utterance=utterance, summary=summary, today=today, now=now)


def build_fallback_prompt(*, utterance: str, summary: str, transcript: str) -> str:
    return FALLBACK_PROMPT_TEMPLATE.format(
        utterance=utterance,
        summary=summary,
        transcript=transcript or "(none)",
    )
