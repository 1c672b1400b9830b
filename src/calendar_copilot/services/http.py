from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from hypercorn.asyncio import serve
from hypercorn.config import Config
from pydantic import BaseModel

from .chat import ChatSession
from .context import ServiceContext
from .serializers import serialize_event, serialize_message


class ChatRequest(BaseModel):
    message: str


def _calendar_payload(session: ChatSession) -> Dict[str, Any]:
    return {
        "events": [serialize_event(event) for event in session.events],
        "summary": session.context_summary,
    }


def create_app(session: Optional[ChatSession] = None) -> FastAPI:
    chat = session or ServiceContext().build_session()
    app = FastAPI(title="Calendar Copilot API", version="0.1.0")

    @app.get("/api/events/today")
    async def today_events() -> Dict[str, Any]:
        await chat.load_today_events()
        if chat.calendar.access_denied:
            raise HTTPException(status_code=403, detail="Calendar access has not been granted.")
        if chat.calendar.error_message:
            raise HTTPException(status_code=503, detail=chat.calendar.error_message)
        return _calendar_payload(chat)

    @app.post("/api/chat")
    async def send_chat(payload: ChatRequest) -> Dict[str, Any]:
        if not payload.message.strip():
            raise HTTPException(status_code=400, detail="message must not be blank")
        if chat.is_processing:
            raise HTTPException(status_code=409, detail="A message is already being processed.")
        reply = await chat.send_message(payload.message)
        if reply is None:
            raise HTTPException(status_code=409, detail="A message is already being processed.")
        result = chat.last_result
        return {
            "reply": serialize_message(reply),
            "state": result.state.value if result else None,
            "error": chat.error_message,
            "access_denied": chat.calendar.access_denied,
            **_calendar_payload(chat),
        }

    @app.get("/api/messages")
    async def list_messages() -> Dict[str, Any]:
        return {"messages": [serialize_message(message) for message in chat.messages]}

    return app


async def _serve(app: FastAPI, config: Config) -> None:
    await serve(app, config)


def run_local_server(host: str = "127.0.0.1", port: int = 8000) -> None:
    config = Config()
    config.bind = [f"{host}:{port}"]
    asyncio.run(_serve(create_app(), config))
