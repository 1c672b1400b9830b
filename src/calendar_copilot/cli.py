from __future__ import annotations

import argparse
import asyncio
import logging

from .bootstrap import configure_logging
from .services import ChatSession, ServiceContext
from .services.http import run_local_server

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"/quit", "/exit"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calendar Copilot command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("chat", help="Chat with the assistant in the terminal.")
    subparsers.add_parser("today", help="Print today's events.")

    api_parser = subparsers.add_parser("api", help="Start the HTTP API server.")
    api_parser.add_argument("--host", default="127.0.0.1")
    api_parser.add_argument("--port", type=int, default=8000)

    return parser


def _print_calendar_state(session: ChatSession) -> None:
    if session.calendar.access_denied:
        print("Calendar access is needed to display events. Enable it and run /today again.")
    elif session.calendar.error_message:
        print(f"Could not load events: {session.calendar.error_message}")
    else:
        print(session.context_summary)


async def _today(session: ChatSession) -> None:
    await session.load_today_events()
    _print_calendar_state(session)


async def _chat_loop(session: ChatSession) -> None:
    await _today(session)
    print("Type a message, /today to reload events, or /quit to leave.")
    while True:
        try:
            line = await asyncio.to_thread(input, "you> ")
        except EOFError:
            break
        command = line.strip()
        if command in EXIT_COMMANDS:
            break
        if command == "/today":
            await _today(session)
            continue
        reply = await session.send_message(line)
        if reply is not None:
            print(f"assistant> {reply.text}")


def main() -> None:
    configure_logging()
    logger.info("Calendar Copilot CLI starting")
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "api":
        run_local_server(host=args.host, port=args.port)
        return

    session = ServiceContext().build_session()
    if args.command == "chat":
        asyncio.run(_chat_loop(session))
    elif args.command == "today":
        asyncio.run(_today(session))
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
