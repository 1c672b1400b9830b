import json

import pytest

from calendar_copilot import cli

from conftest import FakeCompletion, build_session, make_event


def test_parser_commands():
    parser = cli.build_parser()
    args = parser.parse_args(["api", "--port", "9000"])
    assert (args.command, args.host, args.port) == ("api", "127.0.0.1", 9000)
    with pytest.raises(SystemExit):
        parser.parse_args([])


@pytest.mark.asyncio
async def test_today_prints_summary(store, capsys):
    store.seed([make_event("Standup", 9)])
    await cli._today(build_session(store, FakeCompletion()))
    assert "- Standup from 09:00 to 09:30" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_today_reports_denied_access(store, capsys):
    store.permission_granted = False
    await cli._today(build_session(store, FakeCompletion()))
    assert "Calendar access is needed" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_chat_loop_until_quit(store, monkeypatch, capsys):
    lines = iter(["delete standup", "/quit", "never read"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    store.seed([make_event("Standup", 9)])
    completion = FakeCompletion([json.dumps({"action": "delete", "events": [{"title": "standup"}]})])

    await cli._chat_loop(build_session(store, completion))

    out = capsys.readouterr().out
    assert "assistant> Deleted 1 event(s) for today." in out
    assert store.events_by_id == {}
