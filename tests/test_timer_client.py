"""
타이머 클라이언트 테스트
"""

import logging
from unittest.mock import AsyncMock

import pytest

from timer_client import TimerClient, format_tick, main


def _timer(index=0, count=3, label="90 min focus", display="89:59"):
    return {
        "block_index": index,
        "block_count": count,
        "block": {"type": "focus", "duration_minutes": 90, "label": label},
        "display": display,
    }


def test_format_tick():
    assert format_tick(_timer()) == "블록 1/3 90 min focus 89:59"


def test_handle_message_flow(capsys):
    client = TimerClient()
    client.session_active = True

    assert client.handle_message({
        "type": "session_started",
        "plan": {
            "subject_name": "Data Structures",
            "total_focus_minutes": 90,
            "blocks": [{"label": "90 min focus"}],
        },
    }) is True
    assert client.handle_message({"type": "tick", "timer": _timer()}) is True
    assert client.handle_message({"type": "session_completed"}) is False
    assert client.session_active is False

    out = capsys.readouterr().out
    assert "Data Structures" in out
    assert "90 min focus" in out
    assert "세션이 완료되었습니다." in out


def test_error_ends_session():
    client = TimerClient()
    client.session_active = True
    assert client.handle_message({"type": "error", "message": "bad"}) is False
    assert client.session_active is False


@pytest.mark.asyncio
async def test_main_runs_client_with_arguments(monkeypatch):
    run = AsyncMock()
    monkeypatch.setattr(TimerClient, "run", run)
    root_handlers = list(logging.getLogger().handlers)

    await main(["--server", "ws://example:9000/ws/timer", "--subject", "3", "--minutes", "120"])

    run.assert_awaited_once_with("3", "Study", 120)
    assert logging.getLogger().handlers == root_handlers
