"""
WebSocket 타이머 관리자 테스트
"""

import asyncio
import json
from unittest.mock import AsyncMock, Mock

import pytest

from study_coach.websocket_handler import TimerConnectionManager


@pytest.fixture
def websocket():
    ws = Mock()
    ws.accept = AsyncMock()
    ws.send_text = AsyncMock()
    return ws


@pytest.fixture
def manager(local_store):
    return TimerConnectionManager(tick_interval=0, store_provider=lambda: local_store)


def _sent(ws):
    return [json.loads(call.args[0]) for call in ws.send_text.call_args_list]


def _types(ws):
    return [m["type"] for m in _sent(ws)]


@pytest.mark.asyncio
async def test_connect_and_disconnect(manager, websocket):
    await manager.connect(websocket)
    websocket.accept.assert_awaited_once()
    assert websocket in manager.active_connections

    manager.disconnect(websocket)
    assert websocket not in manager.active_connections


@pytest.mark.asyncio
async def test_full_session_from_blocks(manager, websocket, local_store):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {
        "type": "start_session",
        "subject_id": "4",
        "subject_name": "Calculus 2",
        "blocks": [
            {"type": "focus", "duration_minutes": 1},
            {"type": "shortBreak", "duration_minutes": 1},
        ],
    })
    await manager.tasks[websocket]

    types = _types(websocket)
    assert types[0] == "session_started"
    assert types.count("tick") == 120
    assert types.count("block_changed") == 1
    assert types[-1] == "session_completed"

    started = _sent(websocket)[0]
    assert started["plan"]["total_focus_minutes"] == 1
    assert started["timer"]["state"] == "running"
    assert started["timer"]["display"] == "1:00"

    last_tick = [m for m in _sent(websocket) if m["type"] == "tick"][-1]
    assert last_tick["timer"]["state"] == "completed"

    session_id = _sent(websocket)[-1]["session_id"]
    saved = local_store.get_session(session_id)
    assert saved.subject_name == "Calculus 2"
    assert saved.planned_minutes == 1
    assert saved.completed is True
    assert saved.end_time is not None
    assert websocket not in manager.tasks


@pytest.mark.asyncio
async def test_start_session_from_minutes_generates_plan(manager, websocket):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {
        "type": "start_session", "subject_id": "2", "subject_name": "Data Structures", "minutes": 180,
    })

    started = _sent(websocket)[0]
    assert [b["label"] for b in started["plan"]["blocks"]] == [
        "90 min focus", "20 min long break", "70 min focus",
    ]
    assert started["timer"]["display"] == "90:00"
    manager.disconnect(websocket)


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [
    {"type": "start_session", "subject_id": "1", "minutes": 0},
    {"type": "start_session", "subject_id": "1", "minutes": "abc"},
    {"type": "start_session", "subject_id": "1", "blocks": []},
    {"type": "start_session", "subject_id": "1", "blocks": [{"type": "focus", "duration_minutes": 0}]},
    {"type": "start_session", "subject_id": "1", "blocks": [{"type": "nap", "duration_minutes": 5}]},
])
async def test_invalid_start_session(manager, websocket, local_store, message):
    await manager.connect(websocket)
    await manager.handle_message(websocket, message)

    assert _types(websocket) == ["error"]
    assert websocket not in manager.timers
    assert local_store.list_sessions() == []


@pytest.mark.asyncio
async def test_pause_resume_and_cancel(manager, websocket, local_store):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {
        "type": "start_session", "subject_id": "1", "subject_name": "Project Management", "minutes": 60,
    })
    task = manager.tasks[websocket]

    await manager.handle_message(websocket, {"type": "pause"})
    await manager.handle_message(websocket, {"type": "resume"})
    await manager.handle_message(websocket, {"type": "pause"})
    await manager.handle_message(websocket, {"type": "cancel"})
    await asyncio.sleep(0)

    messages = _sent(websocket)
    assert [m["type"] for m in messages] == [
        "session_started", "paused", "resumed", "paused", "session_cancelled",
    ]
    assert messages[1]["timer"]["state"] == "paused"
    assert messages[2]["timer"]["state"] == "running"
    assert task.cancelled()
    assert websocket not in manager.timers

    # 취소된 세션 기록은 미완료 상태로 남음
    saved = local_store.get_session(messages[-1]["session_id"])
    assert saved.completed is False
    assert saved.end_time is None


@pytest.mark.asyncio
@pytest.mark.parametrize("msg_type", ["pause", "resume", "cancel"])
async def test_controls_without_session(manager, websocket, msg_type):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {"type": msg_type})
    assert _types(websocket) == ["error"]


@pytest.mark.asyncio
async def test_ping_and_unknown_message(manager, websocket):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {"type": "ping"})
    await manager.handle_message(websocket, {"type": "dance"})
    assert _types(websocket) == ["pong", "error"]


@pytest.mark.asyncio
async def test_new_session_replaces_running_one(manager, websocket, local_store):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {"type": "start_session", "subject_id": "1", "minutes": 60})
    first_timer = manager.timers[websocket]
    first_task = manager.tasks[websocket]

    await manager.handle_message(websocket, {"type": "start_session", "subject_id": "2", "minutes": 90})
    await asyncio.sleep(0)

    assert first_timer.cancelled is True
    assert first_task.cancelled()
    assert manager.timers[websocket] is not first_timer
    assert len(local_store.list_sessions()) == 2
    manager.disconnect(websocket)


@pytest.mark.asyncio
async def test_disconnect_cancels_timer(manager, websocket):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {"type": "start_session", "subject_id": "1", "minutes": 60})
    timer = manager.timers[websocket]
    task = manager.tasks[websocket]

    manager.disconnect(websocket)
    await asyncio.sleep(0)

    assert timer.cancelled is True
    assert task.cancelled()
    assert websocket not in manager.timers


@pytest.mark.asyncio
async def test_send_failure_cancels_timer(manager, websocket):
    await manager.connect(websocket)
    await manager.handle_message(websocket, {
        "type": "start_session", "subject_id": "1", "blocks": [{"type": "focus", "duration_minutes": 1}],
    })
    timer = manager.timers[websocket]
    websocket.send_text.side_effect = RuntimeError("connection closed")

    await manager.tasks[websocket]

    assert timer.cancelled is True
    assert timer.seconds_left == 59
