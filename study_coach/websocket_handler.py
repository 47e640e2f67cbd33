"""
WebSocket 연결 관리 및 타이머 메시지 처리
"""

import asyncio
import json
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import WebSocket
from pydantic import ValidationError

from study_coach.focus_timer import FocusTimer, TimerState
from study_coach.models.database import SessionStore, get_store
from study_coach.models.study_session import SessionPlan, TimeBlock
from study_coach.session_planner import DEFAULT_SUBJECT_NAME, generate_session_plan

logger = logging.getLogger(__name__)


class TimerConnectionManager:
    """WebSocket 연결마다 하나의 타이머를 관리"""

    def __init__(self, tick_interval: float = 1.0,
                 store_provider: Callable[[], SessionStore] = get_store):
        self.tick_interval = tick_interval
        self.store_provider = store_provider
        self.active_connections: List[WebSocket] = []
        self.timers: Dict[WebSocket, FocusTimer] = {}
        self.tasks: Dict[WebSocket, asyncio.Task] = {}

    async def connect(self, websocket: WebSocket):
        """클라이언트 연결"""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info("클라이언트 연결됨. 총 연결 수: %d", len(self.active_connections))

    def disconnect(self, websocket: WebSocket):
        """클라이언트 연결 해제. 진행 중인 타이머는 취소"""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        self.stop_timer(websocket)
        logger.info("클라이언트 연결 해제됨. 총 연결 수: %d", len(self.active_connections))

    def stop_timer(self, websocket: WebSocket):
        timer = self.timers.pop(websocket, None)
        if timer is not None:
            timer.cancel()
        task = self.tasks.pop(websocket, None)
        if task is not None and not task.done():
            task.cancel()

    async def send_personal_message(self, message: Dict, websocket: WebSocket) -> bool:
        """특정 클라이언트에게 메시지 전송"""
        message.setdefault("timestamp", time.time())
        try:
            await websocket.send_text(json.dumps(message))
            return True
        except Exception as e:
            logger.warning("메시지 전송 실패: %s", e)
            return False

    async def send_error(self, websocket: WebSocket, detail: str):
        await self.send_personal_message({"type": "error", "message": detail}, websocket)

    def _build_timer(self, message: Dict) -> Tuple[FocusTimer, SessionPlan]:
        subject_id = str(message.get("subject_id") or "")
        subject_name = message.get("subject_name") or DEFAULT_SUBJECT_NAME

        if message.get("blocks") is not None:
            blocks = [TimeBlock.model_validate(b) for b in message["blocks"]]
            plan = SessionPlan(
                subject_id=subject_id,
                subject_name=subject_name,
                total_focus_minutes=sum(b.duration_minutes for b in blocks if b.is_focus),
                blocks=blocks,
            )
        else:
            plan = generate_session_plan(subject_id, subject_name, int(message.get("minutes", 0)))

        if not plan.blocks:
            raise ValueError("진행할 블록이 없습니다. minutes는 0보다 커야 합니다.")

        timer = FocusTimer(plan.subject_id, plan.subject_name, plan.blocks, self.store_provider())
        return timer, plan

    async def _run_timer(self, websocket: WebSocket, timer: FocusTimer):
        last_index = timer.block_index

        async def on_tick(t: FocusTimer):
            nonlocal last_index
            if t.block_index != last_index:
                last_index = t.block_index
                await self.send_personal_message(
                    {"type": "block_changed", "timer": t.snapshot()}, websocket)
            sent = await self.send_personal_message({"type": "tick", "timer": t.snapshot()}, websocket)
            if t.state is TimerState.COMPLETED:
                await self.send_personal_message(
                    {"type": "session_completed", "session_id": t.session_id,
                     "message": "세션이 완료되었습니다."},
                    websocket)
            elif not sent:
                t.cancel()

        try:
            await timer.run(self.tick_interval, on_tick)
        finally:
            if self.tasks.get(websocket) is asyncio.current_task():
                del self.tasks[websocket]

    async def handle_message(self, websocket: WebSocket, message: Dict):
        """받은 메시지 처리"""
        msg_type = message.get("type")
        timer: Optional[FocusTimer] = self.timers.get(websocket)

        if msg_type == "start_session":
            try:
                new_timer, plan = self._build_timer(message)
            except (ValidationError, ValueError, TypeError) as e:
                await self.send_error(websocket, f"세션을 시작할 수 없습니다: {e}")
                return

            # 이전 타이머 정리
            self.stop_timer(websocket)
            self.timers[websocket] = new_timer
            new_timer.start()

            await self.send_personal_message({
                "type": "session_started",
                "message": "세션이 시작되었습니다.",
                "plan": plan.model_dump(mode="json"),
                "timer": new_timer.snapshot(),
            }, websocket)
            self.tasks[websocket] = asyncio.create_task(self._run_timer(websocket, new_timer))
            logger.info("세션 시작: %s (%d블록)", plan.subject_name, len(plan.blocks))

        elif msg_type in ("pause", "resume"):
            if timer is None or not timer.is_active:
                await self.send_error(websocket, "진행 중인 세션이 없습니다.")
                return
            if msg_type == "pause":
                timer.pause()
            else:
                timer.resume()
            reply = "paused" if msg_type == "pause" else "resumed"
            await self.send_personal_message({"type": reply, "timer": timer.snapshot()}, websocket)

        elif msg_type == "cancel":
            if timer is None or not timer.is_active:
                await self.send_error(websocket, "진행 중인 세션이 없습니다.")
                return
            session_id = timer.session_id
            self.stop_timer(websocket)
            await self.send_personal_message({
                "type": "session_cancelled",
                "session_id": session_id,
                "message": "세션이 취소되었습니다.",
            }, websocket)

        elif msg_type == "ping":
            await self.send_personal_message({"type": "pong"}, websocket)

        else:
            await self.send_error(websocket, f"알 수 없는 메시지 타입: {msg_type}")
