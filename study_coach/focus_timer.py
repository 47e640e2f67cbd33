"""
집중 타이머
세션 플랜의 블록을 차례로 카운트다운하고 세션 기록을 생성/완료합니다.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Sequence

from study_coach.models.database import SessionStore
from study_coach.models.study_session import StudySession, StudySessionUpdate, TimeBlock

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    """타이머 상태"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


def format_countdown(seconds: int) -> str:
    """남은 시간을 M:SS 형식으로 변환"""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes}:{secs:02d}"


class FocusTimer:
    """블록 단위 카운트다운 타이머

    한 타이머 인스턴스는 자신의 상태를 단독으로 소유합니다.
    세션 기록은 첫 집중 블록이 활성화될 때(생성 시점) 한 번만 만들어지고,
    마지막 블록이 끝날 때 한 번 완료 처리됩니다. 취소 시에는 기록을 건드리지 않습니다.
    """

    def __init__(self, subject_id: str, subject_name: str, blocks: Sequence[TimeBlock],
                 store: SessionStore,
                 on_complete: Optional[Callable[[], None]] = None,
                 on_cancel: Optional[Callable[[], None]] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.subject_id = subject_id
        self.subject_name = subject_name
        self.blocks = tuple(blocks)
        self.store = store
        self.on_complete = on_complete
        self.on_cancel = on_cancel
        self._clock = clock

        self.block_index = 0
        self.seconds_left = 0
        self.is_running = False
        self.session_id: Optional[str] = None
        self.session_created = False

        self._started = False
        self._completed = False
        self._cancelled = False

        if self.blocks:
            self._activate(0)
        self._create_session_record()

    @property
    def current_block(self) -> Optional[TimeBlock]:
        if 0 <= self.block_index < len(self.blocks):
            return self.blocks[self.block_index]
        return None

    @property
    def planned_minutes(self) -> int:
        return sum(b.duration_minutes for b in self.blocks if b.is_focus)

    @property
    def state(self) -> TimerState:
        if self._completed:
            return TimerState.COMPLETED
        if self._cancelled or not self._started:
            return TimerState.IDLE
        return TimerState.RUNNING if self.is_running else TimerState.PAUSED

    @property
    def is_active(self) -> bool:
        """아직 진행할 블록이 남아 있고 취소되지 않았는지"""
        return bool(self.blocks) and not self._completed and not self._cancelled

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def display(self) -> str:
        return format_countdown(self.seconds_left)

    def _activate(self, index: int):
        self.block_index = index
        self.seconds_left = self.blocks[index].duration_seconds

    def _create_session_record(self):
        if self.session_created or not self.blocks:
            return
        if not any(b.is_focus for b in self.blocks):
            return

        self.session_created = True
        record = StudySession(
            id=str(uuid.uuid4()),
            subject_id=self.subject_id,
            subject_name=self.subject_name,
            start_time=self._clock(),
            planned_minutes=self.planned_minutes,
            completed=False,
        )
        try:
            self.session_id = self.store.create_session(record)
            logger.info("세션 기록 생성: %s (%s, %d분)", self.session_id, self.subject_name, record.planned_minutes)
        except Exception:
            # 저장 실패가 타이머 진행을 막으면 안 됨
            logger.exception("세션 기록 생성 실패: %s", self.subject_name)

    def start(self) -> bool:
        """카운트다운 시작 (일시정지 상태면 재개)"""
        if not self.is_active:
            return False
        self.is_running = True
        self._started = True
        return True

    def resume(self) -> bool:
        return self.start()

    def pause(self) -> bool:
        if not self.is_running:
            return False
        self.is_running = False
        return True

    def toggle(self) -> bool:
        """실행/일시정지 전환. 전환 후 실행 중이면 True"""
        if self.is_running:
            self.pause()
        else:
            self.start()
        return self.is_running

    def tick(self) -> bool:
        """1초 진행. 카운트가 줄었으면 True"""
        if not self.is_running or self.seconds_left <= 0:
            return False

        self.seconds_left -= 1
        if self.seconds_left == 0:
            self._finish_block()
        return True

    def _finish_block(self):
        if self.block_index < len(self.blocks) - 1:
            self._activate(self.block_index + 1)
            logger.debug("다음 블록으로 이동: %d/%d %s",
                         self.block_index + 1, len(self.blocks), self.current_block.label)
        else:
            self._complete()

    def _complete(self):
        self.is_running = False
        self._completed = True

        if self.session_id is not None:
            try:
                self.store.update_session(
                    self.session_id,
                    StudySessionUpdate(end_time=self._clock(), completed=True),
                )
            except Exception:
                logger.exception("세션 기록 완료 처리 실패: %s", self.session_id)

        logger.info("세션 완료: %s", self.subject_name)
        if self.on_complete:
            self.on_complete()

    def cancel(self) -> bool:
        """세션 취소. 세션 기록은 생성된 그대로 남습니다."""
        if not self.is_active:
            return False
        self.is_running = False
        self._cancelled = True

        logger.info("세션 취소: %s (기록 %s는 미완료로 남음)", self.subject_name, self.session_id)
        if self.on_cancel:
            self.on_cancel()
        return True

    def snapshot(self) -> Dict:
        """클라이언트 표시용 상태"""
        block = self.current_block
        return {
            "state": self.state.value,
            "block_index": self.block_index,
            "block_count": len(self.blocks),
            "block": block.model_dump(mode="json") if block else None,
            "seconds_left": self.seconds_left,
            "display": self.display,
            "is_running": self.is_running,
            "session_id": self.session_id,
        }

    async def run(self, interval: float = 1.0,
                  on_tick: Optional[Callable[["FocusTimer"], Awaitable[None]]] = None):
        """interval마다 tick. 완료되거나 취소되면 종료"""
        while self.is_active:
            await asyncio.sleep(interval)
            if self.tick() and on_tick is not None:
                await on_tick(self)
