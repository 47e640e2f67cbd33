"""
공부 세션 / 세션 플랜 데이터 모델
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """타임존 정보가 있으면 로컬 시간으로 바꾸고 tzinfo 제거"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class BlockType(str, Enum):
    """블록 종류"""
    FOCUS = "focus"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"


class TimeBlock(BaseModel):
    """세션 플랜의 한 블록 (집중 또는 휴식)"""
    model_config = ConfigDict(frozen=True)

    type: BlockType
    duration_minutes: int = Field(gt=0)

    @computed_field
    @property
    def label(self) -> str:
        if self.type == BlockType.FOCUS:
            return f"{self.duration_minutes} min focus"
        if self.type == BlockType.LONG_BREAK:
            return f"{self.duration_minutes} min long break"
        return f"{self.duration_minutes} min break"

    @property
    def is_focus(self) -> bool:
        return self.type == BlockType.FOCUS

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60


class SessionPlan(BaseModel):
    """세션 플랜 (집중 블록 + 휴식)"""
    subject_id: str
    subject_name: str
    total_focus_minutes: int = 0  # 실제로 배정된 집중 시간 합계
    blocks: List[TimeBlock] = Field(default_factory=list)


class PlanRequest(BaseModel):
    """플랜 생성 요청 모델"""
    subject_id: str
    subject_name: Optional[str] = None
    total_minutes: int


class Subject(BaseModel):
    """과목 모델"""
    id: str
    name: str
    color: Optional[str] = None


class StudySession(BaseModel):
    """공부 세션 기록 모델"""
    id: Optional[str] = None
    subject_id: str
    subject_name: str
    start_time: datetime
    end_time: Optional[datetime] = None  # 세션이 끝날 때 설정
    planned_minutes: int = Field(default=0, ge=0)
    completed: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(value)


class StudySessionCreate(BaseModel):
    """세션 생성 요청 모델"""
    id: Optional[str] = None
    subject_id: str
    subject_name: str
    start_time: Optional[datetime] = None
    planned_minutes: int = Field(default=0, ge=0)


class StudySessionUpdate(BaseModel):
    """세션 갱신 요청 모델"""
    end_time: Optional[datetime] = None
    completed: Optional[bool] = None

    @field_validator("end_time")
    @classmethod
    def _normalize_end_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(value)
