"""
공부 세션 기록 API 라우트
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from study_coach.models.database import SessionStore, get_store
from study_coach.models.study_session import (
    StudySession,
    StudySessionCreate,
    StudySessionUpdate,
    to_local_naive,
)

router = APIRouter()


def _parse_date(value: Optional[str], name: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return to_local_naive(datetime.fromisoformat(value))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name}는 ISO 형식이어야 합니다: {value}")


@router.get("/sessions")
async def get_sessions(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = 100,
    store: SessionStore = Depends(get_store),
):
    """공부 세션 목록 조회 (최신순)"""
    start = _parse_date(start_date, "start_date")
    end = _parse_date(end_date, "end_date")

    try:
        sessions = store.list_sessions(start, end)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, "sessions": [s.model_dump(mode="json") for s in sessions[:limit]]}


@router.get("/sessions/current")
async def get_current_session(store: SessionStore = Depends(get_store)):
    """현재 진행 중인 세션 조회"""
    try:
        session = store.get_current_session()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, "session": session.model_dump(mode="json") if session else None}


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_store)):
    """세션 단건 조회"""
    try:
        session = store.get_session(session_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    if session is None:
        raise HTTPException(status_code=404, detail="세션을 찾을 수 없습니다.")
    return {"success": True, "session": session.model_dump(mode="json")}


@router.post("/sessions")
async def create_session(request: StudySessionCreate, store: SessionStore = Depends(get_store)):
    """세션 기록 생성"""
    session = StudySession(
        id=request.id or str(uuid.uuid4()),
        subject_id=request.subject_id,
        subject_name=request.subject_name,
        start_time=request.start_time or datetime.now(),
        planned_minutes=request.planned_minutes,
        completed=False,
    )

    try:
        session.id = store.create_session(session)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, "session": session.model_dump(mode="json")}


@router.put("/sessions/{session_id}")
async def update_session(session_id: str, request: StudySessionUpdate,
                         store: SessionStore = Depends(get_store)):
    """세션 기록 갱신 (종료 시간, 완료 여부)"""
    try:
        session = store.update_session(session_id, request)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    if session is None:
        raise HTTPException(status_code=404, detail="세션을 찾을 수 없습니다.")
    return {"success": True, "session": session.model_dump(mode="json")}
