"""
통계 관련 API 라우트
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from study_coach.models.database import (
    SessionStore,
    get_sessions_completed_this_week,
    get_store,
    get_study_minutes_this_week,
    get_week_end,
    get_week_start,
)

router = APIRouter()


@router.get("/stats/weekly")
async def get_weekly_stats(week_of: Optional[str] = None, store: SessionStore = Depends(get_store)):
    """주간 통계 조회

    Args:
        week_of: 기준 날짜 (YYYY-MM-DD). 없으면 오늘
    """
    if week_of:
        try:
            today = date.fromisoformat(week_of)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"week_of는 YYYY-MM-DD 형식이어야 합니다: {week_of}")
    else:
        today = date.today()

    try:
        sessions = store.list_sessions()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    week_start = get_week_start(today)
    return {
        "success": True,
        "week_start": week_start.isoformat(),
        "week_end": get_week_end(week_start).isoformat(),
        "study_minutes": get_study_minutes_this_week(sessions, today),
        "sessions_completed": get_sessions_completed_this_week(sessions, today),
    }
