"""
세션 플랜 / 과목 API 라우트
"""

from fastapi import APIRouter, Depends, HTTPException

from study_coach.models.database import SessionStore, get_store
from study_coach.models.study_session import PlanRequest
from study_coach.session_planner import DEFAULT_SUBJECT_NAME, generate_session_plan

router = APIRouter()


@router.get("/subjects")
async def get_subjects(store: SessionStore = Depends(get_store)):
    """과목 목록 조회"""
    try:
        subjects = store.get_subjects()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, "subjects": [s.model_dump(mode="json") for s in subjects]}


@router.post("/plans")
async def create_plan(request: PlanRequest, store: SessionStore = Depends(get_store)):
    """가용 시간으로 세션 플랜 생성"""
    subject_name = request.subject_name
    if not subject_name:
        try:
            subject = next((s for s in store.get_subjects() if s.id == request.subject_id), None)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        subject_name = subject.name if subject else DEFAULT_SUBJECT_NAME

    plan = generate_session_plan(request.subject_id, subject_name, request.total_minutes)
    return {"success": True, "plan": plan.model_dump(mode="json")}
