"""
세션 기록 저장소 모듈
Supabase 또는 로컬 JSON 파일에 공부 세션을 저장합니다.
"""

import json
import logging
import math
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

from supabase import Client, create_client

from study_coach.config import STORAGE_SUPABASE, Settings, get_settings
from study_coach.models.study_session import StudySession, StudySessionUpdate, Subject

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "study_sessions"
SUBJECTS_TABLE = "subjects"

DEFAULT_SUBJECTS: List[Subject] = [
    Subject(id="1", name="Project Management", color="#2563eb"),
    Subject(id="2", name="Data Structures", color="#059669"),
    Subject(id="3", name="Computer Hardware", color="#7c3aed"),
    Subject(id="4", name="Calculus 2", color="#dc2626"),
    Subject(id="5", name="Organizational Leadership", color="#ea580c"),
]


class SessionStore(ABC):
    """세션 기록 저장소 인터페이스"""

    @abstractmethod
    def create_session(self, session: StudySession) -> str:
        """세션 생성 후 기록 id 반환"""

    @abstractmethod
    def update_session(self, session_id: str, updates: StudySessionUpdate) -> Optional[StudySession]:
        """세션 갱신. 없는 id면 None"""

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[StudySession]:
        pass

    @abstractmethod
    def list_sessions(self, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None) -> List[StudySession]:
        """기간 내 세션 목록 (최신순)"""

    def get_current_session(self) -> Optional[StudySession]:
        """아직 끝나지 않은 가장 최근 세션"""
        for session in self.list_sessions():
            if session.end_time is None:
                return session
        return None

    @abstractmethod
    def get_subjects(self) -> List[Subject]:
        pass


def _in_range(session: StudySession, start_date: Optional[datetime],
              end_date: Optional[datetime]) -> bool:
    if start_date and session.start_time < start_date:
        return False
    if end_date and session.start_time > end_date:
        return False
    return True


class LocalSessionStore(SessionStore):
    """JSON 파일 저장소 (브라우저 localStorage 모드에 해당)"""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict:
        if not self.path.exists():
            return {"sessions": [], "subjects": []}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("로컬 저장소를 읽을 수 없습니다 (%s): %s", self.path, e)
            return {"sessions": [], "subjects": []}
        if not isinstance(data, dict):
            logger.warning("로컬 저장소 형식이 올바르지 않습니다: %s", self.path)
            return {"sessions": [], "subjects": []}
        data.setdefault("sessions", [])
        data.setdefault("subjects", [])
        return data

    def _save(self, data: Dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def create_session(self, session: StudySession) -> str:
        if not session.id:
            raise ValueError("세션 id가 필요합니다.")
        with self._lock:
            data = self._load()
            data["sessions"].append(session.model_dump(mode="json"))
            self._save(data)
        return session.id

    def update_session(self, session_id: str, updates: StudySessionUpdate) -> Optional[StudySession]:
        with self._lock:
            data = self._load()
            for i, raw in enumerate(data["sessions"]):
                if raw.get("id") != session_id:
                    continue
                merged = {**raw, **updates.model_dump(mode="json", exclude_none=True)}
                data["sessions"][i] = merged
                self._save(data)
                return StudySession.model_validate(merged)
        return None

    def get_session(self, session_id: str) -> Optional[StudySession]:
        for raw in self._load()["sessions"]:
            if raw.get("id") == session_id:
                return StudySession.model_validate(raw)
        return None

    def list_sessions(self, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None) -> List[StudySession]:
        sessions = [StudySession.model_validate(raw) for raw in self._load()["sessions"]]
        sessions = [s for s in sessions if _in_range(s, start_date, end_date)]
        return sorted(sessions, key=lambda s: s.start_time, reverse=True)

    def get_subjects(self) -> List[Subject]:
        stored = [Subject.model_validate(raw) for raw in self._load()["subjects"]]
        return stored if stored else list(DEFAULT_SUBJECTS)

    def save_subjects(self, subjects: List[Subject]):
        with self._lock:
            data = self._load()
            data["subjects"] = [s.model_dump(mode="json") for s in subjects]
            self._save(data)


class SupabaseSessionStore(SessionStore):
    """Supabase 저장소"""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseSessionStore":
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError(
                "SUPABASE_URL과 SUPABASE_KEY 환경 변수를 설정해주세요.\n"
                "Supabase 프로젝트 설정에서 URL과 anon key를 확인할 수 있습니다."
            )
        client = create_client(settings.supabase_url, settings.supabase_key)
        logger.info("Supabase가 초기화되었습니다.")
        return cls(client)

    def create_session(self, session: StudySession) -> str:
        record = session.model_dump(mode="json", exclude_none=True)
        response = self.client.table(SESSIONS_TABLE).insert(record).execute()

        if response.data and len(response.data) > 0:
            return response.data[0]["id"]
        raise RuntimeError("세션 저장 실패")

    def update_session(self, session_id: str, updates: StudySessionUpdate) -> Optional[StudySession]:
        response = self.client.table(SESSIONS_TABLE)\
            .update(updates.model_dump(mode="json", exclude_none=True))\
            .eq("id", session_id)\
            .execute()

        if response.data and len(response.data) > 0:
            return StudySession.model_validate(response.data[0])
        return None

    def get_session(self, session_id: str) -> Optional[StudySession]:
        response = self.client.table(SESSIONS_TABLE)\
            .select("*")\
            .eq("id", session_id)\
            .limit(1)\
            .execute()

        if response.data and len(response.data) > 0:
            return StudySession.model_validate(response.data[0])
        return None

    def list_sessions(self, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None) -> List[StudySession]:
        query = self.client.table(SESSIONS_TABLE).select("*")

        if start_date:
            query = query.gte("start_time", start_date.isoformat())
        if end_date:
            query = query.lte("start_time", end_date.isoformat())

        query = query.order("start_time", desc=True)
        response = query.execute()

        return [StudySession.model_validate(row) for row in response.data]

    def get_current_session(self) -> Optional[StudySession]:
        response = self.client.table(SESSIONS_TABLE)\
            .select("*")\
            .is_("end_time", "null")\
            .order("start_time", desc=True)\
            .limit(1)\
            .execute()

        if response.data and len(response.data) > 0:
            return StudySession.model_validate(response.data[0])
        return None

    def get_subjects(self) -> List[Subject]:
        response = self.client.table(SUBJECTS_TABLE).select("*").order("id").execute()
        stored = [Subject.model_validate(row) for row in response.data]
        return stored if stored else list(DEFAULT_SUBJECTS)


# 저장소 싱글톤
_store: Optional[SessionStore] = None
_store_lock = threading.Lock()


def init_store(settings: Optional[Settings] = None) -> SessionStore:
    """설정에 따라 저장소 초기화"""
    global _store

    settings = settings or get_settings()
    with _store_lock:
        if _store is None:
            if settings.storage_backend == STORAGE_SUPABASE:
                _store = SupabaseSessionStore.from_settings(settings)
            else:
                _store = LocalSessionStore(settings.local_store_path)
                logger.info("로컬 저장소를 사용합니다: %s", settings.local_store_path)
    return _store


def get_store() -> SessionStore:
    """저장소 인스턴스 반환"""
    if _store is None:
        return init_store()
    return _store


def get_week_start(day: Optional[date] = None) -> date:
    """해당 주의 월요일"""
    day = day or date.today()
    return day - timedelta(days=day.weekday())


def get_week_end(week_start: date) -> date:
    """주 시작(월요일)으로부터 일요일"""
    return week_start + timedelta(days=6)


def _completed_this_week(sessions: List[StudySession], today: Optional[date]) -> List[StudySession]:
    week_start = get_week_start(today)
    week_end = get_week_end(week_start)
    return [
        s for s in sessions
        if s.completed and s.end_time is not None and week_start <= s.end_time.date() <= week_end
    ]


def get_study_minutes_this_week(sessions: List[StudySession], today: Optional[date] = None) -> int:
    """이번 주 완료된 세션의 공부 시간 (분)"""
    total = 0
    for s in _completed_this_week(sessions, today):
        minutes = (s.end_time - s.start_time).total_seconds() / 60
        total += math.floor(minutes + 0.5)
    return total


def get_sessions_completed_this_week(sessions: List[StudySession], today: Optional[date] = None) -> int:
    """이번 주 완료된 세션 수"""
    return len(_completed_this_week(sessions, today))
