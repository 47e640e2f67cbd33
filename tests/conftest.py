"""
공통 테스트 픽스처
"""

import os
import tempfile
from datetime import datetime

import pytest

# 애플리케이션 import 전에 환경 변수 설정
os.environ["STORAGE_BACKEND"] = "local"
os.environ.setdefault("LOCAL_STORE_PATH", os.path.join(tempfile.gettempdir(), "study_coach_test.json"))
os.environ.pop("API_TOKEN", None)

from study_coach.config import get_settings  # noqa: E402
from study_coach.models import database  # noqa: E402
from study_coach.models.database import LocalSessionStore  # noqa: E402


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 14, 9, 0, 0)


@pytest.fixture
def local_store(tmp_path):
    """임시 파일을 쓰는 로컬 저장소"""
    return LocalSessionStore(tmp_path / "store.json")


@pytest.fixture
def installed_store(local_store, monkeypatch):
    """전역 저장소를 임시 로컬 저장소로 교체"""
    monkeypatch.setattr(database, "_store", local_store)
    return local_store


@pytest.fixture
def clean_settings():
    """환경 변수를 바꾼 테스트 전후로 설정 캐시 초기화"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
