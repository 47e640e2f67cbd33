"""
환경 변수 기반 설정
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_LOCAL = "local"
STORAGE_SUPABASE = "supabase"

# .env 파일 검색 위치 (뒤에 있는 파일이 우선)
_current_file = Path(__file__).resolve()
ENV_FILES = (
    Path.cwd() / ".env",                   # 현재 작업 디렉토리
    _current_file.parent / ".env",         # study_coach/.env
    _current_file.parent.parent / ".env",  # 프로젝트 루트
)


class Settings(BaseSettings):
    """애플리케이션 설정

    환경 변수 이름은 필드 이름의 대문자 형태입니다 (예: ``STORAGE_BACKEND``).
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    storage_backend: Literal["local", "supabase"] = STORAGE_LOCAL
    local_store_path: str = "study_coach_data.json"
    api_token: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = "INFO"
    timer_tick_seconds: float = Field(default=1.0, ge=0)

    @field_validator("supabase_url", "supabase_key", "api_token", mode="before")
    @classmethod
    def _empty_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("storage_backend", mode="before")
    @classmethod
    def _normalize_backend(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL은 {allowed_levels} 중 하나여야 합니다")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """설정 인스턴스 반환 (캐시됨)"""
    return Settings()


def configure_logging(level: str = "INFO"):
    """루트 로거 설정"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
