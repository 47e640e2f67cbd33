"""
FastAPI 의존성 (인증)
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from study_coach.config import get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """API_TOKEN이 설정된 경우에만 Bearer 토큰 검사"""
    expected = get_settings().api_token
    if not expected:
        return

    if credentials is None or not secrets.compare_digest(credentials.credentials, expected):
        logger.warning("인증 실패: 잘못된 토큰")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효한 Bearer 토큰이 필요합니다.",
            headers={"WWW-Authenticate": "Bearer"},
        )
