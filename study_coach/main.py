"""
FastAPI 서버 메인 파일
세션 플랜 생성, 세션 기록 API, WebSocket 집중 타이머를 제공합니다.
"""

import json
import logging
from datetime import datetime

from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from study_coach.config import configure_logging, get_settings
from study_coach.dependencies import verify_token
from study_coach.models.database import init_store
from study_coach.routes import plans, stats, study_sessions
from study_coach.websocket_handler import TimerConnectionManager

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Study Coach API", version="1.0.0")

# CORS 설정 (브라우저 대시보드에서 접근 가능하도록)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# WebSocket 타이머 관리자
manager = TimerConnectionManager(tick_interval=settings.timer_tick_seconds)

# 라우터 등록
api_dependencies = [Depends(verify_token)]
app.include_router(plans.router, prefix="/api", tags=["plans"], dependencies=api_dependencies)
app.include_router(study_sessions.router, prefix="/api", tags=["study-sessions"], dependencies=api_dependencies)
app.include_router(stats.router, prefix="/api", tags=["stats"], dependencies=api_dependencies)


@app.on_event("startup")
async def startup_event():
    """서버 시작 시 저장소 초기화"""
    init_store(settings)
    logger.info("서버가 시작되었습니다. (저장소: %s)", settings.storage_backend)


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {"message": "Study Coach API", "status": "running"}


@app.get("/health")
async def health_check():
    """헬스 체크"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.websocket("/ws/timer")
async def timer_websocket(websocket: WebSocket):
    """WebSocket 엔드포인트 - 집중 타이머"""
    await manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except ValueError:
                await manager.send_error(websocket, "JSON 형식의 메시지가 필요합니다.")
                continue
            if not isinstance(message, dict):
                await manager.send_error(websocket, "메시지는 JSON 객체여야 합니다.")
                continue
            await manager.handle_message(websocket, message)

    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception:
        logger.exception("WebSocket 오류")
        manager.disconnect(websocket)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
