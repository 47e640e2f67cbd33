"""
애플리케이션 진입점
백엔드 서버를 실행합니다.

사용법:
    python app.py
    또는
    uvicorn study_coach.main:app --host 0.0.0.0 --port 8000
"""

if __name__ == "__main__":
    import uvicorn

    from study_coach.config import get_settings
    from study_coach.main import app

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
