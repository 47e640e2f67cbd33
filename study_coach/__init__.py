"""
Study Coach - 세션 플랜 생성과 집중 타이머 백엔드
"""

__version__ = "1.0.0"
