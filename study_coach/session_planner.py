"""
세션 플랜 생성기
가용 시간을 집중 블록(60~90분)과 휴식 블록으로 나눕니다.
"""

from typing import List

from study_coach.models.study_session import BlockType, SessionPlan, TimeBlock

FOCUS_BLOCK_MIN = 60
FOCUS_BLOCK_MAX = 90
SHORT_BREAK = 15
LONG_BREAK = 20  # 플랜당 최대 한 번

# 긴 휴식 뒤에 온전한 집중 블록이 들어갈 시간이 남을 때만 긴 휴식 배정
LONG_BREAK_THRESHOLD = LONG_BREAK + FOCUS_BLOCK_MIN

DEFAULT_SUBJECT_NAME = "Study"


def generate_session_plan(subject_id: str, subject_name: str, total_minutes: int) -> SessionPlan:
    """세션 플랜 생성

    집중 블록은 60분보다 짧아지지 않습니다. 남은 시간이 60분 미만이어도
    60분 블록을 배정하므로 총 집중 시간이 요청보다 길어질 수 있습니다.

    Args:
        subject_id: 과목 id
        subject_name: 과목 이름
        total_minutes: 가용 시간 (분). 0 이하이면 빈 플랜
    """
    blocks: List[TimeBlock] = []
    remaining = total_minutes
    used_long_break = False

    while remaining > 0:
        focus_len = min(max(FOCUS_BLOCK_MIN, remaining), FOCUS_BLOCK_MAX)
        blocks.append(TimeBlock(type=BlockType.FOCUS, duration_minutes=focus_len))
        remaining -= focus_len

        if remaining <= 0:
            break

        need_long_break = not used_long_break and remaining >= LONG_BREAK_THRESHOLD
        if need_long_break:
            blocks.append(TimeBlock(type=BlockType.LONG_BREAK, duration_minutes=LONG_BREAK))
            remaining -= LONG_BREAK
            used_long_break = True
        else:
            break_len = min(SHORT_BREAK, remaining)
            blocks.append(TimeBlock(type=BlockType.SHORT_BREAK, duration_minutes=break_len))
            remaining -= break_len

    return SessionPlan(
        subject_id=subject_id,
        subject_name=subject_name,
        total_focus_minutes=sum(b.duration_minutes for b in blocks if b.is_focus),
        blocks=blocks,
    )
