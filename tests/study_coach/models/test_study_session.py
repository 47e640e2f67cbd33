"""
데이터 모델 테스트
"""

import pytest
from pydantic import ValidationError

from study_coach.models.study_session import BlockType, TimeBlock


@pytest.mark.parametrize("kind, label", [
    (BlockType.FOCUS, "45 min focus"),
    (BlockType.SHORT_BREAK, "45 min break"),
    (BlockType.LONG_BREAK, "45 min long break"),
])
def test_label_follows_type_and_duration(kind, label):
    assert TimeBlock(type=kind, duration_minutes=45).label == label


def test_label_cannot_be_set():
    block = TimeBlock.model_validate({"type": "focus", "duration_minutes": 60, "label": "nap"})
    assert block.label == "60 min focus"


def test_block_is_immutable():
    block = TimeBlock(type=BlockType.FOCUS, duration_minutes=60)
    with pytest.raises(ValidationError):
        block.duration_minutes = 30


@pytest.mark.parametrize("minutes", [0, -5])
def test_duration_must_be_positive(minutes):
    with pytest.raises(ValidationError):
        TimeBlock(type=BlockType.FOCUS, duration_minutes=minutes)


def test_duration_seconds():
    assert TimeBlock(type=BlockType.SHORT_BREAK, duration_minutes=15).duration_seconds == 900
