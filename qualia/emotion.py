"""Emotion categories produced by the classifier and consumed by haptics."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class SenseEmotion(str, Enum):
    """Closed set of emotional categories a text can map to."""

    NEUTRAL = "neutral"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    INTENSE = "intense"
    MYSTERIOUS = "mysterious"


class EmotionResult(NamedTuple):
    """Terminal classification result: category plus polarity in [-1, 1]."""

    emotion: SenseEmotion
    score: float

    def as_dict(self) -> dict[str, object]:
        return {"emotion": self.emotion.value, "score": round(self.score, 4)}


__all__ = ["SenseEmotion", "EmotionResult"]
