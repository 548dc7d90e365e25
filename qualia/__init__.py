"""Qualia: text sentiment to emotion categories to haptic feedback."""

from .emotion import EmotionResult, SenseEmotion
from .config import QualiaConfiguration, load_keywords, load_settings
from .heuristics import HeuristicClassifier
from .client import QualiaClient
from .debounce import Debouncer, FeedbackBinding

__all__ = [
    "Debouncer",
    "EmotionResult",
    "FeedbackBinding",
    "HeuristicClassifier",
    "QualiaClient",
    "QualiaConfiguration",
    "SenseEmotion",
    "load_keywords",
    "load_settings",
]
