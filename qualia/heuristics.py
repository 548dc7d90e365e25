"""Ordered heuristic overrides in front of the sentiment scorer."""

from __future__ import annotations

import logging

from qualia.config import QualiaConfiguration
from qualia.emotion import EmotionResult, SenseEmotion
from qualia.nlp.language import LanguageDetector, ScriptLanguageDetector
from qualia.nlp.scorer import SentimentScorer

logger = logging.getLogger("qualia.heuristics")

POSITIVE_THRESHOLD = 0.2
NEGATIVE_THRESHOLD = -0.2
NEGATION_SCORE = 0.5

# Isolated function words score mildly negative in rule-based taggers.
STOP_WORDS = frozenset(
    {
        # articles
        "a",
        "an",
        "the",
        # demonstratives
        "this",
        "that",
        "these",
        "those",
        # pronouns
        "it",
        "its",
        "i",
        "me",
        "my",
        "you",
        "your",
        "he",
        "she",
        "we",
        "they",
        # auxiliary verbs
        "is",
        "am",
        "are",
        "was",
        "were",
        "be",
        "been",
        "being",
        "have",
        "has",
        "had",
        "do",
        "does",
        "did",
        "will",
        "would",
        "should",
        "could",
        "may",
        "might",
        "can",
        # prepositions
        "of",
        "in",
        "on",
        "at",
        "to",
        "for",
        "with",
        "from",
        "by",
        "about",
        "as",
        "into",
    }
)

POSITIVE_NEGATIONS = (
    "not bad",
    "not terrible",
    "not awful",
    "not horrible",
    "not wrong",
    "not poor",
    "not weak",
    "not worse",
)


def category_for_score(score: float) -> SenseEmotion:
    if score > POSITIVE_THRESHOLD:
        return SenseEmotion.POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return SenseEmotion.NEGATIVE
    return SenseEmotion.NEUTRAL


class HeuristicClassifier:
    """First-match-wins rule chain ending in threshold mapping of the score.

    Order: stop-word, negated idiom, intense keyword, mysterious keyword,
    scorer fallback. Keyword and idiom checks are plain substring matches on
    the lowercased text, so "attack" also fires inside "attacked".
    """

    def __init__(
        self,
        scorer: SentimentScorer,
        language_detector: LanguageDetector | None = None,
    ) -> None:
        self.scorer = scorer
        self.language_detector = language_detector or ScriptLanguageDetector()

    def match_override(self, text: str, config: QualiaConfiguration) -> EmotionResult | None:
        """Return the result of the first matching override rule, if any."""
        lowered = (text or "").strip().lower()
        if lowered in STOP_WORDS:
            logger.debug("stop-word override for %r", lowered)
            return EmotionResult(SenseEmotion.NEUTRAL, 0.0)
        if any(phrase in lowered for phrase in POSITIVE_NEGATIONS):
            logger.debug("negated-idiom override for %r", lowered)
            return EmotionResult(SenseEmotion.POSITIVE, NEGATION_SCORE)
        if any(keyword in lowered for keyword in config.intense_keywords):
            return EmotionResult(SenseEmotion.INTENSE, 0.0)
        if any(keyword in lowered for keyword in config.mysterious_keywords):
            return EmotionResult(SenseEmotion.MYSTERIOUS, 0.0)
        return None

    async def classify(self, text: str, config: QualiaConfiguration) -> EmotionResult:
        override = self.match_override(text, config)
        if override is not None:
            return override
        language = self.language_detector.detect(text or "")
        score = await self.scorer.score(text, language)
        return EmotionResult(category_for_score(score), score)


__all__ = [
    "HeuristicClassifier",
    "POSITIVE_NEGATIONS",
    "STOP_WORDS",
    "category_for_score",
]
