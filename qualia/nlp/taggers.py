"""Rule-based sentiment taggers used outside the learned-model language."""

from __future__ import annotations

import re
from typing import Protocol, Sequence, runtime_checkable

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

POSITIVE_WORDS = {
    "amazing",
    "appreciate",
    "beautiful",
    "best",
    "calm",
    "care",
    "cheerful",
    "delight",
    "excellent",
    "fantastic",
    "glad",
    "good",
    "grateful",
    "great",
    "happy",
    "hope",
    "hopeful",
    "joy",
    "joyful",
    "kind",
    "love",
    "loved",
    "lovely",
    "nice",
    "peace",
    "peaceful",
    "proud",
    "relaxed",
    "relief",
    "safe",
    "warm",
    "wonderful",
}

NEGATIVE_WORDS = {
    "alone",
    "angry",
    "anxious",
    "ashamed",
    "awful",
    "bad",
    "broken",
    "depressed",
    "fear",
    "frightened",
    "frustrated",
    "hate",
    "horrible",
    "hurt",
    "lonely",
    "miserable",
    "panic",
    "sad",
    "scared",
    "stressed",
    "terrible",
    "tired",
    "upset",
    "worried",
    "worst",
}

# Russian is inflected, so these match word prefixes.
POSITIVE_STEMS = ("рад", "счаст", "прекрас", "хорош", "отлич", "любл", "любов", "чудес", "весел", "спасиб")
NEGATIVE_STEMS = ("плох", "ужас", "груст", "печал", "страш", "зл", "ненави", "больн", "тоск", "обид")

TOKEN_PATTERN = re.compile(r"[^\W_]+", re.UNICODE)


@runtime_checkable
class SentimentTagger(Protocol):
    """Returns a raw, unbounded signed sentiment value for a text."""

    def score(self, text: str, language: str | None = None) -> float:
        raise NotImplementedError


class VaderTagger:
    """VADER compound score; tuned for English social text."""

    def __init__(self) -> None:
        self._analyzer = SentimentIntensityAnalyzer()

    def score(self, text: str, language: str | None = None) -> float:
        return float(self._analyzer.polarity_scores(text)["compound"])


class LexiconTagger:
    """Word-list tagger with English words and Russian stems."""

    def __init__(self, *, emphasis_bonus: float = 0.5, weight: float = 1.0) -> None:
        self._emphasis_bonus = float(emphasis_bonus)
        self._weight = float(weight)

    def score(self, text: str, language: str | None = None) -> float:
        tokens = _tokenise(text)
        positive_hits = _count_members(tokens, POSITIVE_WORDS) + _count_prefixed(tokens, POSITIVE_STEMS)
        negative_hits = _count_members(tokens, NEGATIVE_WORDS) + _count_prefixed(tokens, NEGATIVE_STEMS)
        raw = (positive_hits - negative_hits) * self._weight
        if raw and "!" in text:
            raw += self._emphasis_bonus if raw > 0 else -self._emphasis_bonus
        return raw


def _tokenise(text: str) -> list[str]:
    if not text:
        return []
    return [match.group(0).lower() for match in TOKEN_PATTERN.finditer(text)]


def _count_members(tokens: Sequence[str], vocab: set[str]) -> int:
    return sum(1 for token in tokens if token in vocab)


def _count_prefixed(tokens: Sequence[str], stems: Sequence[str]) -> int:
    return sum(1 for token in tokens if token.startswith(stems))


__all__ = ["SentimentTagger", "VaderTagger", "LexiconTagger"]
