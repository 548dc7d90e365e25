"""Polarity scoring: learned-model routing, rule-based fallback, fail-soft wrapper."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

import numpy as np

from qualia.nlp.inference import LABELS, HttpInferenceAdapter, InferenceAdapter, TorchInferenceAdapter
from qualia.nlp.taggers import LexiconTagger, SentimentTagger, VaderTagger
from qualia.nlp.tokenizer import DEFAULT_MAX_LENGTH, BertTokenizer

logger = logging.getLogger("qualia.scorer")

NEGATIVE_INDEX = 0
POSITIVE_INDEX = 2
TANH_DAMPING = 1.5
SHORT_TEXT_CHARS = 15
TERMINAL_PUNCTUATION = "!?.,:;"
DEFAULT_MODEL_LANGUAGE = "ru"
DEFAULT_FALLBACK_LANGUAGE = "en"


def softmax(values: Sequence[float]) -> np.ndarray:
    """Numerically stable softmax (max is subtracted before exponentiating)."""
    logits = np.asarray(values, dtype=np.float64)
    if logits.size == 0:
        raise ValueError("softmax requires at least one value")
    if not np.all(np.isfinite(logits)):
        raise ValueError(f"softmax received non-finite values: {list(values)!r}")
    shifted = np.exp(logits - logits.max())
    return shifted / shifted.sum()


def polarity_from_scores(scores: Mapping[str, float]) -> float:
    """P(positive) - P(negative) after re-normalising all five classes."""
    probs = softmax([float(scores.get(label, 0.0)) for label in LABELS])
    return float(probs[POSITIVE_INDEX] - probs[NEGATIVE_INDEX])


@runtime_checkable
class SentimentProvider(Protocol):
    """Pluggable backend returning a polarity in [-1, 1]; may raise."""

    async def analyze_sentiment(self, text: str, language: str) -> float:
        raise NotImplementedError


class RuleBasedProvider:
    """Compresses a rule-based tagger's raw score with ``tanh(raw * 1.5)``."""

    def __init__(self, tagger: SentimentTagger | None = None) -> None:
        self.tagger = tagger if tagger is not None else VaderTagger()

    async def analyze_sentiment(self, text: str, language: str) -> float:
        processed = self.preprocess(text)
        raw = float(self.tagger.score(processed, language))
        return math.tanh(raw * TANH_DAMPING)

    @staticmethod
    def preprocess(text: str) -> str:
        # Short fragments get a period so the tagger sees a sentence.
        processed = text.strip()
        has_punctuation = bool(processed) and processed[-1] in TERMINAL_PUNCTUATION
        if not has_punctuation and len(processed) < SHORT_TEXT_CHARS:
            processed += "."
        return processed


class BertProvider:
    """Routes the model language to the classifier, everything else to the fallback."""

    def __init__(
        self,
        tokenizer: BertTokenizer,
        adapter: InferenceAdapter,
        *,
        fallback: SentimentProvider | None = None,
        language: str = DEFAULT_MODEL_LANGUAGE,
    ) -> None:
        self.tokenizer = tokenizer
        self.adapter = adapter
        self.fallback = fallback if fallback is not None else RuleBasedProvider()
        self.language = language

    async def analyze_sentiment(self, text: str, language: str) -> float:
        if language != self.language:
            return await self.fallback.analyze_sentiment(text, language)
        tokens = self.tokenizer.tokenize(text)
        scores = await self.adapter.predict(tokens)
        return polarity_from_scores(scores)

    async def aclose(self) -> None:
        closer = getattr(self.adapter, "aclose", None)
        if closer is not None:
            await closer()


class SentimentScorer:
    """Fail-soft front for a provider: trims, short-circuits, never raises."""

    def __init__(self, provider: SentimentProvider) -> None:
        self.provider = provider

    async def score(self, text: str, language: str | None = None) -> float:
        trimmed = (text or "").strip()
        if not trimmed:
            return 0.0
        language = language or DEFAULT_FALLBACK_LANGUAGE
        try:
            value = float(await self.provider.analyze_sentiment(trimmed, language))
        except Exception as exc:
            logger.warning("Sentiment backend failed for language %s: %s", language, exc)
            return 0.0
        if not math.isfinite(value):
            logger.warning("Sentiment backend returned non-finite score %r", value)
            return 0.0
        return max(-1.0, min(1.0, value))


def load_sentiment_provider(settings: Mapping[str, Any] | None = None) -> SentimentProvider:
    """Build a provider from the ``provider`` section of the settings.

    The rule-based types degrade to defaults; the ``bert`` type fails fast
    because the pipeline cannot run without its vocabulary and model.
    """
    config = dict((settings or {}).get("provider") or {})
    kind = str(config.get("type") or "rule").lower()
    if kind in {"rule", "vader"}:
        return RuleBasedProvider(VaderTagger())
    if kind == "lexicon":
        return RuleBasedProvider(LexiconTagger())
    if kind == "bert":
        vocab_path = config.get("vocab_path")
        if not vocab_path:
            raise ValueError("bert provider config must include 'vocab_path'.")
        tokenizer = BertTokenizer.from_file(
            Path(vocab_path),
            max_length=int(config.get("max_length", DEFAULT_MAX_LENGTH)),
        )
        adapter: InferenceAdapter
        if config.get("model_path"):
            adapter = TorchInferenceAdapter(config["model_path"], device=str(config.get("device") or "auto"))
        elif config.get("endpoint"):
            adapter = HttpInferenceAdapter(
                str(config["endpoint"]),
                timeout=float(config.get("timeout", 5.0)),
            )
        else:
            raise ValueError("bert provider config needs 'model_path' or 'endpoint'.")
        fallback_kind = str(config.get("fallback") or "vader").lower()
        fallback_tagger = LexiconTagger() if fallback_kind == "lexicon" else VaderTagger()
        return BertProvider(
            tokenizer,
            adapter,
            fallback=RuleBasedProvider(fallback_tagger),
            language=str(config.get("language") or DEFAULT_MODEL_LANGUAGE),
        )
    raise ValueError(f"Unknown sentiment provider type '{kind}'.")


__all__ = [
    "BertProvider",
    "RuleBasedProvider",
    "SentimentProvider",
    "SentimentScorer",
    "load_sentiment_provider",
    "polarity_from_scores",
    "softmax",
]
