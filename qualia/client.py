"""Main entry point: text analysis plus optional haptic feedback."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from qualia.config import QualiaConfiguration
from qualia.emotion import EmotionResult, SenseEmotion
from qualia.haptics.actuators import Actuator, NoOpActuator
from qualia.haptics.dispatcher import FeedbackDispatcher
from qualia.heuristics import HeuristicClassifier
from qualia.nlp.inference import HttpInferenceAdapter, InferenceAdapter, TorchInferenceAdapter
from qualia.nlp.language import LanguageDetector
from qualia.nlp.scorer import (
    DEFAULT_MODEL_LANGUAGE,
    BertProvider,
    RuleBasedProvider,
    SentimentProvider,
    SentimentScorer,
)
from qualia.nlp.tokenizer import DEFAULT_MAX_LENGTH, BertTokenizer

logger = logging.getLogger("qualia.client")


class QualiaClient:
    """Analyzes text for emotional content and optionally plays haptics.

    ``analyze`` only classifies. ``analyze_and_feel`` classifies and then
    plays feedback if ``config.auto_play_haptics`` is set. ``feel`` plays
    feedback for a given emotion regardless of that flag.
    """

    def __init__(
        self,
        provider: SentimentProvider | None = None,
        *,
        config: QualiaConfiguration | None = None,
        actuator: Actuator | None = None,
        language_detector: LanguageDetector | None = None,
    ) -> None:
        self.provider = provider if provider is not None else RuleBasedProvider()
        self._config = config if config is not None else QualiaConfiguration.standard()
        self.actuator = actuator if actuator is not None else NoOpActuator()
        self._classifier = HeuristicClassifier(SentimentScorer(self.provider), language_detector)
        self._dispatcher = FeedbackDispatcher(self.actuator)
        try:
            self.actuator.prepare()
        except Exception as exc:
            logger.warning("Actuator prepare failed: %s", exc)

    @classmethod
    def from_bert(
        cls,
        vocab_path: str | Path,
        *,
        model_path: str | Path | None = None,
        endpoint: str | None = None,
        max_length: int = DEFAULT_MAX_LENGTH,
        language: str = DEFAULT_MODEL_LANGUAGE,
        fallback: SentimentProvider | None = None,
        **kwargs: Any,
    ) -> "QualiaClient":
        """Build a client backed by a BERT classifier; load failures propagate."""
        tokenizer = BertTokenizer.from_file(vocab_path, max_length=max_length)
        adapter: InferenceAdapter
        if model_path is not None:
            adapter = TorchInferenceAdapter(model_path)
        elif endpoint:
            adapter = HttpInferenceAdapter(endpoint)
        else:
            raise ValueError("from_bert needs either model_path or endpoint.")
        provider = BertProvider(tokenizer, adapter, fallback=fallback, language=language)
        return cls(provider, **kwargs)

    @property
    def config(self) -> QualiaConfiguration:
        return self._config

    @property
    def dispatcher(self) -> FeedbackDispatcher:
        return self._dispatcher

    def reconfigure(self, config: QualiaConfiguration) -> None:
        self._config = config

    async def analyze(self, text: str) -> EmotionResult:
        return await self._classifier.classify(text, self._config)

    async def analyze_and_feel(self, text: str) -> EmotionResult:
        config = self._config
        ticket = self._dispatcher.next_ticket()
        result = await self._classifier.classify(text, config)
        await self._dispatcher.dispatch_if_configured(result.emotion, config, ticket=ticket)
        return result

    async def feel(self, emotion: SenseEmotion) -> None:
        ticket = self._dispatcher.next_ticket()
        await self._dispatcher.dispatch_explicit(emotion, self._config, ticket=ticket)

    async def aclose(self) -> None:
        await self._dispatcher.aclose()
        closer = getattr(self.provider, "aclose", None)
        if closer is not None:
            await closer()
        closer = getattr(self.actuator, "close", None)
        if closer is not None:
            try:
                await asyncio.to_thread(closer)
            except Exception as exc:
                logger.warning("Actuator close failed: %s", exc)

    async def __aenter__(self) -> "QualiaClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["QualiaClient"]
