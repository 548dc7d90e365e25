import asyncio
import unittest

from qualia.config import QualiaConfiguration
from qualia.emotion import EmotionResult, SenseEmotion
from qualia.heuristics import HeuristicClassifier, category_for_score
from qualia.nlp.scorer import SentimentScorer


class RecordingProvider:
    def __init__(self, value: float = 0.0) -> None:
        self.value = value
        self.calls: list[tuple[str, str]] = []

    async def analyze_sentiment(self, text: str, language: str) -> float:
        self.calls.append((text, language))
        return self.value


class FixedDetector:
    def __init__(self, language):
        self.language = language

    def detect(self, text: str):
        return self.language


class CategoryForScoreTests(unittest.TestCase):
    def test_thresholds_are_strict(self) -> None:
        self.assertIs(category_for_score(0.21), SenseEmotion.POSITIVE)
        self.assertIs(category_for_score(0.2), SenseEmotion.NEUTRAL)
        self.assertIs(category_for_score(0.0), SenseEmotion.NEUTRAL)
        self.assertIs(category_for_score(-0.2), SenseEmotion.NEUTRAL)
        self.assertIs(category_for_score(-0.21), SenseEmotion.NEGATIVE)


class HeuristicClassifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = RecordingProvider(0.0)
        self.classifier = HeuristicClassifier(SentimentScorer(self.provider))
        self.config = QualiaConfiguration.testing()

    def classify(self, text: str, config: QualiaConfiguration | None = None) -> EmotionResult:
        return asyncio.run(self.classifier.classify(text, config or self.config))

    def test_stop_word_is_neutral(self) -> None:
        self.provider.value = -0.9
        self.assertEqual(self.classify("the"), EmotionResult(SenseEmotion.NEUTRAL, 0.0))
        self.assertEqual(self.classify("  The  "), EmotionResult(SenseEmotion.NEUTRAL, 0.0))
        self.assertEqual(self.provider.calls, [])

    def test_stop_word_beats_keywords(self) -> None:
        config = self.config.with_changes(intense_keywords=("the",))
        self.assertEqual(self.classify("the", config), EmotionResult(SenseEmotion.NEUTRAL, 0.0))

    def test_negated_idiom_is_positive(self) -> None:
        self.provider.value = -0.8
        self.assertEqual(self.classify("not bad"), EmotionResult(SenseEmotion.POSITIVE, 0.5))
        self.assertEqual(
            self.classify("The movie was not bad at all"),
            EmotionResult(SenseEmotion.POSITIVE, 0.5),
        )
        self.assertEqual(self.provider.calls, [])

    def test_negated_idiom_beats_intense_keyword(self) -> None:
        result = self.classify("the attack was not terrible")
        self.assertIs(result.emotion, SenseEmotion.POSITIVE)

    def test_intense_keyword_substring(self) -> None:
        self.assertEqual(self.classify("They attacked at dawn"), EmotionResult(SenseEmotion.INTENSE, 0.0))
        self.assertEqual(self.classify("На снегу была кровь"), EmotionResult(SenseEmotion.INTENSE, 0.0))

    def test_intense_beats_mysterious(self) -> None:
        result = self.classify("a secret attack")
        self.assertIs(result.emotion, SenseEmotion.INTENSE)

    def test_mysterious_keyword(self) -> None:
        self.assertEqual(self.classify("A shadow crossed the hall"), EmotionResult(SenseEmotion.MYSTERIOUS, 0.0))
        self.assertEqual(self.classify("Тёмный лес"), EmotionResult(SenseEmotion.MYSTERIOUS, 0.0))

    def test_custom_keywords(self) -> None:
        config = self.config.with_changes(intense_keywords=("storm",), mysterious_keywords=("fog",))
        self.assertIs(self.classify("a storm is coming", config).emotion, SenseEmotion.INTENSE)
        self.assertIs(self.classify("thick fog", config).emotion, SenseEmotion.MYSTERIOUS)
        self.assertIs(self.classify("They attacked", config).emotion, SenseEmotion.NEUTRAL)

    def test_empty_text_is_neutral(self) -> None:
        self.provider.value = 0.9
        self.assertEqual(self.classify(""), EmotionResult(SenseEmotion.NEUTRAL, 0.0))
        self.assertEqual(self.classify("   "), EmotionResult(SenseEmotion.NEUTRAL, 0.0))
        self.assertEqual(self.provider.calls, [])

    def test_score_thresholds(self) -> None:
        self.provider.value = 0.6
        self.assertEqual(self.classify("lovely weather today"), EmotionResult(SenseEmotion.POSITIVE, 0.6))
        self.provider.value = -0.4
        self.assertEqual(self.classify("gloomy weather today"), EmotionResult(SenseEmotion.NEGATIVE, -0.4))
        self.provider.value = 0.1
        self.assertEqual(self.classify("weather today"), EmotionResult(SenseEmotion.NEUTRAL, 0.1))

    def test_language_detection_routes_scorer(self) -> None:
        self.classify("Хороший день")
        self.classify("Good day")
        self.classify("12345")
        self.assertEqual(
            self.provider.calls,
            [("Хороший день", "ru"), ("Good day", "en"), ("12345", "en")],
        )

    def test_custom_detector(self) -> None:
        classifier = HeuristicClassifier(SentimentScorer(self.provider), FixedDetector("ru"))
        asyncio.run(classifier.classify("plain words", self.config))
        self.assertEqual(self.provider.calls, [("plain words", "ru")])

    def test_match_override_returns_none_without_rule(self) -> None:
        self.assertIsNone(self.classifier.match_override("lovely weather", self.config))


if __name__ == "__main__":
    unittest.main()
