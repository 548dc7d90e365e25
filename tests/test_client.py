import asyncio
import tempfile
import unittest
from pathlib import Path

from qualia.client import QualiaClient
from qualia.config import QualiaConfiguration
from qualia.emotion import EmotionResult, SenseEmotion
from qualia.haptics.actuators import MockActuator
from qualia.nlp.scorer import BertProvider, RuleBasedProvider


class RecordingProvider:
    def __init__(self, value: float = 0.0, delay: float = 0.0) -> None:
        self.value = value
        self.delay = delay
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def analyze_sentiment(self, text: str, language: str) -> float:
        self.calls.append((text, language))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.value

    async def aclose(self) -> None:
        self.closed = True


class ClosingActuator(MockActuator):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    def close(self) -> None:
        self.closed = True


class BrokenPrepareActuator(MockActuator):
    def prepare(self) -> None:
        raise RuntimeError("engine unavailable")


class QualiaClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = RecordingProvider(0.7)
        self.actuator = MockActuator()
        self.client = QualiaClient(self.provider, config=QualiaConfiguration.standard(), actuator=self.actuator)

    def test_construction_prepares_actuator(self) -> None:
        self.assertTrue(self.actuator.prepare_called)

    def test_prepare_failure_is_logged(self) -> None:
        with self.assertLogs("qualia.client", level="WARNING"):
            QualiaClient(self.provider, actuator=BrokenPrepareActuator())

    def test_default_provider_is_rule_based(self) -> None:
        client = QualiaClient()
        self.assertIsInstance(client.provider, RuleBasedProvider)
        self.assertEqual(client.config, QualiaConfiguration.standard())

    def test_analyze_does_not_play(self) -> None:
        result = asyncio.run(self.client.analyze("What a lovely afternoon"))
        self.assertEqual(result, EmotionResult(SenseEmotion.POSITIVE, 0.7))
        self.assertEqual(self.actuator.played, [])
        self.assertFalse(self.actuator.loop_active)

    def test_analyze_and_feel_plays_and_starts_heartbeat(self) -> None:
        result = asyncio.run(self.client.analyze_and_feel("They attacked the gate"))
        self.assertEqual(result, EmotionResult(SenseEmotion.INTENSE, 0.0))
        self.assertEqual(self.actuator.played, [(SenseEmotion.INTENSE, 1.0)])
        self.assertTrue(self.actuator.loop_active)
        self.assertTrue(self.client.dispatcher.heartbeat_active)

    def test_silent_config_only_classifies(self) -> None:
        self.client.reconfigure(QualiaConfiguration.silent())
        result = asyncio.run(self.client.analyze_and_feel("They attacked the gate"))
        self.assertIs(result.emotion, SenseEmotion.INTENSE)
        self.assertEqual(self.actuator.played, [])
        self.assertFalse(self.actuator.loop_active)

    def test_feel_ignores_auto_play(self) -> None:
        self.client.reconfigure(QualiaConfiguration.accessibility().with_changes(auto_play_haptics=False))
        asyncio.run(self.client.feel(SenseEmotion.MYSTERIOUS))
        self.assertEqual(self.actuator.played, [(SenseEmotion.MYSTERIOUS, 0.5)])

    def test_slow_stale_classification_does_not_stop_heartbeat(self) -> None:
        slow = RecordingProvider(0.9, delay=0.1)
        client = QualiaClient(slow, actuator=self.actuator)

        async def scenario() -> None:
            older = asyncio.create_task(client.analyze_and_feel("What a lovely afternoon"))
            await asyncio.sleep(0)
            await client.analyze_and_feel("They attacked the gate")
            await older

        asyncio.run(scenario())
        self.assertTrue(self.actuator.loop_active)
        self.assertEqual(self.actuator.loop_stops, 0)
        self.assertEqual(self.actuator.emotion_counts[SenseEmotion.POSITIVE], 1)

    def test_aclose_tears_everything_down(self) -> None:
        actuator = ClosingActuator()
        provider = RecordingProvider()

        async def scenario() -> None:
            async with QualiaClient(provider, actuator=actuator) as client:
                await client.analyze_and_feel("blood on the snow")

        asyncio.run(scenario())
        self.assertTrue(provider.closed)
        self.assertTrue(actuator.closed)
        self.assertFalse(actuator.loop_active)
        self.assertEqual(actuator.loop_stops, 1)


class FromBertTests(unittest.TestCase):
    def setUp(self) -> None:
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        self.vocab_path = Path(temp_dir.name) / "vocab.txt"
        self.vocab_path.write_text("[PAD]\n[UNK]\n[CLS]\n[SEP]\n", encoding="utf-8")

    def test_missing_vocab_fails(self) -> None:
        with self.assertRaises(OSError):
            QualiaClient.from_bert(self.vocab_path.parent / "missing.txt", endpoint="http://localhost:9")

    def test_requires_a_backend(self) -> None:
        with self.assertRaises(ValueError):
            QualiaClient.from_bert(self.vocab_path)

    def test_endpoint_backend(self) -> None:
        actuator = MockActuator()
        client = QualiaClient.from_bert(
            self.vocab_path,
            endpoint="http://localhost:9/predict",
            max_length=32,
            config=QualiaConfiguration.testing(),
            actuator=actuator,
        )
        self.assertIsInstance(client.provider, BertProvider)
        self.assertEqual(client.provider.tokenizer.max_length, 32)
        self.assertFalse(client.config.auto_play_haptics)
        self.assertIs(client.actuator, actuator)
        asyncio.run(client.aclose())

    def test_unreachable_endpoint_degrades_to_neutral(self) -> None:
        client = QualiaClient.from_bert(self.vocab_path, endpoint="http://127.0.0.1:9/predict")

        async def scenario() -> EmotionResult:
            client.provider.adapter._base_backoff = 0.0
            try:
                return await client.analyze("Хороший день")
            finally:
                await client.aclose()

        with self.assertLogs("qualia.scorer", level="WARNING"):
            result = asyncio.run(scenario())
        self.assertEqual(result, EmotionResult(SenseEmotion.NEUTRAL, 0.0))


if __name__ == "__main__":
    unittest.main()
