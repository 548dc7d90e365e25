"""Command-line demo: classify text and drive the configured actuator."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Iterable, Sequence

from qualia.client import QualiaClient
from qualia.config import QualiaConfiguration, load_settings
from qualia.haptics.actuators import Actuator, MockActuator, NoOpActuator, SerialActuator
from qualia.nlp.scorer import load_sentiment_provider


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify text into an emotion and play haptic feedback.")
    parser.add_argument("text", nargs="*", help="Text to analyze. Reads stdin lines when omitted.")
    parser.add_argument("--vocab", help="WordPiece vocabulary file for the BERT backend.")
    parser.add_argument("--model", help="Local transformers model directory for the BERT backend.")
    parser.add_argument("--endpoint", help="HTTP inference server URL for the BERT backend.")
    parser.add_argument("--language", default="ru", help="Language routed to the BERT backend (default: ru).")
    parser.add_argument("--serial-port", help="Drive a serial buzzer/vibration board on this port.")
    parser.add_argument("--baud", type=int, default=9600, help="Serial baud rate (default: 9600).")
    parser.add_argument("--mock", action="store_true", help="Record actuator calls and print them at exit.")
    parser.add_argument("--silent", action="store_true", help="Analyze only; no automatic haptics.")
    parser.add_argument("--intensity", type=float, help="Haptic intensity in [0, 1].")
    parser.add_argument("--delay", type=float, help="Delay before each haptic pulse, in seconds.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def build_configuration(args: argparse.Namespace) -> QualiaConfiguration:
    config = QualiaConfiguration.from_settings(load_settings())
    if args.silent:
        config = config.with_changes(auto_play_haptics=False, enable_heartbeat=False)
    if args.intensity is not None:
        config = config.with_changes(intensity=args.intensity)
    if args.delay is not None:
        config = config.with_changes(delay_seconds=args.delay)
    return config


def build_actuator(args: argparse.Namespace) -> Actuator:
    if args.serial_port:
        return SerialActuator(args.serial_port, baudrate=args.baud)
    if args.mock:
        return MockActuator()
    return NoOpActuator()


def build_client(args: argparse.Namespace) -> QualiaClient:
    config = build_configuration(args)
    actuator = build_actuator(args)
    if args.vocab:
        return QualiaClient.from_bert(
            args.vocab,
            model_path=args.model,
            endpoint=args.endpoint,
            language=args.language,
            config=config,
            actuator=actuator,
        )
    provider = load_sentiment_provider(load_settings())
    return QualiaClient(provider, config=config, actuator=actuator)


def _iter_inputs(args: argparse.Namespace) -> Iterable[str]:
    if args.text:
        yield " ".join(args.text)
        return
    for line in sys.stdin:
        yield line.rstrip("\n")


async def run(args: argparse.Namespace) -> int:
    client = build_client(args)
    async with client:
        for text in _iter_inputs(args):
            result = await client.analyze_and_feel(text)
            print(f"{result.emotion.value}\t{result.score:+.4f}")
        if client.config.delay_seconds > 0:
            await asyncio.sleep(client.config.delay_seconds)
    if isinstance(client.actuator, MockActuator):
        for emotion, intensity in client.actuator.played:
            print(f"played {emotion.value} intensity={intensity:.2f}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except (OSError, ValueError, RuntimeError) as exc:
        logging.getLogger("qualia.cli").error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
