"""Actuator backends that turn emotion categories into physical output."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from typing import Any, Mapping, Protocol, runtime_checkable

# Try to import serial (for buzzer/vibration boards)
try:
    import serial
except Exception:  # pragma: no cover - optional dependency
    serial = None

from qualia.emotion import SenseEmotion

logger = logging.getLogger("qualia.actuators")


@runtime_checkable
class Actuator(Protocol):
    """Best-effort haptic device. Calls may block; the dispatcher runs them in threads."""

    def prepare(self) -> None:
        """Warm up the device. ``play`` must still work if this was never called."""
        raise NotImplementedError

    def play(self, emotion: SenseEmotion, intensity: float) -> None:
        """Emit the one-shot pattern for ``emotion``; intensity is within [0, 1]."""
        raise NotImplementedError

    def start_loop(self) -> None:
        """Start the repeating heartbeat pattern."""
        raise NotImplementedError

    def stop_loop(self) -> None:
        raise NotImplementedError


class NoOpActuator:
    """Used on hosts without haptic hardware."""

    def prepare(self) -> None:
        pass

    def play(self, emotion: SenseEmotion, intensity: float) -> None:
        pass

    def start_loop(self) -> None:
        pass

    def stop_loop(self) -> None:
        pass


class MockActuator:
    """Records every call for verification in tests. Thread-safe."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.played: list[tuple[SenseEmotion, float]] = []
        self.prepare_called = False
        self.loop_active = False
        self.loop_starts = 0
        self.loop_stops = 0

    @property
    def played_emotions(self) -> list[SenseEmotion]:
        with self._lock:
            return [emotion for emotion, _ in self.played]

    @property
    def emotion_counts(self) -> Counter[SenseEmotion]:
        return Counter(self.played_emotions)

    def prepare(self) -> None:
        with self._lock:
            self.prepare_called = True

    def play(self, emotion: SenseEmotion, intensity: float) -> None:
        with self._lock:
            self.played.append((emotion, intensity))

    def start_loop(self) -> None:
        with self._lock:
            self.loop_active = True
            self.loop_starts += 1

    def stop_loop(self) -> None:
        with self._lock:
            self.loop_active = False
            self.loop_stops += 1

    def reset(self) -> None:
        with self._lock:
            self.played.clear()
            self.prepare_called = False
            self.loop_active = False
            self.loop_starts = 0
            self.loop_stops = 0


# Pulse durations in milliseconds at full intensity.
PULSE_PATTERNS: Mapping[SenseEmotion, tuple[int, ...]] = {
    SenseEmotion.POSITIVE: (120, 120, 200),
    SenseEmotion.NEGATIVE: (300, 80, 300),
    SenseEmotion.INTENSE: (400,),
    SenseEmotion.MYSTERIOUS: (80, 80, 80, 400),
    SenseEmotion.NEUTRAL: (60,),
}
HEARTBEAT_PATTERN: tuple[int, ...] = (90, 150, 60)
HEARTBEAT_PERIOD_SECONDS = 1.5
MIN_PULSE_MS = 20


def encode_pattern(pulses: tuple[int, ...], intensity: float = 1.0) -> bytes:
    """Build one ``B:<ms>,<ms>\\n`` command line, scaling pulses by intensity."""
    scaled = [max(MIN_PULSE_MS, int(round(ms * intensity))) for ms in pulses]
    return ("B:" + ",".join(str(ms) for ms in scaled) + "\n").encode("ascii")


class SerialActuator:
    """Drives a buzzer/vibration microcontroller over a serial line."""

    def __init__(
        self,
        port: str | None = None,
        *,
        baudrate: int = 9600,
        timeout: float = 1.0,
        connection: Any | None = None,
        heartbeat_period: float = HEARTBEAT_PERIOD_SECONDS,
    ) -> None:
        if connection is None:
            if serial is None:
                raise RuntimeError("pyserial is required for the serial actuator.")
            if not port:
                raise ValueError("serial actuator requires a port name.")
            connection = serial.Serial(port=port, baudrate=baudrate, timeout=timeout)
            logger.info("Connected to haptic hardware on %s", port)
        self._connection = connection
        self._write_lock = threading.Lock()
        self._heartbeat_period = float(heartbeat_period)
        self._heartbeat_stop: threading.Event | None = None
        self._heartbeat_thread: threading.Thread | None = None

    def prepare(self) -> None:
        reset_input = getattr(self._connection, "reset_input_buffer", None)
        reset_output = getattr(self._connection, "reset_output_buffer", None)
        if reset_input is not None:
            reset_input()
        if reset_output is not None:
            reset_output()

    def play(self, emotion: SenseEmotion, intensity: float) -> None:
        pulses = PULSE_PATTERNS.get(emotion, PULSE_PATTERNS[SenseEmotion.NEUTRAL])
        self._write(encode_pattern(pulses, intensity))

    def start_loop(self) -> None:
        if self._heartbeat_thread is not None and self._heartbeat_thread.is_alive():
            return
        stop = threading.Event()
        thread = threading.Thread(target=self._heartbeat_worker, args=(stop,), daemon=True)
        self._heartbeat_stop = stop
        self._heartbeat_thread = thread
        thread.start()

    def stop_loop(self) -> None:
        stop, thread = self._heartbeat_stop, self._heartbeat_thread
        self._heartbeat_stop = None
        self._heartbeat_thread = None
        if stop is not None:
            stop.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._heartbeat_period + 1.0)

    def close(self) -> None:
        self.stop_loop()
        closer = getattr(self._connection, "close", None)
        if closer is not None:
            closer()

    def _heartbeat_worker(self, stop: threading.Event) -> None:
        payload = encode_pattern(HEARTBEAT_PATTERN)
        while not stop.is_set():
            try:
                self._write(payload)
            except Exception as exc:
                logger.warning("Heartbeat write failed, stopping loop: %s", exc)
                return
            stop.wait(self._heartbeat_period)

    def _write(self, payload: bytes) -> None:
        with self._write_lock:
            self._connection.write(payload)


__all__ = [
    "Actuator",
    "MockActuator",
    "NoOpActuator",
    "SerialActuator",
    "HEARTBEAT_PATTERN",
    "PULSE_PATTERNS",
    "encode_pattern",
]
