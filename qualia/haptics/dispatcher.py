"""Turns classification results into actuator calls and owns the heartbeat state."""

from __future__ import annotations

import asyncio
import functools
import itertools
import logging
from typing import Callable

from qualia.config import QualiaConfiguration
from qualia.emotion import SenseEmotion
from qualia.haptics.actuators import Actuator

logger = logging.getLogger("qualia.dispatcher")


class FeedbackDispatcher:
    """Plays feedback for emotion categories and manages the heartbeat loop.

    Heartbeat state follows the dispatched category whenever the
    configuration enables it, whether or not the one-shot pulse is played.
    Transitions are decided under a single asyncio lock, and updates
    carrying a ticket older than the newest applied one are ignored so a slow
    earlier classification cannot undo a newer one.

    Actuator calls run in worker threads so a blocking device never stalls
    the event loop. Loop start/stop commands are chained so they reach the
    actuator in the order their transitions were decided, without holding
    the lock during device I/O.

    Delayed pulses are fire-and-forget: a newer dispatch does not cancel an
    older pending pulse. ``aclose`` cancels whatever is still pending.
    """

    def __init__(self, actuator: Actuator) -> None:
        self.actuator = actuator
        self._heartbeat_active = False
        self._last_ticket = 0
        self._tickets = itertools.count(1)
        self._lock = asyncio.Lock()
        self._loop_turn: asyncio.Future[None] | None = None
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def heartbeat_active(self) -> bool:
        return self._heartbeat_active

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def next_ticket(self) -> int:
        """Reserve an ordering ticket before starting a classification."""
        return next(self._tickets)

    async def dispatch_if_configured(
        self,
        emotion: SenseEmotion,
        config: QualiaConfiguration,
        *,
        ticket: int | None = None,
    ) -> None:
        if config.auto_play_haptics:
            await self._schedule_play(emotion, config)
        await self._update_heartbeat(emotion, config, ticket)

    async def dispatch_explicit(
        self,
        emotion: SenseEmotion,
        config: QualiaConfiguration,
        *,
        ticket: int | None = None,
    ) -> None:
        await self._schedule_play(emotion, config)
        await self._update_heartbeat(emotion, config, ticket)

    async def aclose(self) -> None:
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._pending.clear()
        async with self._lock:
            if not self._heartbeat_active:
                previous = self._loop_turn
                turn = None
            else:
                self._heartbeat_active = False
                previous, turn = self._take_loop_turn()
        if turn is not None:
            await self._run_loop_command(previous, turn, "stop_loop", self.actuator.stop_loop)
        elif previous is not None and not previous.done():
            await asyncio.wait({previous})

    async def _schedule_play(self, emotion: SenseEmotion, config: QualiaConfiguration) -> None:
        intensity = config.intensity
        if config.delay_seconds > 0:
            task = asyncio.create_task(self._delayed_play(emotion, intensity, config.delay_seconds))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            await self._play(emotion, intensity)

    async def _delayed_play(self, emotion: SenseEmotion, intensity: float, delay: float) -> None:
        await asyncio.sleep(delay)
        await self._play(emotion, intensity)

    async def _play(self, emotion: SenseEmotion, intensity: float) -> None:
        await self._call("play", functools.partial(self.actuator.play, emotion, intensity))

    async def _update_heartbeat(
        self,
        emotion: SenseEmotion,
        config: QualiaConfiguration,
        ticket: int | None,
    ) -> None:
        if not config.enable_heartbeat:
            return
        async with self._lock:
            if ticket is not None:
                if ticket < self._last_ticket:
                    logger.debug("Skipping stale heartbeat update (ticket %s < %s)", ticket, self._last_ticket)
                    return
                self._last_ticket = ticket
            should_play = emotion is SenseEmotion.INTENSE
            if should_play == self._heartbeat_active:
                return
            self._heartbeat_active = should_play
            previous, turn = self._take_loop_turn()
        if should_play:
            await self._run_loop_command(previous, turn, "start_loop", self.actuator.start_loop)
        else:
            await self._run_loop_command(previous, turn, "stop_loop", self.actuator.stop_loop)

    def _take_loop_turn(self) -> tuple[asyncio.Future[None] | None, asyncio.Future[None]]:
        # Caller holds the lock.
        previous = self._loop_turn
        turn: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._loop_turn = turn
        return previous, turn

    async def _run_loop_command(
        self,
        previous: asyncio.Future[None] | None,
        turn: asyncio.Future[None],
        label: str,
        action: Callable[[], None],
    ) -> None:
        try:
            if previous is not None and not previous.done():
                await asyncio.wait({previous})
            await self._call(label, action)
        finally:
            if not turn.done():
                turn.set_result(None)

    @staticmethod
    async def _call(label: str, action: Callable[[], None]) -> None:
        try:
            await asyncio.to_thread(action)
        except Exception as exc:
            logger.warning("Actuator %s failed: %s", label, exc)


__all__ = ["FeedbackDispatcher"]
