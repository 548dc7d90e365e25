"""Debounced classification for live text input."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from qualia.client import QualiaClient
from qualia.emotion import EmotionResult

logger = logging.getLogger("qualia.debounce")

DEFAULT_DEBOUNCE_SECONDS = 0.3

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Runs a callback only after input has been quiet for ``interval`` seconds.

    Every submission cancels the pending timer and bumps a generation
    counter; a timer that wakes up with a stale generation returns without
    calling back, even if its cancellation raced with the wake-up.
    """

    def __init__(self, callback: Callable[[T], Awaitable[Any]], interval: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self._callback = callback
        self.interval = float(interval)
        self._generation = 0
        self._task: asyncio.Task[Any] | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, value: T) -> asyncio.Task[Any]:
        self.cancel()
        self._generation += 1
        self._task = asyncio.create_task(self._fire(self._generation, value))
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _fire(self, generation: int, value: T) -> Any:
        await asyncio.sleep(self.interval)
        if generation != self._generation:
            return None
        return await self._callback(value)


class FeedbackBinding:
    """Feeds text-field changes into ``analyze_and_feel`` through a debouncer."""

    def __init__(self, client: QualiaClient, interval: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self.client = client
        self.last_value = ""
        self.last_result: EmotionResult | None = None
        self._debouncer: Debouncer[str] = Debouncer(self._analyze, interval)

    @property
    def debouncer(self) -> Debouncer[str]:
        return self._debouncer

    def on_text_changed(self, text: str) -> asyncio.Task[Any] | None:
        if text == self.last_value:
            return None
        self.last_value = text
        return self._debouncer.submit(text)

    async def _analyze(self, text: str) -> EmotionResult:
        result = await self.client.analyze_and_feel(text)
        self.last_result = result
        logger.debug("debounced analysis %r -> %s", text, result.emotion.value)
        return result

    def cancel(self) -> None:
        self._debouncer.cancel()


__all__ = ["Debouncer", "FeedbackBinding", "DEFAULT_DEBOUNCE_SECONDS"]
