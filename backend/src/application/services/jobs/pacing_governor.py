"""
Pacing Governor
Randomized delays that make browser interactions read like a person:
- Action delays drawn from a configurable range
- Occasional hesitation added on top
- Independent per-keystroke delays while typing
"""
import random
import time
from typing import Awaitable, Callable, Optional

from loguru import logger

from core.config import settings
from .cancellation import CancellationToken, pause


class PacingGovernor:
    """
    Randomized-delay policy.

    Action delays are uniform in [min_action_ms, max_action_ms]; with
    probability `hesitation_probability` an extra draw from the hesitation
    range is added. Keystroke delays are uniform in the keystroke range.
    Inject a seeded `random.Random` for reproducible sequences.
    """

    def __init__(
        self,
        min_action_ms: int = 1500,
        max_action_ms: int = 4000,
        hesitation_probability: float = 0.15,
        hesitation_min_ms: int = 500,
        hesitation_max_ms: int = 1500,
        keystroke_min_ms: int = 30,
        keystroke_max_ms: int = 100,
        rng: Optional[random.Random] = None,
    ):
        if min_action_ms < 0 or min_action_ms > max_action_ms:
            raise ValueError("action delay range must satisfy 0 <= min <= max")
        if hesitation_min_ms < 0 or hesitation_min_ms > hesitation_max_ms:
            raise ValueError("hesitation range must satisfy 0 <= min <= max")
        if keystroke_min_ms < 0 or keystroke_min_ms > keystroke_max_ms:
            raise ValueError("keystroke range must satisfy 0 <= min <= max")
        if not 0.0 <= hesitation_probability <= 1.0:
            raise ValueError("hesitation probability must be between 0 and 1")

        self.min_action_ms = min_action_ms
        self.max_action_ms = max_action_ms
        self.hesitation_probability = hesitation_probability
        self.hesitation_min_ms = hesitation_min_ms
        self.hesitation_max_ms = hesitation_max_ms
        self.keystroke_min_ms = keystroke_min_ms
        self.keystroke_max_ms = keystroke_max_ms
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, rng: Optional[random.Random] = None) -> "PacingGovernor":
        return cls(
            min_action_ms=settings.MIN_ACTION_DELAY_MS,
            max_action_ms=settings.MAX_ACTION_DELAY_MS,
            hesitation_probability=settings.HESITATION_PROBABILITY,
            hesitation_min_ms=settings.HESITATION_MIN_MS,
            hesitation_max_ms=settings.HESITATION_MAX_MS,
            keystroke_min_ms=settings.KEYSTROKE_DELAY_MIN_MS,
            keystroke_max_ms=settings.KEYSTROKE_DELAY_MAX_MS,
            rng=rng,
        )

    def next_action_delay_ms(self, min_ms: Optional[int] = None, max_ms: Optional[int] = None) -> int:
        """Draw one action delay; per-call bounds override the configured range."""
        low = self.min_action_ms if min_ms is None else min_ms
        high = self.max_action_ms if max_ms is None else max_ms
        if low > high:
            low, high = high, low

        delay = self._rng.randint(low, high)
        if self._rng.random() < self.hesitation_probability:
            delay += self._rng.randint(self.hesitation_min_ms, self.hesitation_max_ms)
        return delay

    def next_keystroke_delay_ms(self) -> int:
        return self._rng.randint(self.keystroke_min_ms, self.keystroke_max_ms)

    async def pause(
        self,
        cancel: Optional[CancellationToken] = None,
        min_ms: Optional[int] = None,
        max_ms: Optional[int] = None,
        label: str = "action",
    ) -> int:
        """Sleep one drawn action delay. Raises if cancelled while waiting."""
        delay = self.next_action_delay_ms(min_ms, max_ms)
        logger.debug(f"[PACE] {label}: {delay}ms")
        await pause(delay / 1000.0, cancel)
        return delay

    async def type_text(
        self,
        text: str,
        emit_char: Callable[[str], Awaitable[None]],
        cancel: Optional[CancellationToken] = None,
    ) -> int:
        """
        Emit `text` one character at a time with an independent delay after each.

        Returns elapsed wall time in milliseconds.
        """
        start = time.monotonic()
        for char in text:
            if cancel is not None:
                cancel.raise_if_cancelled()
            await emit_char(char)
            await pause(self.next_keystroke_delay_ms() / 1000.0, cancel)
        return int((time.monotonic() - start) * 1000)
