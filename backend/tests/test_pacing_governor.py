"""
Tests for PacingGovernor delays and CancellationToken
"""
import asyncio
import random

import pytest

from application.services.jobs.cancellation import CancellationToken
from application.services.jobs.pacing_governor import PacingGovernor
from core.exceptions import OperationCancelledException


class TestPacingGovernor:

    def test_action_delay_within_range_without_hesitation(self):
        governor = PacingGovernor(min_action_ms=100, max_action_ms=200, hesitation_probability=0.0, rng=random.Random(1))
        delays = [governor.next_action_delay_ms() for _ in range(500)]
        assert all(100 <= d <= 200 for d in delays)

    def test_hesitation_always_adds_extra(self):
        governor = PacingGovernor(
            min_action_ms=100, max_action_ms=200,
            hesitation_probability=1.0, hesitation_min_ms=500, hesitation_max_ms=600,
            rng=random.Random(2),
        )
        delays = [governor.next_action_delay_ms() for _ in range(200)]
        assert all(600 <= d <= 800 for d in delays)

    def test_per_call_bounds_override_configured_range(self):
        governor = PacingGovernor(hesitation_probability=0.0, rng=random.Random(3))
        assert all(10 <= governor.next_action_delay_ms(10, 20) <= 20 for _ in range(100))

    def test_keystroke_delay_within_range(self):
        governor = PacingGovernor(keystroke_min_ms=30, keystroke_max_ms=100, rng=random.Random(4))
        assert all(30 <= governor.next_keystroke_delay_ms() <= 100 for _ in range(500))

    def test_action_delays_vary(self):
        governor = PacingGovernor(min_action_ms=100, max_action_ms=200, hesitation_probability=0.0, rng=random.Random(5))
        delays = [governor.next_action_delay_ms() for _ in range(50)]
        assert len(set(delays)) > 1

    def test_keystroke_delays_vary(self):
        governor = PacingGovernor(keystroke_min_ms=30, keystroke_max_ms=100, rng=random.Random(6))
        delays = [governor.next_keystroke_delay_ms() for _ in range(50)]
        assert len(set(delays)) > 1

    def test_seeded_sequences_are_reproducible(self):
        a = PacingGovernor(rng=random.Random(42))
        b = PacingGovernor(rng=random.Random(42))
        assert [a.next_action_delay_ms() for _ in range(20)] == [b.next_action_delay_ms() for _ in range(20)]

    @pytest.mark.parametrize("kwargs", [
        {"min_action_ms": 500, "max_action_ms": 100},
        {"hesitation_probability": 1.5},
        {"keystroke_min_ms": -1},
    ])
    def test_invalid_configuration_rejected(self, kwargs):
        with pytest.raises(ValueError):
            PacingGovernor(**kwargs)

    @pytest.mark.asyncio
    async def test_type_text_emits_every_character_in_order(self):
        governor = PacingGovernor(keystroke_min_ms=0, keystroke_max_ms=0)
        typed = []

        async def emit(char):
            typed.append(char)

        await governor.type_text("héllo 42", emit)
        assert "".join(typed) == "héllo 42"

    @pytest.mark.asyncio
    async def test_pause_returns_the_drawn_delay(self):
        governor = PacingGovernor(min_action_ms=0, max_action_ms=0, hesitation_probability=0.0)
        assert await governor.pause(label="unit") == 0
        assert not hasattr(governor, "events")

    @pytest.mark.asyncio
    async def test_pause_raises_when_cancelled(self):
        governor = PacingGovernor(min_action_ms=0, max_action_ms=0, hesitation_probability=0.0)
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledException):
            await governor.pause(token)


class TestCancellationToken:

    @pytest.mark.asyncio
    async def test_sleep_wakes_early_on_cancel(self):
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, token.cancel, "stop")

        started = loop.time()
        with pytest.raises(OperationCancelledException, match="stop"):
            await token.sleep(5)
        assert loop.time() - started < 1

    @pytest.mark.asyncio
    async def test_sleep_completes_when_not_cancelled(self):
        token = CancellationToken()
        await token.sleep(0.01)
        assert not token.is_cancelled

    def test_first_reason_wins(self):
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"
