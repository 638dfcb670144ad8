"""Tests for the polling controller, driven by a fake sleep."""

import asyncio

import pytest

from pipeline_console.runs.polling import PollingController


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Record requested delays and only yield to the loop."""

    async def _sleep(seconds):
        sleeps.append(seconds)
        await asyncio.sleep(0)

    return _sleep


class TestPollingController:
    """Tests for PollingController start/stop behaviour."""

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            PollingController(interval_ms=0)

    @pytest.mark.asyncio
    async def test_does_not_start_when_idle(self, fake_sleep):
        poller = PollingController(sleep=fake_sleep)

        assert poller.start(lambda: False, self._noop) is False
        assert poller.running is False

    @pytest.mark.asyncio
    async def test_ticks_until_predicate_goes_false(self, fake_sleep, sleeps):
        poller = PollingController(interval_ms=3000, sleep=fake_sleep)
        ticks = []

        async def on_tick():
            ticks.append(len(ticks) + 1)

        assert poller.start(lambda: len(ticks) < 3, on_tick) is True
        await poller.wait()

        assert ticks == [1, 2, 3]
        assert sleeps == [3.0, 3.0, 3.0]
        assert poller.tick_count == 3
        assert poller.running is False

    @pytest.mark.asyncio
    async def test_start_while_running_never_schedules_twice(self, fake_sleep):
        poller = PollingController(sleep=fake_sleep)
        ticks = []

        async def on_tick():
            ticks.append(1)
            # re-entrant start from inside a tick
            poller.start(lambda: len(ticks) < 2, on_tick)

        poller.start(lambda: True, on_tick)
        task = poller._task

        assert poller.start(lambda: len(ticks) < 2, on_tick) is True
        assert poller._task is task

        await poller.wait()

        assert len(ticks) == 2

    @pytest.mark.asyncio
    async def test_failing_tick_keeps_polling(self, fake_sleep, log_records):
        poller = PollingController(sleep=fake_sleep)
        calls = []

        async def on_tick():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("fetch failed")

        poller.start(lambda: len(calls) < 2, on_tick)
        await poller.wait()

        assert len(calls) == 2
        assert any(
            record["level"].name == "WARNING" and record["message"] == "Poll tick failed, retrying on next interval"
            for record in log_records
        )

    @pytest.mark.asyncio
    async def test_stop_cancels_immediately(self, fake_sleep):
        poller = PollingController(sleep=fake_sleep)

        poller.start(lambda: True, self._noop)
        for _ in range(5):
            await asyncio.sleep(0)
        poller.stop()
        ticks_at_stop = poller.tick_count

        for _ in range(5):
            await asyncio.sleep(0)

        assert poller.running is False
        assert poller.tick_count == ticks_at_stop

    @pytest.mark.asyncio
    async def test_stop_when_not_running_is_noop(self):
        poller = PollingController()
        poller.stop()
        await poller.aclose()

        assert poller.running is False

    @pytest.mark.asyncio
    async def test_aclose_waits_for_loop(self, fake_sleep):
        poller = PollingController(sleep=fake_sleep)
        poller.start(lambda: True, self._noop)

        await poller.aclose()

        assert poller.running is False
        assert poller._task is None

    @pytest.mark.asyncio
    async def test_can_restart_after_finishing(self, fake_sleep):
        poller = PollingController(sleep=fake_sleep)
        ticks = []

        async def on_tick():
            ticks.append(1)

        poller.start(lambda: False if ticks else True, on_tick)
        await poller.wait()
        assert len(ticks) == 1

        assert poller.start(lambda: len(ticks) < 2, on_tick) is True
        await poller.wait()
        assert len(ticks) == 2

    @staticmethod
    async def _noop():
        return None
