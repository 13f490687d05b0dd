"""
Unit Tests for the shared elapsed-time ticker
"""
import asyncio
import pytest

from strokecode.core.workflow import SharedTicker


class TestSharedTicker:

    async def test_single_task_for_many_subscribers(self):
        ticker = SharedTicker(interval_seconds=0.01)
        calls = []
        ticker.subscribe(lambda: calls.append("a"))
        ticker.subscribe(lambda: calls.append("b"))
        try:
            await asyncio.sleep(0.055)
            assert ticker.running
            assert calls.count("a") == calls.count("b") == ticker.ticks
            assert ticker.ticks >= 2
        finally:
            ticker.close()

    async def test_cancelled_when_last_subscriber_leaves(self):
        ticker = SharedTicker(interval_seconds=0.01)
        first = ticker.subscribe(lambda: None)
        second = ticker.subscribe(lambda: None)
        first()
        assert ticker.running
        second()
        await asyncio.sleep(0)
        assert not ticker.running
        assert ticker.subscriber_count == 0

    async def test_failing_subscriber_does_not_stop_others(self):
        ticker = SharedTicker(interval_seconds=60)
        calls = []

        def boom():
            raise ValueError("view gone")

        ticker.subscribe(boom)
        ticker.subscribe(lambda: calls.append(1))
        ticker.fire()
        ticker.close()
        assert calls == [1]

    def test_without_event_loop_fire_is_manual(self):
        ticker = SharedTicker(interval_seconds=0.01)
        calls = []
        ticker.subscribe(lambda: calls.append(1))
        assert not ticker.running
        ticker.fire()
        assert calls == [1]
        ticker.close()


class TestLiveElapsed:

    def test_watch_elapsed_reads_clock_each_tick(self, service, scenario_a_onset, clock):
        service.complete_onset(scenario_a_onset)
        seen = []
        unsubscribe = service.watch_elapsed(seen.append)

        service.ticker.fire()
        clock.advance(seconds=30)
        service.ticker.fire()
        unsubscribe()

        assert seen[0] == pytest.approx(3.0)
        assert seen[1] == pytest.approx(3.0 + 30 / 3600)
        assert service.ticker.subscriber_count == 0
