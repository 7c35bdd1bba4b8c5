"""Tests for the cancellable poll task."""

import asyncio

from brewvote.client.polling import PollTask


def test_poll_task_ticks_until_stopped() -> None:
    async def run() -> int:
        ticks = 0

        async def tick() -> None:
            nonlocal ticks
            ticks += 1

        poll = PollTask("test", tick, interval_seconds=0.01)
        poll.start()
        await asyncio.sleep(0.05)
        await poll.stop()
        stopped_at = ticks
        await asyncio.sleep(0.03)
        assert ticks == stopped_at
        assert not poll.is_running
        return ticks

    assert asyncio.run(run()) >= 2


def test_failing_tick_does_not_stop_loop() -> None:
    async def run() -> list[str]:
        calls: list[str] = []

        async def tick() -> None:
            calls.append("tick")
            if len(calls) == 1:
                raise RuntimeError("boom")

        poll = PollTask("flaky", tick, interval_seconds=0.01)
        poll.start()
        await asyncio.sleep(0.05)
        await poll.stop()
        return calls

    assert len(asyncio.run(run())) >= 2


def test_ticks_do_not_overlap() -> None:
    async def run() -> int:
        in_flight = 0
        peak = 0

        async def tick() -> None:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.02)
            in_flight -= 1

        poll = PollTask("slow", tick, interval_seconds=0.001)
        poll.start()
        await asyncio.sleep(0.08)
        await poll.stop()
        return peak

    assert asyncio.run(run()) == 1


def test_start_twice_keeps_single_task() -> None:
    async def run() -> None:
        async def tick() -> None:
            return None

        poll = PollTask("twice", tick, interval_seconds=0.01)
        poll.start()
        first = poll._task
        poll.start()
        assert poll._task is first
        await poll.stop()

    asyncio.run(run())
