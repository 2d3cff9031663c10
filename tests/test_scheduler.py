from datetime import datetime

import pytest

from geimeribot.services.scheduler import MinuteScheduler, weekly_summary_due

SUNDAY_21 = datetime(2026, 10, 25, 21, 0)


def test_weekly_summary_due():
    assert weekly_summary_due(SUNDAY_21) is True
    assert weekly_summary_due(datetime(2026, 10, 25, 21, 1)) is False
    assert weekly_summary_due(datetime(2026, 10, 25, 20, 0)) is False
    assert weekly_summary_due(datetime(2026, 10, 24, 21, 0)) is False


@pytest.mark.asyncio
async def test_failing_task_does_not_stop_others():
    seen = []

    async def broken(now):
        raise RuntimeError("boom")

    async def working(now):
        seen.append(now)

    scheduler = MinuteScheduler()
    scheduler.add_task("broken", broken)
    scheduler.add_task("working", working)

    results = await scheduler.run_tick(SUNDAY_21)

    assert results == [False, True]
    assert seen == [SUNDAY_21]


@pytest.mark.asyncio
async def test_conditional_task_runs_only_when_due():
    runs = []

    async def summary(now):
        runs.append(now)

    scheduler = MinuteScheduler()
    scheduler.add_task("weekly_summary", summary, when=weekly_summary_due)

    assert await scheduler.run_tick(datetime(2026, 10, 25, 20, 59)) == []
    assert await scheduler.run_tick(SUNDAY_21) == [True]
    assert runs == [SUNDAY_21]


@pytest.mark.asyncio
async def test_tick_uses_clock_by_default(clock):
    runs = []

    async def task(now):
        runs.append(now)

    scheduler = MinuteScheduler(clock=clock)
    scheduler.add_task("task", task)
    await scheduler.run_tick()

    assert runs == [clock.now]
