"""Minute tick running the periodic tasks"""
import asyncio
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional, Tuple

from ..utils.logger import setup_logger
from ..utils.timezone import now_utc

logger = setup_logger(__name__)

Task = Callable[[datetime], Awaitable[object]]
Condition = Callable[[datetime], bool]


def weekly_summary_due(now: datetime) -> bool:
    """Sunday 21:00 UTC"""
    return now.weekday() == 6 and now.hour == 21 and now.minute == 0


class MinuteScheduler:
    """Runs a set of independent tasks once per minute"""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._tasks: List[Tuple[str, Task, Optional[Condition]]] = []
        self._clock = clock or now_utc
        self.running = False

    def add_task(self, name: str, task: Task, when: Optional[Condition] = None):
        """
        Register a task

        Args:
            name: Name used in log messages
            task: Coroutine function called with the tick time
            when: Optional predicate; the task only runs on ticks where it is true
        """
        self._tasks.append((name, task, when))

    async def _run_task(self, name: str, task: Task, now: datetime) -> bool:
        try:
            await task(now)
            return True
        except Exception as e:
            logger.error(f"Error in scheduled task {name}: {e}", exc_info=True)
            return False

    async def run_tick(self, now: Optional[datetime] = None) -> List[bool]:
        """
        Run every due task concurrently

        A failing task is logged and does not affect the others.

        Returns:
            Success flag per task that ran
        """
        now = now or self._clock()
        due = [(name, task) for name, task, when in self._tasks if when is None or when(now)]
        logger.debug(f"Tick {now.isoformat()}: running {', '.join(name for name, _ in due)}")
        return await asyncio.gather(*(self._run_task(name, task, now) for name, task in due))

    async def start(self):
        """Tick at the start of every minute until stopped"""
        self.running = True
        logger.info(f"Starting scheduler with {len(self._tasks)} task(s)")

        while self.running:
            now = self._clock()
            next_minute = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
            await asyncio.sleep((next_minute - now).total_seconds())
            if self.running:
                await self.run_tick(next_minute)

    def stop(self):
        """Stop the tick loop"""
        self.running = False
        logger.info("Stopping scheduler")
