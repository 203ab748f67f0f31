"""
============================================================================
HOSTWATCH - BACKGROUND TASK SCHEDULER
============================================================================
A lightweight, asyncio-native scheduler that fires periodic jobs in the
same event loop as the check-in server — no cron daemon or broker needed.

Jobs are aligned to wall-clock multiples of their interval, the way a
cron entry such as ``*/3 * * * *`` would fire, and each run receives a
ScheduledEvent carrying its nominal time. A job that is still running
when its next slot comes round is not started twice.

Registered Jobs
---------------
sweep    (every SWEEP_INTERVAL seconds)
    Runs the SweepEvaluator over all hosts.
============================================================================
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from monitoring.sweep import ScheduledEvent
from utils.logger import get_logger


logger = get_logger("Scheduler")


# ============================================================================
# JOB DEFINITION
# ============================================================================

@dataclass
class ScheduledJob:
    """
    Describes a single periodic background job.

    Attributes
    ----------
    name : str
        Human-readable identifier (used in logs).
    interval_seconds : int
        How often the job runs.
    coroutine_factory : Callable
        Async callable taking the ScheduledEvent for this run.
    enabled : bool
        Can be toggled at runtime.
    next_run : float
        Epoch timestamp when the job should next execute.
    running : bool
        True while an execution is in flight.
    run_count / error_count : int
        Executions since startup.
    """
    name: str
    interval_seconds: int
    coroutine_factory: Callable[[ScheduledEvent], Awaitable[object]]
    enabled: bool = True
    last_run: Optional[float] = None
    next_run: float = 0.0
    running: bool = False
    run_count: int = 0
    error_count: int = 0


def next_aligned(now: float, interval: int) -> float:
    """First multiple of ``interval`` strictly after ``now``."""
    return (math.floor(now / interval) + 1) * interval


# ============================================================================
# SCHEDULER
# ============================================================================

class Scheduler:
    """
    Asyncio-based periodic job scheduler.

    Usage
    -----
        scheduler = Scheduler()
        scheduler.register_job("sweep", 180, sweep_evaluator.run)
        await scheduler.start()
        # ... later ...
        await scheduler.stop()
    """

    def __init__(self, tick_interval: float = 1.0, clock: Callable[[], float] = time.time):
        self._jobs: Dict[str, ScheduledJob] = {}
        self._running = False
        self._loop_task: Optional[asyncio.Task] = None
        self._tick_interval = tick_interval
        self._clock = clock
        self._in_flight: set = set()

    # ------------------------------------------------------------------
    # JOB REGISTRATION
    # ------------------------------------------------------------------

    def register_job(
        self,
        name: str,
        interval_seconds: int,
        coroutine_factory: Callable[[ScheduledEvent], Awaitable[object]],
        enabled: bool = True,
    ) -> ScheduledJob:
        """
        Register a new periodic job. Its first run is the next aligned slot.
        """
        if name in self._jobs:
            logger.warning(f"[Scheduler] Job '{name}' already registered, overwriting")

        job = ScheduledJob(
            name=name,
            interval_seconds=interval_seconds,
            coroutine_factory=coroutine_factory,
            enabled=enabled,
            next_run=next_aligned(self._clock(), interval_seconds),
        )
        self._jobs[name] = job
        logger.debug(f"[Scheduler] Registered job '{name}' (interval={interval_seconds}s)")
        return job

    def get_job(self, name: str) -> Optional[ScheduledJob]:
        return self._jobs.get(name)

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the scheduler loop."""
        if self._running:
            logger.warning("Scheduler is already running")
            return
        self._running = True
        self._loop_task = asyncio.create_task(self._main_loop())
        logger.info(f"✓ Scheduler started with {len(self._jobs)} job(s)")

    async def stop(self) -> None:
        """Stop the loop and wait for in-flight jobs to finish."""
        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.info("✓ Scheduler stopped")

    # ------------------------------------------------------------------
    # MAIN LOOP
    # ------------------------------------------------------------------

    def run_pending(self, now: Optional[float] = None) -> List[asyncio.Task]:
        """
        Launch every enabled job whose slot has arrived.

        Returns the tasks started on this tick.
        """
        now = self._clock() if now is None else now
        started = []
        for job in self._jobs.values():
            if not job.enabled or now < job.next_run:
                continue

            event = ScheduledEvent(scheduled_time=job.next_run, source="scheduler")
            job.next_run = next_aligned(now, job.interval_seconds)

            if job.running:
                logger.warning(
                    f"[Scheduler] Job '{job.name}' still running, skipping this slot"
                )
                continue

            task = asyncio.create_task(self._execute_job(job, event))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            started.append(task)
        return started

    async def _main_loop(self) -> None:
        """
        Wake up every _tick_interval seconds and launch due jobs.
        """
        logger.info("[Scheduler] Main loop started")
        while self._running:
            self.run_pending()
            try:
                await asyncio.sleep(self._tick_interval)
            except asyncio.CancelledError:
                break

        logger.info("[Scheduler] Main loop exited")

    # ------------------------------------------------------------------
    # JOB EXECUTION
    # ------------------------------------------------------------------

    async def _execute_job(self, job: ScheduledJob, event: ScheduledEvent) -> None:
        """
        Run a single job, capture timing and errors.
        """
        job.running = True
        start_time = time.monotonic()
        try:
            logger.debug(f"[Scheduler] Running job '{job.name}'…")
            await job.coroutine_factory(event)
            job.run_count += 1
            job.last_run = self._clock()
            logger.debug(
                f"[Scheduler] Job '{job.name}' completed in "
                f"{time.monotonic() - start_time:.2f}s (run #{job.run_count})"
            )
        except Exception as e:
            job.error_count += 1
            logger.opt(exception=e).error(
                f"[Scheduler] Job '{job.name}' failed after "
                f"{time.monotonic() - start_time:.2f}s: {e}"
            )
        finally:
            job.running = False

    # ------------------------------------------------------------------
    # DIAGNOSTICS
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, Dict[str, object]]:
        """Return a snapshot of every registered job."""
        return {
            name: {
                "enabled": job.enabled,
                "interval_seconds": job.interval_seconds,
                "next_run": job.next_run,
                "last_run": job.last_run,
                "running": job.running,
                "run_count": job.run_count,
                "error_count": job.error_count,
            }
            for name, job in self._jobs.items()
        }
