"""Background Task Scheduler.

Runs named recurring tasks on their own intervals with retry accounting,
bounded run history and active/paused/error status tracking.

Each task gets one timer coroutine, and a task with a run in flight skips
further ticks, so runs of the same task never overlap. Stopping is soft:
timers stop ticking, in-flight handlers are allowed to finish.
"""

import asyncio
import inspect
import logging
import re
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Awaitable, Callable, Deque, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100
DEFAULT_INTERVAL = 60 * 60

# Cron-like patterns known to the scheduler, in seconds
SCHEDULE_TABLE = {
    '*/1 * * * *': 60,
    '*/5 * * * *': 5 * 60,
    '*/15 * * * *': 15 * 60,
    '*/30 * * * *': 30 * 60,
    '0 * * * *': 60 * 60,
    '0 */6 * * *': 6 * 60 * 60,
    '0 0 * * *': 24 * 60 * 60,
}

EVERY_N_MINUTES = re.compile(r'^\*/(\d+) \* \* \* \*$')
EVERY_N_HOURS = re.compile(r'^0 \*/(\d+) \* \* \*$')
DAILY_AT = re.compile(r'^(\d{1,2}) (\d{1,2}) \* \* \*$')


class InvalidScheduleError(ValueError):
    """Raised for schedule strings the scheduler cannot interpret."""
    pass


class UnknownTaskError(KeyError):
    """Raised when a task id is not registered."""
    pass


class DuplicateTaskError(ValueError):
    """Raised when a task id is registered twice."""
    pass


class TaskStatus(Enum):
    ACTIVE = 'active'
    PAUSED = 'paused'
    ERROR = 'error'


@dataclass
class ScheduledTask:
    """A named recurring unit of work."""
    id: str
    name: str
    schedule: str
    max_retries: int = 3
    status: TaskStatus = TaskStatus.ACTIVE
    error_count: int = 0
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None


@dataclass
class TaskRunResult:
    """Outcome of one task execution."""
    success: bool
    message: str = ''
    duration: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


HandlerResult = Union[TaskRunResult, bool, None]
TaskHandler = Callable[[], Union[HandlerResult, Awaitable[HandlerResult]]]


def parse_schedule(schedule: str, strict: bool = False) -> int:
    """Resolve a schedule string to an interval in seconds.

    Supports the known lookup table plus ``*/N * * * *`` (every N minutes),
    ``0 */N * * *`` (every N hours) and ``M H * * *`` (daily). Anything
    else falls back to one hour, or raises when strict.

    Args:
        schedule: Cron-like schedule string
        strict: Raise InvalidScheduleError instead of falling back

    Returns:
        Interval in seconds
    """
    schedule = (schedule or '').strip()

    if schedule in SCHEDULE_TABLE:
        return SCHEDULE_TABLE[schedule]

    match = EVERY_N_MINUTES.match(schedule)
    if match and int(match.group(1)) > 0:
        return int(match.group(1)) * 60

    match = EVERY_N_HOURS.match(schedule)
    if match and int(match.group(1)) > 0:
        return int(match.group(1)) * 60 * 60

    match = DAILY_AT.match(schedule)
    if match and int(match.group(1)) < 60 and int(match.group(2)) < 24:
        return 24 * 60 * 60

    if strict:
        raise InvalidScheduleError(f"Unrecognized schedule: {schedule!r}")

    logger.warning("Unrecognized schedule %r, defaulting to hourly", schedule)
    return DEFAULT_INTERVAL


class TaskScheduler:
    """Register and run recurring tasks."""

    def __init__(self, strict_schedules: bool = False, clock: Callable[[], datetime] = None):
        """Initialize the scheduler.

        Args:
            strict_schedules: Reject unknown schedule strings at registration
            clock: Returns the current time for task timestamps
        """
        self.strict_schedules = strict_schedules
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self._tasks: Dict[str, ScheduledTask] = {}
        self._handlers: Dict[str, TaskHandler] = {}
        self._intervals: Dict[str, int] = {}
        self._history: Dict[str, Deque[TaskRunResult]] = {}
        self._timers: Dict[str, asyncio.Task] = {}
        self._stop_events: Dict[str, asyncio.Event] = {}
        self._running: Dict[str, asyncio.Event] = {}
        self._started = False

    def add_task(self, task: ScheduledTask, handler: TaskHandler):
        """Register a task and arm its timer.

        The timer is armed immediately when called inside a running event
        loop, otherwise on start().

        Args:
            task: Task definition
            handler: Callable run on every tick

        Raises:
            DuplicateTaskError: If a task with the same id exists
        """
        if task.id in self._tasks:
            raise DuplicateTaskError(f"Task already registered: {task.id}")

        interval = parse_schedule(task.schedule, strict=self.strict_schedules)

        if task.next_run is None:
            task.next_run = self.clock() + timedelta(seconds=interval)

        self._tasks[task.id] = task
        self._handlers[task.id] = handler
        self._intervals[task.id] = interval
        self._history[task.id] = deque(maxlen=HISTORY_LIMIT)

        logger.info("Registered task %s (%s, every %ss)", task.id, task.name, interval)

        if self._started or self._has_running_loop():
            self._started = True
            self._arm(task.id)

    @staticmethod
    def _has_running_loop() -> bool:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return True

    def _get(self, task_id: str) -> ScheduledTask:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise UnknownTaskError(task_id) from None

    def get_task(self, task_id: str) -> ScheduledTask:
        return self._get(task_id)

    def get_tasks(self) -> List[ScheduledTask]:
        return list(self._tasks.values())

    def get_task_history(self, task_id: str) -> List[TaskRunResult]:
        return list(self._history.get(task_id, []))

    def get_interval(self, task_id: str) -> int:
        return self._intervals[task_id]

    def start(self):
        """Arm timers for every active task. Must run inside an event loop."""
        self._started = True
        for task_id, task in self._tasks.items():
            if task.status != TaskStatus.PAUSED:
                self._arm(task_id)

    def _arm(self, task_id: str):
        if task_id in self._stop_events:
            return

        stop_event = asyncio.Event()
        self._stop_events[task_id] = stop_event
        self._timers[task_id] = asyncio.ensure_future(self._run_timer(task_id, stop_event))

    def _disarm(self, task_id: str):
        stop_event = self._stop_events.pop(task_id, None)
        if stop_event is not None:
            stop_event.set()

    async def _run_timer(self, task_id: str, stop_event: asyncio.Event):
        interval = self._intervals[task_id]

        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                await self._execute(task_id)

    async def run_task_now(self, task_id: str) -> Optional[TaskRunResult]:
        """Run one execution cycle for a task.

        Waits for a run already in flight to finish first.

        Returns:
            The recorded TaskRunResult, or None when the task is not active
        """
        self._get(task_id)
        while task_id in self._running:
            await self._running[task_id].wait()
        return await self._execute(task_id)

    async def _execute(self, task_id: str) -> Optional[TaskRunResult]:
        task = self._tasks.get(task_id)
        if task is None or task.status != TaskStatus.ACTIVE:
            return None

        if task_id in self._running:
            logger.info("Task %s still running, skipping tick", task.name)
            return None

        done = asyncio.Event()
        self._running[task_id] = done
        try:
            return await self._run_handler(task)
        finally:
            del self._running[task_id]
            done.set()

    async def _run_handler(self, task: ScheduledTask) -> TaskRunResult:
        handler = self._handlers[task.id]
        start = time.monotonic()

        try:
            outcome = handler()
            if inspect.isawaitable(outcome):
                outcome = await outcome
            success, message = self._interpret(outcome)
        except Exception as e:
            logger.exception("Task %s failed", task.name)
            success, message = False, str(e) or e.__class__.__name__

        now = self.clock()
        result = TaskRunResult(
            success=success,
            message=message,
            duration=time.monotonic() - start,
            timestamp=now
        )

        task.last_run = now
        task.next_run = now + timedelta(seconds=self._intervals[task.id])

        if success:
            task.error_count = 0
        else:
            task.error_count += 1
            # A task paused mid-run keeps its paused state
            if task.error_count >= task.max_retries and task.status == TaskStatus.ACTIVE:
                task.status = TaskStatus.ERROR
                logger.error("Task %s entered error state after %d failures", task.name, task.error_count)

        self._history[task.id].append(result)

        if success:
            logger.info("Task %s completed: %s", task.name, message)
        else:
            logger.warning("Task %s unsuccessful (%d/%d): %s",
                           task.name, task.error_count, task.max_retries, message)

        return result

    @staticmethod
    def _interpret(outcome: HandlerResult):
        if outcome is None:
            return True, 'ok'
        if isinstance(outcome, TaskRunResult):
            return outcome.success, outcome.message
        return bool(outcome), 'ok' if outcome else 'failed'

    def toggle_task(self, task_id: str):
        """Pause an active task or resume a paused one.

        Tasks in the error state are left untouched; use reset_task.
        """
        task = self._get(task_id)

        if task.status == TaskStatus.ACTIVE:
            task.status = TaskStatus.PAUSED
            self._disarm(task_id)
            logger.info("Task %s paused", task.name)
        elif task.status == TaskStatus.PAUSED:
            task.status = TaskStatus.ACTIVE
            task.next_run = self.clock() + timedelta(seconds=self._intervals[task_id])
            if self._started:
                self._arm(task_id)
            logger.info("Task %s resumed", task.name)

    def reset_task(self, task_id: str):
        """Return a task in the error state to active with a cleared count."""
        task = self._get(task_id)
        if task.status != TaskStatus.ERROR:
            return

        task.status = TaskStatus.ACTIVE
        task.error_count = 0
        if self._started:
            self._arm(task_id)
        logger.info("Task %s reset", task.name)

    def stop_all(self):
        """Stop every timer. Running handlers finish on their own."""
        for task_id in list(self._stop_events):
            self._stop_events[task_id].set()
        self._stop_events.clear()
        self._started = False
        logger.info("Scheduler stopped")

    async def wait_stopped(self):
        """Wait for timers (and any handler they are running) to finish."""
        timers = list(self._timers.values())
        self._timers.clear()
        if timers:
            await asyncio.gather(*timers, return_exceptions=True)
