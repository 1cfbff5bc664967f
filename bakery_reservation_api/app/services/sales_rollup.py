"""
Daily rollup of completed reservation sales.

``DailySalesRollup.run`` aggregates the reservations completed on one
day (pickup between 00:00:00 and 23:59:59) and stores the count and
revenue through ``SalesService``.  A day without completed
reservations raises ``EmptyAggregateError`` unless
``settings.sales_rollup_skip_empty`` is set, in which case the day is
skipped and nothing is stored.

``SalesRollupScheduler`` fires the rollup on configured weekdays at a
configured wall-clock time.  It is created and started by
``create_app`` and runs as a background task on the application's event
loop.  Each firing runs once; failures are logged and the scheduler
waits for the next firing.
"""

import asyncio
import logging
from datetime import date, datetime, time, timedelta
from typing import Awaitable, Callable, FrozenSet, Optional

from bakery_reservation_api.app.core.config import Settings, settings
from bakery_reservation_api.app.core.exceptions import EmptyAggregateError
from bakery_reservation_api.app.schemas.reservation import ReservationSale, ReservationStatus
from bakery_reservation_api.app.services.reservation_service import ReservationService, day_bounds
from bakery_reservation_api.app.services.sales_service import SalesService


logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")


class DailySalesRollup:
    """Aggregates one day of completed reservations into a sales record."""

    @classmethod
    async def run(
        cls,
        today: Optional[date] = None,
        skip_empty: Optional[bool] = None,
    ) -> Optional[ReservationSale]:
        """Roll up ``today`` (defaults to the current date).

        Returns the stored aggregate, or ``None`` when the day was empty
        and empty days are skipped.
        """
        day = today or date.today()
        if skip_empty is None:
            skip_empty = settings.sales_rollup_skip_empty
        start, end = day_bounds(day)
        sale = await ReservationService.get_reservation_sale(start, end, ReservationStatus.COMPLETE)
        if sale is None:
            if skip_empty:
                logger.info("No completed reservations on %s, nothing to roll up", day)
                return None
            raise EmptyAggregateError(f"No completed reservations on {day}")
        await SalesService.save_reservation_sale(sale)
        return sale


def parse_run_time(value: str) -> time:
    """Parse an ``HH:MM`` wall-clock time."""
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except ValueError as e:
        raise ValueError(f"Invalid rollup time {value!r}, expected HH:MM") from e


def parse_weekdays(value: str) -> FrozenSet[int]:
    """Parse weekday settings like ``MON-FRI``, ``MON,WED,FRI`` or ``*``.

    Returns ``datetime.weekday()`` numbers (Monday is 0).
    """
    text = value.strip().upper()
    if text == "*":
        return frozenset(range(7))
    days: set[int] = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        first, _, last = part.partition("-")
        if first not in WEEKDAY_NAMES or (last and last not in WEEKDAY_NAMES):
            raise ValueError(f"Invalid rollup weekday {part!r}")
        start = WEEKDAY_NAMES.index(first)
        stop = WEEKDAY_NAMES.index(last) if last else start
        if stop < start:
            raise ValueError(f"Invalid rollup weekday range {part!r}")
        days.update(range(start, stop + 1))
    if not days:
        raise ValueError("At least one rollup weekday is required")
    return frozenset(days)


def next_run_after(now: datetime, run_at: time, weekdays: FrozenSet[int]) -> datetime:
    """First moment strictly after ``now`` at ``run_at`` on one of ``weekdays``."""
    candidate = datetime.combine(now.date(), run_at)
    if candidate <= now:
        candidate += timedelta(days=1)
    while candidate.weekday() not in weekdays:
        candidate += timedelta(days=1)
    return candidate


class SalesRollupScheduler:
    """Runs a coroutine job at a fixed time on selected weekdays."""

    def __init__(
        self,
        job: Callable[[], Awaitable[object]],
        run_at: time,
        weekdays: FrozenSet[int],
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.job = job
        self.run_at = run_at
        self.weekdays = weekdays
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, config: Settings) -> "SalesRollupScheduler":
        return cls(
            job=DailySalesRollup.run,
            run_at=parse_run_time(config.sales_rollup_time),
            weekdays=parse_weekdays(config.sales_rollup_days),
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_run(self) -> datetime:
        return next_run_after(self.clock(), self.run_at, self.weekdays)

    def start(self) -> None:
        """Start the background task.  Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="sales-rollup-scheduler")
        logger.info(
            "Sales rollup scheduled at %s on %s",
            self.run_at.strftime("%H:%M"),
            ",".join(WEEKDAY_NAMES[day] for day in sorted(self.weekdays)),
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> None:
        """Fire the job once, logging instead of propagating its failure."""
        try:
            await self.job()
        except Exception:
            logger.exception("Daily sales rollup failed")

    async def _loop(self) -> None:
        last_run: Optional[datetime] = None
        while True:
            now = self.clock()
            # sleep() may wake marginally early; never fire the same slot twice
            if last_run is not None and now < last_run:
                now = last_run
            next_run = next_run_after(now, self.run_at, self.weekdays)
            logger.debug("Next sales rollup at %s", next_run.isoformat())
            await asyncio.sleep(max((next_run - self.clock()).total_seconds(), 0))
            await self.run_once()
            last_run = next_run
