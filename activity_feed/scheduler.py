"""Timer-driven regeneration of the served feed."""

import threading
import time
from datetime import UTC, datetime
from enum import Enum

from .aggregator import aggregate
from .config import FeedConfig, ScheduleConfig
from .feed import build
from .logging_config import create_execution_logger, new_execution_id
from .snapshot import ServedSnapshot, SnapshotStore
from .sources.base import SourceFetcher


class SchedulerState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"


class FeedScheduler:
    """Runs fetch-all, render, build, publish cycles on a fixed interval.

    The first cycle starts immediately. Later cycles start ``interval``
    seconds after the previous cycle *started*. Cycles run one at a time on
    a single background thread, so a cycle that overruns the interval is
    followed immediately by the next one; missed ticks are not queued.
    """

    def __init__(
        self,
        fetchers: list[SourceFetcher],
        store: SnapshotStore,
        feed_config: FeedConfig | None = None,
        schedule_config: ScheduleConfig | None = None,
        clock=None,
    ):
        self.fetchers = fetchers
        self.store = store
        self.feed_config = feed_config or FeedConfig()
        self.schedule_config = schedule_config or ScheduleConfig()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.state = SchedulerState.IDLE
        self.cycles_completed = 0
        self._cycle_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.logger = create_execution_logger("scheduler")

    @property
    def interval(self) -> float:
        return self.schedule_config.interval_seconds

    def run_cycle(self) -> ServedSnapshot | None:
        """Run one complete cycle and publish its document.

        Returns the published snapshot, or None when ``keep_last_good``
        retained the previous one.
        """
        with self._cycle_lock:
            execution_id = new_execution_id("cycle")
            logger = create_execution_logger("scheduler", execution_id)
            self.state = SchedulerState.BUILDING
            logger.log_execution_start(fetcher_count=len(self.fetchers))

            try:
                for fetcher in self.fetchers:
                    fetcher.set_execution_id(execution_id)

                entries = aggregate(self.fetchers, execution_id=execution_id)
                document = build(
                    entries,
                    built_at=self.clock(),
                    title=self.feed_config.title,
                    description=self.feed_config.description,
                )

                if (
                    document.item_count == 0
                    and self.schedule_config.keep_last_good
                    and self.store.current() is not None
                ):
                    logger.warning(
                        "Cycle produced no items, keeping previous feed",
                        execution_id=execution_id,
                    )
                    snapshot = None
                else:
                    snapshot = self.store.publish(document, execution_id)

                self.cycles_completed += 1
                logger.log_metrics(
                    {
                        "sources": len(self.fetchers),
                        "items": document.item_count,
                        "published": snapshot is not None,
                    }
                )
                logger.log_execution_end(success=True)
                return snapshot
            finally:
                self.state = SchedulerState.IDLE

    def start(self) -> None:
        """Start the background loop; the first cycle runs right away."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="feed-scheduler", daemon=True
        )
        self._thread.start()
        self.logger.info("Scheduler started", interval_seconds=self.interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for the current cycle briefly."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self.logger.info("Scheduler stopped")

    def _run(self) -> None:
        while not self._stop.is_set():
            started = time.monotonic()
            try:
                self.run_cycle()
            except Exception as e:
                # A broken cycle must not end the loop
                self.logger.error(
                    f"Feed cycle failed: {type(e).__name__}: {e}", error=str(e)
                )
            remaining = self.interval - (time.monotonic() - started)
            if remaining > 0:
                self._stop.wait(remaining)
