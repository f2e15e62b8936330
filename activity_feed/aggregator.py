"""Concurrent fan-out over the source fetchers."""

from concurrent.futures import ThreadPoolExecutor, wait

from .logging_config import create_execution_logger
from .models import FeedEntry
from .render import render
from .sources.base import SourceFetcher

# Added on top of the slowest fetcher's worst case before giving up on it
TIMEOUT_GRACE_SECONDS = 5.0


def default_timeout(fetchers: list[SourceFetcher]) -> float:
    """Longest time a cycle waits for its slowest fetcher."""
    longest = max((fetcher.max_duration for fetcher in fetchers), default=0.0)
    return longest + TIMEOUT_GRACE_SECONDS


def aggregate(
    fetchers: list[SourceFetcher],
    timeout: float | None = None,
    execution_id: str | None = None,
) -> list[FeedEntry]:
    """Run every fetcher concurrently and render the items they produced.

    Entries come back in the order of ``fetchers``. A fetcher that returns
    nothing, raises, or is still running when ``timeout`` elapses is left
    out. Never raises.

    Args:
        fetchers: Fetchers to run, one thread each
        timeout: Seconds to wait for the whole group (defaults to the
            slowest fetcher's worst case plus a grace period)
        execution_id: Execution ID for logging context

    Returns:
        Rendered entries for the fetchers that succeeded
    """
    logger = create_execution_logger("aggregator", execution_id)
    if not fetchers:
        logger.warning("No fetchers configured")
        return []

    if timeout is None:
        timeout = default_timeout(fetchers)

    logger.log_execution_start(fetcher_count=len(fetchers), timeout=timeout)

    executor = ThreadPoolExecutor(
        max_workers=len(fetchers), thread_name_prefix="fetcher"
    )
    try:
        futures = [executor.submit(fetcher.fetch) for fetcher in fetchers]
        wait(futures, timeout=timeout)
    finally:
        # Stragglers keep running on their own timeouts but are not awaited
        executor.shutdown(wait=False, cancel_futures=True)

    entries = []
    for fetcher, future in zip(fetchers, futures):
        if not future.done():
            logger.error(
                f"Source {fetcher.name} did not finish within {timeout}s",
                source=fetcher.name,
                error_kind="timeout",
            )
            continue

        exc = future.exception()
        if exc is not None:
            logger.error(
                f"Source {fetcher.name} raised {type(exc).__name__}: {exc}",
                source=fetcher.name,
                error_kind="unexpected",
            )
            continue

        item = future.result()
        logger.log_source_result(fetcher.name, item is not None)
        if item is not None:
            entries.append(render(item))

    logger.log_execution_end(success=True, entry_count=len(entries))
    return entries
