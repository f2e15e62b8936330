"""Base class and helpers for the upstream source fetchers."""

import threading
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import requests
from dateutil import parser as date_parser

from ..errors import FetchError, MalformedResponse, NoQualifyingRecord
from ..logging_config import ExecutionLogger, create_execution_logger
from ..models import NormalizedItem

_MISSING = object()


def lookup(data: Any, *path: str | int, default: Any = None) -> Any:
    """Walk nested mappings/sequences, returning ``default`` on any miss.

    >>> lookup({"repo": {"name": "a/b"}}, "repo", "name")
    'a/b'
    >>> lookup({"payload": {}}, "payload", "commits", 0) is None
    True
    """
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return default
            current = current[key]
        else:
            if not isinstance(current, Mapping):
                return default
            current = current.get(key, _MISSING)
            if current is _MISSING:
                return default
    return default if current is None else current


def require(data: Any, *path: str | int, source: str, stage: str) -> Any:
    """Like :func:`lookup` but raises MalformedResponse when the field is absent."""
    value = lookup(data, *path)
    if value is None or value == "":
        dotted = ".".join(str(part) for part in path)
        raise MalformedResponse(source, stage, f"Missing field: {dotted}")
    return value


def parse_timestamp(value: Any, *, source: str, stage: str) -> datetime:
    """Parse an ISO-8601 string or unix seconds into an aware UTC datetime."""
    try:
        if isinstance(value, (int, float)) or (
            isinstance(value, str) and value.strip().isdigit()
        ):
            return datetime.fromtimestamp(int(value), tz=UTC)
        parsed = date_parser.parse(value)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        raise MalformedResponse(
            source, stage, f"Unparseable timestamp {value!r}: {e}"
        ) from e

    if parsed.tzinfo is None:
        # Upstream timestamps without an offset are UTC
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


class SourceFetcher:
    """Fetches the single most recent item from one upstream.

    Subclasses implement :meth:`_fetch`, raising a :class:`FetchError`
    subclass for every expected failure. :meth:`fetch` is the boundary that
    turns any failure into ``None``.
    """

    name = "source"
    # Upper bound of HTTP calls one fetch may issue, used to size timeouts
    max_requests = 1

    def __init__(
        self,
        session: requests.Session,
        timeout: float = 30,
        execution_id: str | None = None,
    ):
        self.session = session
        self.timeout = timeout
        self.execution_id = execution_id
        self._default_logger = create_execution_logger(
            f"source.{self.name}", execution_id
        )
        self._context = threading.local()

    @property
    def max_duration(self) -> float:
        """Worst case wall time of one fetch."""
        return self.timeout * self.max_requests

    @property
    def logger(self) -> ExecutionLogger:
        """Logger of the fetch running on the calling thread.

        A fetch keeps the execution id it started with, so a straggler
        abandoned by one cycle never logs under the next cycle's id.
        """
        return getattr(self._context, "logger", self._default_logger)

    def fetch(self) -> NormalizedItem | None:
        """Fetch the most recent item, or ``None`` if this cycle fails.

        Never raises.
        """
        self._context.logger = create_execution_logger(
            f"source.{self.name}",
            self.execution_id or self._default_logger.execution_id,
        )
        try:
            item = self._fetch()
        except NoQualifyingRecord as e:
            self.logger.warning(
                str(e), source=e.source, stage=e.stage, error_kind=e.kind
            )
            return None
        except FetchError as e:
            self.logger.error(
                str(e), source=e.source, stage=e.stage, error_kind=e.kind
            )
            return None
        except requests.RequestException as e:
            self.logger.error(
                f"HTTP error fetching {self.name}: {e}",
                source=self.name,
                stage="request",
                error_kind="upstream_unreachable",
            )
            return None
        except Exception as e:
            self.logger.error(
                f"Unexpected error fetching {self.name}: {type(e).__name__}: {e}",
                source=self.name,
                stage="unknown",
                error_kind="unexpected",
            )
            return None

        self.logger.info(
            f"Fetched {item.source_kind.value} item: {item.title}",
            source=self.name,
            unique_id=item.unique_id,
        )
        return item

    def _fetch(self) -> NormalizedItem:
        raise NotImplementedError

    def set_execution_id(self, execution_id: str) -> None:
        """Tag fetches started from now on with a new cycle's execution id."""
        self.execution_id = execution_id
