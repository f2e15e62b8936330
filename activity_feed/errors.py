"""Failure kinds raised inside source fetchers."""


class FetchError(Exception):
    """Base class for a source failing to produce an item this cycle.

    Args:
        source: Name of the source that failed (e.g. 'github')
        stage: Step that failed (e.g. 'events', 'ratings', 'config')
        message: Human readable diagnostic
    """

    kind = "fetch_error"

    def __init__(self, source: str, stage: str, message: str):
        super().__init__(message)
        self.source = source
        self.stage = stage
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind}] {self.source}/{self.stage}: {self.message}"


class ConfigMissing(FetchError):
    """A required credential is absent."""

    kind = "config_missing"


class UpstreamUnreachable(FetchError):
    """Network failure or timeout talking to the upstream."""

    kind = "upstream_unreachable"


class UpstreamRejected(FetchError):
    """Non-success status or an API level failure payload."""

    kind = "upstream_rejected"

    def __init__(
        self, source: str, stage: str, message: str, status_code: int | None = None
    ):
        super().__init__(source, stage, message)
        self.status_code = status_code


class MalformedResponse(FetchError):
    """Body is not of the expected shape or misses required fields."""

    kind = "malformed_response"


class NoQualifyingRecord(FetchError):
    """Well-formed response, but nothing survives filtering."""

    kind = "no_qualifying_record"
