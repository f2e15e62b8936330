"""HTTP helpers shared by the source fetchers."""

import json
from typing import Any

import requests

from .errors import MalformedResponse, UpstreamRejected, UpstreamUnreachable

USER_AGENT = "Activity-Journal-Feed/1.0 (+https://github.com/joe307bad)"


def create_session(user_agent: str = USER_AGENT) -> requests.Session:
    """Create the HTTP session shared by every fetcher for a process."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def _get(
    session: requests.Session,
    url: str,
    *,
    source: str,
    stage: str,
    timeout: float,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
) -> requests.Response:
    try:
        response = session.get(url, headers=headers, params=params, timeout=timeout)
    except requests.Timeout as e:
        raise UpstreamUnreachable(
            source, stage, f"Request to {url} timed out after {timeout}s"
        ) from e
    except requests.ConnectionError as e:
        raise UpstreamUnreachable(source, stage, f"Could not reach {url}: {e}") from e

    if not 200 <= response.status_code < 300:
        raise UpstreamRejected(
            source,
            stage,
            f"{url} returned HTTP {response.status_code}",
            status_code=response.status_code,
        )
    return response


def get_json(
    session: requests.Session,
    url: str,
    *,
    source: str,
    stage: str,
    timeout: float,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
) -> Any:
    """GET a URL and decode its JSON body.

    The body is checked to look like a JSON array or object before decoding,
    so HTML error pages and empty bodies are reported as malformed.

    Raises:
        UpstreamUnreachable: On timeout or connection failure
        UpstreamRejected: On a non-2xx status
        MalformedResponse: If the body is empty or not JSON
    """
    response = _get(
        session,
        url,
        source=source,
        stage=stage,
        timeout=timeout,
        headers=headers,
        params=params,
    )

    content = response.text or ""
    stripped = content.lstrip()
    if not stripped:
        raise MalformedResponse(source, stage, f"Empty response body from {url}")
    if not stripped.startswith(("[", "{")):
        raise MalformedResponse(
            source, stage, f"Response from {url} is not JSON: {stripped[:80]!r}"
        )

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedResponse(source, stage, f"Invalid JSON from {url}: {e}") from e


def get_content(
    session: requests.Session,
    url: str,
    *,
    source: str,
    stage: str,
    timeout: float,
    params: dict[str, Any] | None = None,
) -> bytes:
    """GET a URL and return the raw body (used for XML feeds)."""
    response = _get(
        session, url, source=source, stage=stage, timeout=timeout, params=params
    )
    if not response.content or not response.content.strip():
        raise MalformedResponse(source, stage, f"Empty response body from {url}")
    return response.content
