"""Most recent commit from a user's public GitHub activity."""

from dataclasses import dataclass

import requests

from ..config import GitHubConfig
from ..errors import FetchError, MalformedResponse, NoQualifyingRecord
from ..http import get_json
from ..models import NormalizedItem, SourceKind
from .base import SourceFetcher, lookup, parse_timestamp, require


@dataclass
class PushCandidate:
    """A commit taken from a PushEvent, before any detail lookup."""

    repo: str
    sha: str
    message: str
    created_at: str
    url: str


class CommitFetcher(SourceFetcher):
    """Fetches the newest non-denylisted pushed commit."""

    name = "github"
    # Commit detail calls per fetch; later candidates use the event data
    max_detail_lookups = 1
    max_requests = 1 + max_detail_lookups

    def __init__(
        self,
        session: requests.Session,
        config: GitHubConfig,
        timeout: float = 30,
        execution_id: str | None = None,
    ):
        super().__init__(session, timeout, execution_id)
        self.config = config
        self.headers = {"Accept": "application/vnd.github+json"}

    def _fetch(self) -> NormalizedItem:
        events_url = f"{self.config.api_url}/users/{self.config.user}/events/public"
        events = get_json(
            self.session,
            events_url,
            source=self.name,
            stage="events",
            timeout=self.timeout,
            headers=self.headers,
        )
        if not isinstance(events, list):
            raise MalformedResponse(
                self.name, "events", "Expected a JSON array of events"
            )

        detail_lookups = 0
        for candidate in self.iter_push_candidates(events):
            if self.is_denied_repo(candidate.repo):
                self.logger.debug(
                    f"Skipping denylisted repository {candidate.repo}",
                    source=self.name,
                )
                continue
            if candidate.message and self.is_denied_message(candidate.message):
                self.logger.debug(
                    f"Skipping denylisted commit {candidate.sha[:7]}",
                    source=self.name,
                )
                continue

            wants_details = self.config.commit_details or not candidate.message
            if wants_details and detail_lookups < self.max_detail_lookups:
                detail_lookups += 1
                candidate = self.resolve_details(candidate)
                if self.is_denied_message(candidate.message):
                    self.logger.debug(
                        f"Skipping denylisted commit {candidate.sha[:7]}",
                        source=self.name,
                    )
                    continue
            if not candidate.message:
                continue

            return self.to_item(candidate)

        raise NoQualifyingRecord(
            self.name, "events", "No qualifying PushEvent in recent activity"
        )

    def iter_push_candidates(self, events: list):
        """Yield the first commit of each PushEvent, in upstream order."""
        for event in events:
            if lookup(event, "type") != "PushEvent":
                continue
            commits = lookup(event, "payload", "commits", default=[])
            if not isinstance(commits, list) or not commits:
                continue

            commit = commits[0]
            stage = "events"
            repo = str(require(event, "repo", "name", source=self.name, stage=stage))
            sha = str(require(commit, "sha", source=self.name, stage=stage))
            yield PushCandidate(
                repo=repo,
                sha=sha,
                message=str(lookup(commit, "message", default="")),
                created_at=require(event, "created_at", source=self.name, stage=stage),
                url=f"https://github.com/{repo}/commit/{sha}",
            )

    def resolve_details(self, candidate: PushCandidate) -> PushCandidate:
        """Fill in the full message, date and web URL from the commit API.

        Falls back to the event's own data when the detail call fails.
        """
        detail_url = (
            f"{self.config.api_url}/repos/{candidate.repo}/commits/{candidate.sha}"
        )
        try:
            detail = get_json(
                self.session,
                detail_url,
                source=self.name,
                stage="commit_detail",
                timeout=self.timeout,
                headers=self.headers,
            )
        except FetchError as e:
            self.logger.warning(
                f"Commit detail unavailable, using event data: {e}",
                source=self.name,
                stage=e.stage,
                error_kind=e.kind,
            )
            return candidate

        return PushCandidate(
            repo=candidate.repo,
            sha=candidate.sha,
            message=str(
                lookup(detail, "commit", "message", default=candidate.message)
            ),
            created_at=lookup(
                detail, "commit", "author", "date", default=candidate.created_at
            ),
            url=str(lookup(detail, "html_url", default=candidate.url)),
        )

    def is_denied_repo(self, repo: str) -> bool:
        return repo in self.config.deny_repos

    def is_denied_message(self, message: str) -> bool:
        return any(fragment in message for fragment in self.config.deny_messages)

    def to_item(self, candidate: PushCandidate) -> NormalizedItem:
        message = candidate.message.strip()
        return NormalizedItem(
            source_kind=SourceKind.CODE_COMMIT,
            title=message.splitlines()[0] if message else candidate.sha[:7],
            description=message,
            link=candidate.url,
            unique_id=candidate.sha,
            published_at=parse_timestamp(
                candidate.created_at, source=self.name, stage="events"
            ),
            extra={
                "repo": candidate.repo,
                "sha": candidate.sha,
                "commitMessage": message,
            },
        )
