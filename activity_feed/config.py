"""Configuration management for the activity journal feed."""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _split_list(value: str) -> tuple[str, ...]:
    """Split a comma separated environment value, dropping blanks."""
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class GitHubConfig:
    """Configuration for the commit activity source."""

    user: str = "joe307bad"
    api_url: str = "https://api.github.com"
    deny_repos: tuple[str, ...] = ()
    deny_messages: tuple[str, ...] = ("Badaczewski_CV",)
    commit_details: bool = True


@dataclass(frozen=True)
class TraktConfig:
    """Configuration for the watch/rating history source."""

    api_key: str | None = None
    user: str = "joe307bad"
    api_url: str = "https://api.trakt.tv"
    site_url: str = "https://trakt.tv"


@dataclass(frozen=True)
class FlickrConfig:
    """Configuration for the photo source."""

    api_key: str | None = None
    user_id: str = "201450104@N05"
    mode: str = "api"
    api_url: str = "https://api.flickr.com/services/rest/"
    feed_url: str = "https://www.flickr.com/services/feeds/photos_public.gne"


@dataclass(frozen=True)
class FeedConfig:
    """Configuration for the generated RSS document."""

    title: str = "Joe's digital journal"
    description: str = "A curated stream of my discoveries, thoughts, and activities"
    output_dir: Path = field(default_factory=lambda: Path("wwwroot"))
    output_file: str = "journal.xml"

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.output_file


@dataclass(frozen=True)
class ScheduleConfig:
    """Configuration for scheduled regeneration."""

    interval_hours: float = 12.0
    keep_last_good: bool = False

    @property
    def interval_seconds(self) -> float:
        return self.interval_hours * 3600


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the HTTP surface."""

    host: str = "0.0.0.0"
    port: int = 5001


class Config:
    """Main configuration manager.

    Values are read from the process environment once, when the object is
    created. Any ``.env`` file is expected to be loaded before that.
    """

    FLICKR_MODES = ("api", "feed")

    def __init__(self, environ: dict[str, str] | None = None):
        """Initialize configuration from environment variables."""
        env = os.environ if environ is None else environ

        self.trakt_api_key = (
            env.get("TRAKT_API_KEY") or env.get("TRACKT_TV_API_KEY") or None
        )
        self.flickr_api_key = env.get("FLICKR_API_KEY") or None

        self.github_user = env.get("GITHUB_USER", "joe307bad")
        self.trakt_user = env.get("TRAKT_USER", "joe307bad")
        self.flickr_user_id = env.get("FLICKR_USER_ID", "201450104@N05")
        self.flickr_mode = env.get("FLICKR_MODE", "api").strip().lower()
        if self.flickr_mode not in self.FLICKR_MODES:
            raise ValueError(
                f"FLICKR_MODE must be one of {', '.join(self.FLICKR_MODES)}: "
                f"{self.flickr_mode!r}"
            )

        self.deny_repos = _split_list(env.get("COMMIT_DENY_REPOS", ""))
        self.deny_messages = _split_list(
            env.get("COMMIT_DENY_MESSAGES", "Badaczewski_CV")
        )
        self.commit_details = _parse_bool(env.get("COMMIT_DETAILS", "true"))

        self.feed_title = env.get("FEED_TITLE", FeedConfig.title)
        self.feed_description = env.get("FEED_DESCRIPTION", FeedConfig.description)
        self.output_dir = Path(env.get("OUTPUT_DIR", "wwwroot"))
        self.output_file = env.get("OUTPUT_FILE", "journal.xml")

        try:
            self.interval_hours = float(env.get("REFRESH_INTERVAL_HOURS", "12"))
            self.http_timeout = float(env.get("HTTP_TIMEOUT", "30"))
            self.port = int(env.get("PORT", "5001"))
        except ValueError as e:
            raise ValueError(f"Invalid numeric configuration value: {e}") from e

        if self.interval_hours <= 0:
            raise ValueError("REFRESH_INTERVAL_HOURS must be positive")
        if self.http_timeout <= 0:
            raise ValueError("HTTP_TIMEOUT must be positive")

        self.keep_last_good = _parse_bool(env.get("KEEP_LAST_GOOD", "false"))
        self.host = env.get("HOST", "0.0.0.0")
        self.log_level = env.get("LOG_LEVEL", "INFO")

    def get_github_config(self) -> GitHubConfig:
        """Get commit activity configuration."""
        return GitHubConfig(
            user=self.github_user,
            deny_repos=self.deny_repos,
            deny_messages=self.deny_messages,
            commit_details=self.commit_details,
        )

    def get_trakt_config(self) -> TraktConfig:
        """Get Trakt configuration."""
        return TraktConfig(api_key=self.trakt_api_key, user=self.trakt_user)

    def get_flickr_config(self) -> FlickrConfig:
        """Get Flickr configuration."""
        return FlickrConfig(
            api_key=self.flickr_api_key,
            user_id=self.flickr_user_id,
            mode=self.flickr_mode,
        )

    def get_feed_config(self) -> FeedConfig:
        """Get output document configuration."""
        return FeedConfig(
            title=self.feed_title,
            description=self.feed_description,
            output_dir=self.output_dir,
            output_file=self.output_file,
        )

    def get_schedule_config(self) -> ScheduleConfig:
        """Get schedule configuration."""
        return ScheduleConfig(
            interval_hours=self.interval_hours, keep_last_good=self.keep_last_good
        )

    def get_server_config(self) -> ServerConfig:
        """Get HTTP server configuration."""
        return ServerConfig(host=self.host, port=self.port)
