"""Most recently watched movie/episode from Trakt, with the user's rating."""

import requests

from ..config import TraktConfig
from ..errors import ConfigMissing, FetchError, MalformedResponse, NoQualifyingRecord
from ..http import get_json
from ..models import NormalizedItem, SourceKind
from .base import SourceFetcher, lookup, parse_timestamp, require


class TraktHistoryFetcher(SourceFetcher):
    """Shared logic for the Trakt watch history sources.

    Subclasses set ``media_type`` (the Trakt path segment), ``record_key``
    (the key holding the rated object in history/rating entries) and build
    the item in :meth:`to_item`.
    """

    name = "trakt"
    media_type = ""
    record_key = ""
    max_requests = 2

    def __init__(
        self,
        session: requests.Session,
        config: TraktConfig,
        timeout: float = 30,
        execution_id: str | None = None,
    ):
        super().__init__(session, timeout, execution_id)
        self.config = config

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "trakt-api-key": self.config.api_key or "",
            "trakt-api-version": "2",
        }

    def _fetch(self) -> NormalizedItem:
        if not self.config.api_key:
            raise ConfigMissing(
                self.name, "config", "TRAKT_API_KEY environment variable is not set"
            )

        history_url = (
            f"{self.config.api_url}/users/{self.config.user}/history/{self.media_type}"
        )
        history = get_json(
            self.session,
            history_url,
            source=self.name,
            stage="history",
            timeout=self.timeout,
            headers=self.headers,
        )
        if not isinstance(history, list):
            raise MalformedResponse(
                self.name, "history", "Expected a JSON array of history entries"
            )
        if not history:
            raise NoQualifyingRecord(
                self.name, "history", f"No {self.media_type} in watch history"
            )

        entry = history[0]
        trakt_id = require(
            entry, self.record_key, "ids", "trakt", source=self.name, stage="history"
        )
        rating = self.find_rating(trakt_id)
        return self.to_item(entry, rating)

    def fetch_ratings(self) -> list:
        ratings_url = (
            f"{self.config.api_url}/users/{self.config.user}/ratings/{self.media_type}"
        )
        ratings = get_json(
            self.session,
            ratings_url,
            source=self.name,
            stage="ratings",
            timeout=self.timeout,
            headers=self.headers,
        )
        if not isinstance(ratings, list):
            raise MalformedResponse(
                self.name, "ratings", "Expected a JSON array of ratings"
            )
        return ratings

    def find_rating(self, trakt_id) -> int | None:
        """Return the user's rating for ``trakt_id``, or None if not rated.

        A failing ratings call leaves the item unrated instead of dropping it.
        """
        try:
            ratings = self.fetch_ratings()
        except FetchError as e:
            self.logger.warning(
                f"Ratings unavailable, continuing without rating: {e}",
                source=self.name,
                stage=e.stage,
                error_kind=e.kind,
            )
            return None

        for rating_entry in ratings:
            if lookup(rating_entry, self.record_key, "ids", "trakt") == trakt_id:
                rating = lookup(rating_entry, "rating")
                if isinstance(rating, (int, float)) and not isinstance(rating, bool):
                    return int(rating)
                return None
        return None

    def to_item(self, entry: dict, rating: int | None) -> NormalizedItem:
        raise NotImplementedError


class MovieRatingFetcher(TraktHistoryFetcher):
    """Most recently watched movie."""

    name = "trakt_movies"
    media_type = "movies"
    record_key = "movie"

    def to_item(self, entry: dict, rating: int | None) -> NormalizedItem:
        stage = "history"
        movie = require(entry, "movie", source=self.name, stage=stage)
        title = require(movie, "title", source=self.name, stage=stage)
        trakt_id = require(movie, "ids", "trakt", source=self.name, stage=stage)
        watched_at = require(entry, "watched_at", source=self.name, stage=stage)
        year = lookup(movie, "year")

        extra = {"title": title, "traktId": str(trakt_id)}
        if year is not None:
            extra["year"] = str(year)
        tmdb_id = lookup(movie, "ids", "tmdb")
        if tmdb_id is not None:
            extra["tmdbId"] = str(tmdb_id)
        if rating is not None:
            extra["rating"] = str(rating)

        return NormalizedItem(
            source_kind=SourceKind.MOVIE_REVIEW,
            title=title,
            description=f"Watched {title}",
            link=f"{self.config.site_url}/movies/{trakt_id}",
            unique_id=f"trakt-movie-{trakt_id}-{watched_at}",
            published_at=parse_timestamp(watched_at, source=self.name, stage=stage),
            extra=extra,
        )


class EpisodeRatingFetcher(TraktHistoryFetcher):
    """Most recently watched TV episode."""

    name = "trakt_episodes"
    media_type = "episodes"
    record_key = "episode"

    def to_item(self, entry: dict, rating: int | None) -> NormalizedItem:
        stage = "history"
        episode = require(entry, "episode", source=self.name, stage=stage)
        trakt_id = require(episode, "ids", "trakt", source=self.name, stage=stage)
        season = require(episode, "season", source=self.name, stage=stage)
        number = require(episode, "number", source=self.name, stage=stage)
        watched_at = require(entry, "watched_at", source=self.name, stage=stage)
        show_title = lookup(entry, "show", "title", default="Unknown show")
        episode_title = lookup(episode, "title", default=f"Episode {number}")
        show_ref = lookup(entry, "show", "ids", "slug") or lookup(
            entry, "show", "ids", "trakt"
        )

        if show_ref is not None:
            link = (
                f"{self.config.site_url}/shows/{show_ref}"
                f"/seasons/{season}/episodes/{number}"
            )
        else:
            link = f"{self.config.site_url}/episodes/{trakt_id}"

        extra = {
            "showTitle": show_title,
            "episodeTitle": episode_title,
            "season": str(season),
            "number": str(number),
            "traktId": str(trakt_id),
        }
        if rating is not None:
            extra["rating"] = str(rating)

        return NormalizedItem(
            source_kind=SourceKind.EPISODE_REVIEW,
            title=f"{show_title} - {episode_title}",
            description=f"Watched {show_title} - {episode_title}",
            link=link,
            unique_id=f"trakt-episode-{trakt_id}-{watched_at}",
            published_at=parse_timestamp(watched_at, source=self.name, stage=stage),
            extra=extra,
        )
