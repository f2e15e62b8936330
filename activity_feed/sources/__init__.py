"""Upstream source fetchers."""

import requests

from ..config import Config
from .base import SourceFetcher
from .flickr import FlickrApiPhotoFetcher, FlickrFeedPhotoFetcher
from .github import CommitFetcher
from .trakt import EpisodeRatingFetcher, MovieRatingFetcher

__all__ = [
    "CommitFetcher",
    "EpisodeRatingFetcher",
    "FlickrApiPhotoFetcher",
    "FlickrFeedPhotoFetcher",
    "MovieRatingFetcher",
    "SourceFetcher",
    "build_fetchers",
]


def build_fetchers(config: Config, session: requests.Session) -> list[SourceFetcher]:
    """Create the configured fetchers, in the order their items appear."""
    timeout = config.http_timeout
    trakt_config = config.get_trakt_config()
    flickr_config = config.get_flickr_config()

    if flickr_config.mode == "feed":
        photo_fetcher = FlickrFeedPhotoFetcher(session, flickr_config, timeout)
    else:
        photo_fetcher = FlickrApiPhotoFetcher(session, flickr_config, timeout)

    return [
        CommitFetcher(session, config.get_github_config(), timeout),
        MovieRatingFetcher(session, trakt_config, timeout),
        EpisodeRatingFetcher(session, trakt_config, timeout),
        photo_fetcher,
    ]
