"""Most recent public photo from Flickr (REST API or public feed)."""

import feedparser
import requests
from bs4 import BeautifulSoup

from ..config import FlickrConfig
from ..errors import ConfigMissing, MalformedResponse, NoQualifyingRecord, UpstreamRejected
from ..http import get_content, get_json
from ..models import NormalizedItem, SourceKind
from .base import SourceFetcher, lookup, parse_timestamp, require

STATIC_URL = "https://live.staticflickr.com/{server}/{id}_{secret}_c.jpg"
DEFAULT_TITLE = "Recent Photo"


class FlickrApiPhotoFetcher(SourceFetcher):
    """Newest photo from ``flickr.people.getPublicPhotos``."""

    name = "flickr"

    def __init__(
        self,
        session: requests.Session,
        config: FlickrConfig,
        timeout: float = 30,
        execution_id: str | None = None,
    ):
        super().__init__(session, timeout, execution_id)
        self.config = config

    def _fetch(self) -> NormalizedItem:
        if not self.config.api_key:
            raise ConfigMissing(
                self.name, "config", "FLICKR_API_KEY environment variable is not set"
            )

        payload = get_json(
            self.session,
            self.config.api_url,
            source=self.name,
            stage="photos",
            timeout=self.timeout,
            params={
                "method": "flickr.people.getPublicPhotos",
                "api_key": self.config.api_key,
                "user_id": self.config.user_id,
                "per_page": 1,
                "page": 1,
                "format": "json",
                "nojsoncallback": 1,
                "extras": "date_upload",
            },
        )
        if not isinstance(payload, dict):
            raise MalformedResponse(self.name, "photos", "Expected a JSON object")

        if lookup(payload, "stat") == "fail":
            raise UpstreamRejected(
                self.name,
                "photos",
                f"Flickr API error {lookup(payload, 'code', default='?')}: "
                f"{lookup(payload, 'message', default='unknown error')}",
            )

        photos = lookup(payload, "photos", "photo")
        if not isinstance(photos, list):
            raise MalformedResponse(self.name, "photos", "Missing field: photos.photo")
        if not photos:
            raise NoQualifyingRecord(self.name, "photos", "No public photos found")

        return self.to_item(photos[0])

    def to_item(self, photo: dict) -> NormalizedItem:
        stage = "photos"
        photo_id = str(require(photo, "id", source=self.name, stage=stage))
        server = require(photo, "server", source=self.name, stage=stage)
        secret = require(photo, "secret", source=self.name, stage=stage)
        date_upload = require(photo, "dateupload", source=self.name, stage=stage)
        title = str(lookup(photo, "title", default="")).strip() or DEFAULT_TITLE
        image_url = STATIC_URL.format(server=server, id=photo_id, secret=secret)

        return NormalizedItem(
            source_kind=SourceKind.PHOTO_UPLOAD,
            title=title,
            description=f"My latest photo is titled '{title}'",
            link=image_url,
            unique_id=photo_id,
            published_at=parse_timestamp(date_upload, source=self.name, stage=stage),
            extra={
                "imageUrl": image_url,
                "photoPage": f"https://www.flickr.com/photos/{self.config.user_id}/{photo_id}/",
            },
        )


class FlickrFeedPhotoFetcher(SourceFetcher):
    """Newest photo from the user's public RSS/Atom feed; needs no API key."""

    name = "flickr_feed"

    def __init__(
        self,
        session: requests.Session,
        config: FlickrConfig,
        timeout: float = 30,
        execution_id: str | None = None,
    ):
        super().__init__(session, timeout, execution_id)
        self.config = config

    def _fetch(self) -> NormalizedItem:
        content = get_content(
            self.session,
            self.config.feed_url,
            source=self.name,
            stage="feed",
            timeout=self.timeout,
            params={"id": self.config.user_id, "format": "rss2"},
        )

        feed = feedparser.parse(content)
        if not feed.entries:
            if feed.bozo:
                raise MalformedResponse(
                    self.name,
                    "feed",
                    f"Feed is not well-formed: {getattr(feed, 'bozo_exception', '')}",
                )
            raise NoQualifyingRecord(self.name, "feed", "Feed has no entries")

        if feed.bozo:
            self.logger.warning(
                f"Feed parsing warning: {getattr(feed, 'bozo_exception', '')}",
                source=self.name,
                stage="feed",
            )

        return self.to_item(feed.entries[0])

    def to_item(self, entry) -> NormalizedItem:
        stage = "feed"
        link = entry.get("link") or ""
        unique_id = entry.get("id") or entry.get("guid") or link
        if not unique_id:
            raise MalformedResponse(self.name, stage, "Entry has neither id nor link")

        timestamp = entry.get("updated") or entry.get("published")
        if not timestamp:
            raise MalformedResponse(self.name, stage, "Entry has no date")

        title = (entry.get("title") or "").strip() or DEFAULT_TITLE
        image_url = self.extract_image_url(entry)

        extra = {"photoPage": link}
        if image_url:
            extra["imageUrl"] = image_url

        return NormalizedItem(
            source_kind=SourceKind.PHOTO_UPLOAD,
            title=title,
            description=f"My latest photo is titled '{title}'",
            link=link or image_url or "",
            unique_id=unique_id,
            published_at=parse_timestamp(timestamp, source=self.name, stage=stage),
            extra=extra,
        )

    def extract_image_url(self, entry) -> str | None:
        """Find the image URL in the entry's media tags or HTML description."""
        for media in entry.get("media_content") or []:
            if media.get("url"):
                return media["url"]

        for enclosure in entry.get("enclosures") or []:
            if enclosure.get("href"):
                return enclosure["href"]

        html = entry.get("summary") or entry.get("description") or ""
        if "<img" not in html:
            return None
        img = BeautifulSoup(html, "html.parser").find("img")
        if img is None:
            return None
        return img.get("src") or None
