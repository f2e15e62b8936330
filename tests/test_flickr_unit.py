"""Unit tests for the Flickr photo fetchers."""

from datetime import UTC, datetime

import requests

from activity_feed.config import FlickrConfig
from activity_feed.models import SourceKind
from activity_feed.render import render
from activity_feed.sources.flickr import FlickrApiPhotoFetcher, FlickrFeedPhotoFetcher
from conftest import FLICKR_RSS, flickr_photos, make_response, make_session


class TestFlickrApiPhotoFetcherUnit:
    """Unit tests for the REST API variant."""

    def setup_method(self):
        self.config = FlickrConfig(api_key="test-key")

    def test_first_photo(self, flickr_routes):
        item = FlickrApiPhotoFetcher(make_session(flickr_routes), self.config).fetch()

        assert item is not None
        assert item.source_kind == SourceKind.PHOTO_UPLOAD
        assert item.title == "Harbor at dusk"
        assert item.unique_id == "53912345678"
        assert (
            item.link
            == "https://live.staticflickr.com/65535/53912345678_abc123def4_c.jpg"
        )
        assert item.published_at == datetime(2024, 10, 1, 12, 0, tzinfo=UTC)

    def test_untitled_photo_gets_default_title(self):
        session = make_session(
            {"api.flickr.com": make_response(json_body=flickr_photos(title=""))}
        )
        item = FlickrApiPhotoFetcher(session, self.config).fetch()

        assert item.title == "Recent Photo"

    def test_description_embeds_image(self, flickr_routes):
        item = FlickrApiPhotoFetcher(make_session(flickr_routes), self.config).fetch()
        entry = render(item)

        assert entry.description.startswith("My latest photo is titled 'Harbor at dusk'")
        assert '<img src="https://live.staticflickr.com/65535/' in entry.description

    def test_missing_api_key_returns_none(self, flickr_routes):
        session = make_session(flickr_routes)
        item = FlickrApiPhotoFetcher(session, FlickrConfig(api_key=None)).fetch()

        assert item is None
        session.get.assert_not_called()

    def test_api_failure_payload_returns_none(self):
        session = make_session(
            {
                "api.flickr.com": make_response(
                    json_body={"stat": "fail", "code": 100, "message": "Invalid API Key"}
                )
            }
        )
        assert FlickrApiPhotoFetcher(session, self.config).fetch() is None

    def test_no_photos_returns_none(self):
        payload = flickr_photos()
        payload["photos"]["photo"] = []
        session = make_session({"api.flickr.com": make_response(json_body=payload)})

        assert FlickrApiPhotoFetcher(session, self.config).fetch() is None

    def test_photo_missing_secret_returns_none(self):
        payload = flickr_photos()
        del payload["photos"]["photo"][0]["secret"]
        session = make_session({"api.flickr.com": make_response(json_body=payload)})

        assert FlickrApiPhotoFetcher(session, self.config).fetch() is None

    def test_connection_error_returns_none(self):
        session = make_session({"api.flickr.com": requests.ConnectionError("down")})
        assert FlickrApiPhotoFetcher(session, self.config).fetch() is None


class TestFlickrFeedPhotoFetcherUnit:
    """Unit tests for the public feed variant."""

    def setup_method(self):
        self.config = FlickrConfig(mode="feed")

    def test_first_feed_entry(self):
        session = make_session({"photos_public.gne": make_response(content=FLICKR_RSS)})
        item = FlickrFeedPhotoFetcher(session, self.config).fetch()

        assert item is not None
        assert item.source_kind == SourceKind.PHOTO_UPLOAD
        assert item.title == "Harbor at dusk"
        assert item.link == "https://www.flickr.com/photos/201450104@N05/53912345678/"
        assert item.unique_id == "tag:flickr.com,2004:/photo/53912345678"
        assert item.published_at == datetime(2024, 10, 1, 12, 0, tzinfo=UTC)
        assert item.extra["imageUrl"].endswith("53912345678_abc123def4_m.jpg")

    def test_works_without_api_key(self):
        session = make_session({"photos_public.gne": make_response(content=FLICKR_RSS)})
        assert FlickrFeedPhotoFetcher(session, FlickrConfig(api_key=None)).fetch()

    def test_not_xml_returns_none(self):
        session = make_session(
            {"photos_public.gne": make_response(text="this is not a feed at all")}
        )
        assert FlickrFeedPhotoFetcher(session, self.config).fetch() is None

    def test_feed_without_entries_returns_none(self):
        empty = b'<?xml version="1.0"?><rss version="2.0"><channel><title>x</title></channel></rss>'
        session = make_session({"photos_public.gne": make_response(content=empty)})

        assert FlickrFeedPhotoFetcher(session, self.config).fetch() is None
