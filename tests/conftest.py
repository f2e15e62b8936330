"""Shared fixtures: canned upstream payloads and a routed mock session."""

import json
from unittest.mock import Mock

import pytest
import requests

GITHUB_EVENTS_URL = "https://api.github.com/users/joe307bad/events/public"


def make_response(status_code=200, json_body=None, text=None, content=None):
    """Build a mock ``requests.Response``."""
    if json_body is not None:
        text = json.dumps(json_body)
    if content is None:
        content = (text or "").encode("utf-8")
    if text is None:
        text = content.decode("utf-8", errors="replace")

    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    response.content = content
    return response


def make_session(routes):
    """Mock session whose ``get`` answers by URL substring.

    ``routes`` maps a URL fragment to a response, or to an exception to
    raise. The longest matching fragment wins; unknown URLs get a 404.
    """
    session = Mock(spec=requests.Session)
    session.headers = {}

    def get(url, **kwargs):
        matches = [fragment for fragment in routes if fragment in url]
        if not matches:
            return make_response(404, text="not found")
        answer = routes[max(matches, key=len)]
        if isinstance(answer, BaseException):
            raise answer
        return answer

    session.get.side_effect = get
    return session


def push_event(repo, sha, message, created_at="2024-10-01T12:00:00Z"):
    return {
        "type": "PushEvent",
        "repo": {"name": repo},
        "created_at": created_at,
        "payload": {
            "commits": [
                {
                    "sha": sha,
                    "message": message,
                    "url": f"https://api.github.com/repos/{repo}/commits/{sha}",
                }
            ]
        },
    }


def movie_history(trakt_id=1234, title="Dune: Part Two", year=2024):
    return [
        {
            "id": 9001,
            "watched_at": "2024-09-30T20:15:00.000Z",
            "action": "watch",
            "type": "movie",
            "movie": {
                "title": title,
                "year": year,
                "ids": {"trakt": trakt_id, "slug": "dune-part-two-2024", "tmdb": 693134},
            },
        }
    ]


def movie_ratings(trakt_id=1234, rating=8):
    return [
        {
            "rated_at": "2024-09-30T22:00:00.000Z",
            "rating": rating,
            "type": "movie",
            "movie": {
                "title": "Dune: Part Two",
                "year": 2024,
                "ids": {"trakt": trakt_id, "tmdb": 693134},
            },
        }
    ]


def episode_history(trakt_id=555, season=2, number=3):
    return [
        {
            "id": 9002,
            "watched_at": "2024-09-29T21:00:00.000Z",
            "action": "watch",
            "type": "episode",
            "episode": {
                "season": season,
                "number": number,
                "title": "The Arrival",
                "ids": {"trakt": trakt_id, "tmdb": 42},
            },
            "show": {
                "title": "Severance",
                "year": 2022,
                "ids": {"trakt": 777, "slug": "severance"},
            },
        }
    ]


def flickr_photos(title="Harbor at dusk"):
    return {
        "photos": {
            "page": 1,
            "pages": 10,
            "perpage": 1,
            "total": 10,
            "photo": [
                {
                    "id": "53912345678",
                    "owner": "201450104@N05",
                    "secret": "abc123def4",
                    "server": "65535",
                    "farm": 66,
                    "title": title,
                    "ispublic": 1,
                    "dateupload": "1727784000",
                }
            ],
        },
        "stat": "ok",
    }


FLICKR_RSS = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Uploads from joe307bad</title>
    <link>https://www.flickr.com/photos/201450104@N05/</link>
    <item>
      <title>Harbor at dusk</title>
      <link>https://www.flickr.com/photos/201450104@N05/53912345678/</link>
      <description>&lt;p&gt;&lt;img src="https://live.staticflickr.com/65535/53912345678_abc123def4_m.jpg" width="240" height="160" alt="Harbor at dusk" /&gt;&lt;/p&gt;</description>
      <pubDate>Tue, 01 Oct 2024 12:00:00 -0000</pubDate>
      <guid isPermaLink="false">tag:flickr.com,2004:/photo/53912345678</guid>
    </item>
    <item>
      <title>Older photo</title>
      <link>https://www.flickr.com/photos/201450104@N05/53900000000/</link>
      <pubDate>Mon, 30 Sep 2024 12:00:00 -0000</pubDate>
      <guid isPermaLink="false">tag:flickr.com,2004:/photo/53900000000</guid>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def github_routes():
    return {
        "/events/public": make_response(
            json_body=[
                {"type": "WatchEvent", "repo": {"name": "someone/else"}},
                push_event("joe307bad/journal", "a1b2c3d4e5f6", "Add feed builder"),
            ]
        ),
        "/repos/joe307bad/journal/commits/a1b2c3d4e5f6": make_response(
            json_body={
                "sha": "a1b2c3d4e5f6",
                "html_url": "https://github.com/joe307bad/journal/commit/a1b2c3d4e5f6",
                "commit": {
                    "message": "Add feed builder\n\nWraps entries in a channel.",
                    "author": {"date": "2024-10-01T11:58:00Z"},
                },
            }
        ),
    }


@pytest.fixture
def trakt_routes():
    return {
        "/history/movies": make_response(json_body=movie_history()),
        "/ratings/movies": make_response(json_body=movie_ratings()),
        "/history/episodes": make_response(json_body=episode_history()),
        "/ratings/episodes": make_response(json_body=[]),
    }


@pytest.fixture
def flickr_routes():
    return {"api.flickr.com": make_response(json_body=flickr_photos())}
