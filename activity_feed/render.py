"""Rendering of normalized items into RSS entries."""

from datetime import UTC, datetime
from email.utils import format_datetime
from html import escape

from .models import FeedEntry, NormalizedItem, SourceKind


def format_pub_date(value: datetime) -> str:
    """Format a datetime as an RFC-2822 date in GMT."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC), usegmt=True)


def rating_suffix(item: NormalizedItem) -> str:
    rating = item.extra.get("rating")
    return f" - Rated {rating}/10" if rating else ""


def _render_commit(item: NormalizedItem) -> tuple[str, str, list[tuple[str, str]]]:
    repo = item.extra.get("repo", "")
    sha = item.extra.get("sha", item.unique_id)
    title = f"[{repo}] {item.title}"
    description = f"Commit {sha[:7]} in repository {repo}"
    tags = [("repo", repo), ("commitMessage", item.extra.get("commitMessage", ""))]
    return title, description, tags


def _render_movie(item: NormalizedItem) -> tuple[str, str, list[tuple[str, str]]]:
    year = item.extra.get("year")
    name = f"{item.title} ({year})" if year else item.title
    suffix = rating_suffix(item)
    tags = []
    if "rating" in item.extra:
        tags.append(("rating", item.extra["rating"]))
    return f"{name}{suffix}", f"Watched {name} on Trakt{suffix}", tags


def _render_episode(item: NormalizedItem) -> tuple[str, str, list[tuple[str, str]]]:
    show = item.extra.get("showTitle", "")
    episode = item.extra.get("episodeTitle", "")
    season = item.extra.get("season", "?")
    number = item.extra.get("number", "?")
    suffix = rating_suffix(item)
    name = f"{show} - {episode} (Season {season} / Episode {number})"
    tags = [("showTitle", show), ("season", season), ("number", number)]
    if "rating" in item.extra:
        tags.append(("rating", item.extra["rating"]))
    return f"{name}{suffix}", f"Watched {name} on Trakt{suffix}", tags


def _render_photo(item: NormalizedItem) -> tuple[str, str, list[tuple[str, str]]]:
    description = item.description
    image_url = item.extra.get("imageUrl")
    if image_url:
        description = escape(description, quote=False) + (
            f'<br/><img src="{escape(image_url, quote=True)}" '
            f'alt="{escape(item.title, quote=True)}"/>'
        )
    return item.title, description, []


_RENDERERS = {
    SourceKind.CODE_COMMIT: _render_commit,
    SourceKind.MOVIE_REVIEW: _render_movie,
    SourceKind.EPISODE_REVIEW: _render_episode,
    SourceKind.PHOTO_UPLOAD: _render_photo,
}


def render(item: NormalizedItem) -> FeedEntry:
    """Render a normalized item as an RSS entry. Pure, never fails."""
    title, description, tags = _RENDERERS[item.source_kind](item)
    return FeedEntry(
        title=title,
        description=description,
        link=item.link,
        guid=item.unique_id,
        pub_date=format_pub_date(item.published_at),
        content_type=item.source_kind.value,
        extra_tags=tuple(tags),
    )
