"""Post model for Plume.

This module turns raw post files into immutable Post records and orders
them for output.

Key items:
- PostMeta: Dataclass holding the frontmatter fields of a post.
- Post: Dataclass representing one parsed and rendered post.
- parse_post: Build a Post from a filename and its raw content.
- sort_posts: Order posts newest first.
- filter_posts_for_index: Drop drafts and order the rest newest first.

Frontmatter fields are taken as they are. A post without ``title`` or
``date`` still parses; the missing value renders as empty text.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from .frontmatter import split_frontmatter
from .markdown import render_markdown
from .utils import is_post_file, slug_from_filename

_KNOWN_FIELDS = ("title", "date", "tags", "draft")


@dataclass(frozen=True)
class PostMeta:
    """Frontmatter fields of a post.

    Attributes:
        title: Post title, None when the frontmatter has none.
        date: Publication date as a naive datetime, None when missing or invalid.
        tags: Tags in frontmatter order.
        draft: Whether the post is a draft (built, but left out of the index).
        extra: Any other frontmatter keys, untouched.
    """

    title: str | None = None
    date: datetime | None = None
    tags: tuple[str, ...] = ()
    draft: bool = False
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_frontmatter(cls, data: dict[str, Any]) -> PostMeta:
        title = data.get("title")
        tags = data.get("tags") or ()
        if not isinstance(tags, (list, tuple)):
            tags = (tags,)
        return cls(
            title=None if title is None else str(title),
            date=coerce_date(data.get("date")),
            tags=tuple(str(tag) for tag in tags),
            draft=bool(data.get("draft", False)),
            extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )


@dataclass(frozen=True)
class Post:
    """A single post, created once per source file per build.

    Attributes:
        slug: Filename without the ``.md`` extension; output name and URL path.
        meta: Frontmatter fields.
        content: Raw Markdown body.
        html: Rendered HTML fragment of the body.
    """

    slug: str
    meta: PostMeta
    content: str
    html: str


def coerce_date(value: Any) -> datetime | None:
    """Normalise a frontmatter date to a naive datetime.

    YAML yields ``date`` or ``datetime`` objects for unquoted dates and
    strings for quoted ones. Aware datetimes are converted to UTC.

    Args:
        value: Raw frontmatter value.

    Returns:
        A naive datetime, or None if the value is missing or not a date.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return None


def parse_post(filename: str, content: str) -> Post | None:
    """Parse a post file into a Post.

    Args:
        filename: Name of the source file.
        content: Raw file content.

    Returns:
        The parsed Post, or None if the file is not a Markdown post.

    Raises:
        FrontmatterError: If the frontmatter block is not valid YAML.
    """
    if not is_post_file(filename):
        return None
    data, markdown = split_frontmatter(content)
    return Post(
        slug=slug_from_filename(filename),
        meta=PostMeta.from_frontmatter(data),
        content=markdown,
        html=render_markdown(markdown),
    )


def _date_key(post: Post) -> tuple[int, datetime]:
    # Undated posts sort after every dated one.
    if post.meta.date is None:
        return (0, datetime.min)
    return (1, post.meta.date)


def sort_posts(posts: Iterable[Post]) -> list[Post]:
    """Sort posts newest first.

    Posts sharing a date keep slug order (ascending), so the output does not
    depend on directory listing order.

    Args:
        posts: Posts to sort.

    Returns:
        A new sorted list.
    """
    by_slug = sorted(posts, key=lambda p: p.slug)
    return sorted(by_slug, key=_date_key, reverse=True)


def filter_posts_for_index(posts: Iterable[Post]) -> list[Post]:
    """Select the posts shown on the index page.

    Args:
        posts: All posts, drafts included.

    Returns:
        Non-draft posts, newest first.
    """
    return sort_posts(p for p in posts if not p.meta.draft)
