"""Template rendering for Plume.

Templates are plain HTML files with ``{{name}}`` placeholders. There are
no conditionals, loops or includes: each placeholder is replaced by a
string at every place it occurs.

Recognised placeholders:
- post template: ``{{title}}``, ``{{date}}``, ``{{content}}``
- index template: ``{{posts}}``

Key functions:
- format_date: Long-form English date, e.g. "January 17, 2026".
- render_template: Render one post against the post template.
- render_index_template: Render the listing of posts into the index template.
- load_template: Read a named template from the templates directory.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from .posts import Post

__all__ = [
    "INDEX_TEMPLATE",
    "POST_TEMPLATE",
    "format_date",
    "load_template",
    "render_index_template",
    "render_template",
]

INDEX_TEMPLATE = "index"
POST_TEMPLATE = "post"

# Fixed English names so output does not depend on the process locale.
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_POST_PLACEHOLDER = re.compile(r"\{\{(title|date|content)\}\}")

INDEX_ENTRY = """
    <article>
      <h2><a href="{slug}.html">{title}</a></h2>
      <time datetime="{iso_date}">{date}</time>
    </article>"""


def format_date(value: datetime | None) -> str:
    """Format a date as "January 17, 2026".

    Args:
        value: Date to format.

    Returns:
        The formatted date, or an empty string if there is no date.
    """
    if value is None:
        return ""
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"


def _text(value: str | None) -> str:
    return "" if value is None else value


def render_template(template: str, post: Post) -> str:
    """Render a post into the post template.

    Every occurrence of each placeholder is substituted, so ``{{title}}``
    can appear in both ``<title>`` and ``<h1>``.

    Args:
        template: Post template text.
        post: Post to render.

    Returns:
        The rendered HTML page.
    """
    values = {
        "title": _text(post.meta.title),
        "date": format_date(post.meta.date),
        "content": post.html,
    }
    # One pass, so placeholder text inside a value is left as it is.
    return _POST_PLACEHOLDER.sub(lambda m: values[m.group(1)], template)


def render_index_template(template: str, posts: Iterable[Post]) -> str:
    """Render the post listing into the index template.

    Args:
        template: Index template text.
        posts: Posts to list, already filtered and in display order.

    Returns:
        The rendered index page.
    """
    entries = [
        INDEX_ENTRY.format(
            slug=post.slug,
            title=_text(post.meta.title),
            iso_date=post.meta.date.date().isoformat() if post.meta.date else "",
            date=format_date(post.meta.date),
        )
        for post in posts
    ]
    return template.replace("{{posts}}", "\n".join(entries))


def load_template(templates_dir: Path, name: str) -> str:
    """Read a named template.

    Args:
        templates_dir: Directory holding the templates.
        name: Template name without extension (``index`` or ``post``).

    Returns:
        Template text.

    Raises:
        OSError: If the template file cannot be read.
    """
    return (templates_dir / f"{name}.html").read_text(encoding="utf-8")
