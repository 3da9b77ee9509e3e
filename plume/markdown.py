"""Markdown rendering for Plume.

Converts a post body to an HTML fragment with mistune. Raw HTML in the
source passes through unescaped, and the GitHub-flavoured basics
(tables, strikethrough, bare URLs) are enabled.
"""

from __future__ import annotations

import mistune

MARKDOWN_PLUGINS = ["strikethrough", "table", "url"]


def render_markdown(text: str) -> str:
    """Render Markdown source to HTML.

    Args:
        text: Markdown source.

    Returns:
        Rendered HTML fragment.
    """
    markdown = mistune.create_markdown(
        renderer=mistune.HTMLRenderer(escape=False), plugins=MARKDOWN_PLUGINS
    )
    return markdown(text)
