"""Utility functions for Plume.

Filename helpers shared by the build pipeline, the dev loop and the CLI.

Key functions:
    is_post_file: Check if a filename is a Markdown post.
    slug_from_filename: Derive a post slug from its filename.
    slugify: Convert free text to a filename stem.
    is_hidden: Check if a path has a dot-prefixed component.
"""

from __future__ import annotations

import re
from pathlib import Path

POST_SUFFIX = ".md"


def is_post_file(name: str | Path) -> bool:
    """Check if a filename is a Markdown post.

    Args:
        name: Filename or path.

    Returns:
        True if the name ends with the ``.md`` extension.
    """
    return str(name).endswith(POST_SUFFIX)


def slug_from_filename(filename: str) -> str:
    """Derive a post slug from its filename.

    The trailing ``.md`` is stripped exactly once; nothing else is changed,
    so date prefixes are kept.

    Examples:
        >>> slug_from_filename("2024-01-15-hello-world.md")
        '2024-01-15-hello-world'
    """
    if filename.endswith(POST_SUFFIX):
        return filename[: -len(POST_SUFFIX)]
    return filename


def slugify(text: str) -> str:
    """Convert free text to a lowercase, hyphen separated filename stem."""
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", text)
    return cleaned.strip("-").lower() or "post"


def is_hidden(path: Path, root: Path | None = None) -> bool:
    """Check if a path contains a component starting with a dot.

    Args:
        path: Path to check.
        root: Optional root the check is relative to, so a hidden parent of
            the watched tree does not count.

    Returns:
        True if any (relative) path component starts with ``.``.
    """
    if root is not None:
        try:
            path = path.relative_to(root)
        except ValueError:
            pass
    return any(part.startswith(".") for part in path.parts)
