"""YAML frontmatter splitting for Plume.

A post starts with a YAML document between two ``---`` lines, followed by
the Markdown body. Files without a frontmatter block have empty metadata.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)


class FrontmatterError(ValueError):
    """Raised when a frontmatter block exists but is not valid YAML mapping."""


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split raw file content into frontmatter metadata and body.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining body text).

    Raises:
        FrontmatterError: If the YAML block does not parse or is not a mapping.
    """
    text = text.lstrip("\ufeff")
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"Invalid YAML frontmatter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end() :]
