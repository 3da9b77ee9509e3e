"""Site building functionality for Plume.

This module contains the core logic for building the static site: it reads
the templates and posts, renders every post (drafts included), renders the
index of published posts and copies the stylesheet.

Key functions:
- build_site: Main function to build the entire site.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from .config import ConfigError, SiteConfig, load_config
from .frontmatter import FrontmatterError
from .posts import Post, filter_posts_for_index, parse_post, sort_posts
from .templates import (
    INDEX_TEMPLATE,
    POST_TEMPLATE,
    load_template,
    render_index_template,
    render_template,
)
from .utils import is_post_file

STYLESHEET = "styles.css"


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        posts: All posts, drafts included, newest first.
        index_posts: Posts listed on the index page.
        output_dir: Directory where the site was built.
    """

    posts: list[Post]
    index_posts: list[Post]
    output_dir: Path


def build_site(project_root: Path, config: SiteConfig | None = None) -> BuildResult:
    """Build the entire static site.

    The output directory is created if needed but never cleaned. Any error
    aborts the whole build.

    Args:
        project_root: Root directory of the project.
        config: Optional pre-loaded configuration.

    Returns:
        BuildResult with the posts that were written.

    Raises:
        BuildError: If plume.yaml is malformed, a template or post cannot be
            read, a post has invalid frontmatter, or the output cannot be
            written.
    """
    if config is None:
        try:
            config = load_config(project_root)
        except ConfigError as exc:
            raise BuildError(exc.path, exc.message, exc) from exc
    output_dir = config.output_dir
    print("Building site...")

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildError(output_dir, _format_error_message(exc), exc) from exc

    index_template = _read_template(config.templates_dir, INDEX_TEMPLATE)
    post_template = _read_template(config.templates_dir, POST_TEMPLATE)

    posts = _load_posts(config.posts_dir)
    print(f"Found {len(posts)} posts")

    for post in posts:
        _write_page(output_dir / f"{post.slug}.html", render_template(post_template, post))

    index_posts = filter_posts_for_index(posts)
    print(f"Index will show {len(index_posts)} non-draft posts")
    _write_page(
        output_dir / "index.html", render_index_template(index_template, index_posts)
    )

    _copy_stylesheet(config.templates_dir, output_dir)
    print("Build complete!")
    return BuildResult(posts=posts, index_posts=index_posts, output_dir=output_dir)


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    if isinstance(exc, FileNotFoundError):
        return "File or directory not found"
    if isinstance(exc, PermissionError):
        return "Permission denied"
    if isinstance(exc, FrontmatterError):
        return str(exc)
    if isinstance(exc, UnicodeDecodeError):
        return f"Not valid UTF-8: {exc.reason}"
    return f"{type(exc).__name__}: {exc}"


def _read_template(templates_dir: Path, name: str) -> str:
    try:
        return load_template(templates_dir, name)
    except (OSError, UnicodeDecodeError) as exc:
        raise BuildError(
            templates_dir / f"{name}.html", _format_error_message(exc), exc
        ) from exc


def _load_posts(posts_dir: Path) -> list[Post]:
    """Parse every post file in the posts directory.

    Only the top level is read; entries that are not ``.md`` files are skipped.

    Args:
        posts_dir: Directory holding the posts.

    Returns:
        All posts, drafts included, newest first.
    """
    try:
        entries = sorted(posts_dir.iterdir())
    except OSError as exc:
        raise BuildError(posts_dir, _format_error_message(exc), exc) from exc

    posts: list[Post] = []
    for path in entries:
        if path.is_dir() or not is_post_file(path.name):
            continue
        try:
            post = parse_post(path.name, path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, FrontmatterError) as exc:
            raise BuildError(path, _format_error_message(exc), exc) from exc
        if post is not None:
            posts.append(post)
    return sort_posts(posts)


def _write_page(path: Path, rendered: str) -> None:
    """Write a rendered page.

    Args:
        path: Target file.
        rendered: Rendered HTML content.
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(rendered)
    except OSError as exc:
        raise BuildError(path, _format_error_message(exc), exc) from exc


def _copy_stylesheet(templates_dir: Path, output_dir: Path) -> None:
    """Copy styles.css into the output directory when the templates have one."""
    source = templates_dir / STYLESHEET
    if not source.is_file():
        return
    target = output_dir / STYLESHEET
    try:
        shutil.copyfile(source, target)
    except OSError as exc:
        raise BuildError(target, _format_error_message(exc), exc) from exc
