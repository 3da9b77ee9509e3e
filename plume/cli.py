"""Command-line interface for Plume.

This module defines the CLI commands using the Click framework.

Commands:
- init: Scaffold a new Plume project.
- build: Build the site into the output directory.
- dev: Build, serve and rebuild on change.
- new: Create a new post interactively.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import click
import questionary

from . import __version__


@click.group()
@click.version_option(version=__version__, prog_name="plume")
def cli():
    """Plume static site generator."""


@cli.command()
@click.argument("name")
def init(name: str):
    """Scaffold a new Plume project."""
    from .scaffold import scaffold_project

    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    scaffold_project(target)
    _try_git_init(target)
    click.echo(f"New Plume site created at {target}")


@cli.command()
def build():
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, build_site

    try:
        result = build_site(project_root)
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(
            click.style(f"  File: {_display_path(exc.source_path, project_root)}", fg="yellow"),
            err=True,
        )
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.posts)} posts into {result.output_dir}")


@cli.command()
@click.option(
    "--port",
    type=int,
    required=False,
    help="Port for the preview server (overrides plume.yaml)",
)
def dev(port: int | None):
    """Build, serve and rebuild on change."""
    project_root = Path.cwd()
    from .config import ConfigError
    from .dev import DevLoop

    try:
        loop = DevLoop(project_root, port=port)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None
    loop.start()


@cli.command()
def new():
    """Create a new post interactively."""
    project_root = Path.cwd()
    from .config import ConfigError, load_config
    from .scaffold import create_post, post_filename

    try:
        posts_dir = load_config(project_root).posts_dir
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None
    if not posts_dir.is_dir():
        raise click.ClickException(
            f"No posts directory found at {_display_path(posts_dir, project_root)}. "
            "Run this command from a Plume project root."
        )

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    tags = questionary.text(
        "Tags (comma separated, optional):", style=_questionary_style()
    ).ask()
    if tags is None:
        raise click.Abort()

    draft = questionary.confirm(
        "Mark as draft?", default=False, style=_questionary_style()
    ).ask()
    if draft is None:
        raise click.Abort()

    add_date = questionary.confirm(
        "Prefix with today's date? (YYYY-MM-DD-)",
        default=True,
        style=_questionary_style(),
    ).ask()
    if add_date is None:
        raise click.Abort()

    try:
        path = create_post(
            posts_dir,
            title,
            tags=[t.strip() for t in tags.split(",") if t.strip()],
            draft=draft,
            date_prefix=add_date,
            body=f"# {title}\n\n",
        )
    except FileExistsError:
        filename = post_filename(title, date_prefix=add_date)
        raise click.ClickException(
            f"File already exists: {_display_path(posts_dir / filename, project_root)}"
        ) from None
    click.echo(f"Created {_display_path(path, project_root)}")


def _display_path(path: Path, project_root: Path) -> Path:
    """Return path relative to the project root when it lies inside it."""
    try:
        return path.relative_to(project_root)
    except ValueError:
        return path


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("PLUME_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        # Non-fatal: user can run git init manually
        pass
