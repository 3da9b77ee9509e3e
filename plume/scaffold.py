"""Project and post scaffolding for Plume.

Key functions:
- scaffold_project: Create a starter project with templates and one post.
- create_post: Write a new post file with frontmatter.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import yaml

from .config import CONFIG_FILENAME, DEFAULT_CONFIG
from .utils import slugify

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>My Blog</title>
  <link rel="stylesheet" href="styles.css">
</head>
<body>
  <header><h1>My Blog</h1></header>
  <main>
{{posts}}
  </main>
</body>
</html>
"""

POST_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{title}}</title>
  <link rel="stylesheet" href="styles.css">
</head>
<body>
  <nav><a href="index.html">&larr; All posts</a></nav>
  <article>
    <h1>{{title}}</h1>
    <time>{{date}}</time>
    {{content}}
  </article>
</body>
</html>
"""

STYLES_CSS = """body {
  font-family: system-ui, sans-serif;
  line-height: 1.6;
  max-width: 42rem;
  margin: 2rem auto;
  padding: 0 1rem;
}

time {
  color: #666;
}
"""

WELCOME_BODY = "Welcome to my blog!\n"


def scaffold_project(root: Path) -> None:
    """Create the directory structure and files for a new project.

    Args:
        root: Root directory for the new project.
    """
    templates = root / DEFAULT_CONFIG["templates_dir"]
    posts = root / DEFAULT_CONFIG["posts_dir"]
    templates.mkdir(parents=True, exist_ok=True)
    posts.mkdir(parents=True, exist_ok=True)

    (templates / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (templates / "post.html").write_text(POST_HTML, encoding="utf-8")
    (templates / "styles.css").write_text(STYLES_CSS, encoding="utf-8")
    (root / CONFIG_FILENAME).write_text(
        yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False), encoding="utf-8"
    )
    create_post(posts, "Hello World", tags=["intro"], body=WELCOME_BODY)


def post_filename(title: str, on: date | None = None, date_prefix: bool = True) -> str:
    """Build the filename for a new post.

    Examples:
        >>> post_filename("Hello World", date(2024, 1, 15))
        '2024-01-15-hello-world.md'
    """
    name = slugify(title)
    if date_prefix:
        name = f"{(on or date.today()).isoformat()}-{name}"
    return f"{name}.md"


def create_post(
    posts_dir: Path,
    title: str,
    on: date | None = None,
    tags: list[str] | None = None,
    draft: bool = False,
    date_prefix: bool = True,
    body: str = "",
) -> Path:
    """Write a new post file with frontmatter.

    Args:
        posts_dir: Directory to create the post in.
        title: Post title.
        on: Post date, defaults to today.
        tags: Optional tags.
        draft: Whether to mark the post as a draft.
        date_prefix: Whether to prefix the filename with the date.
        body: Markdown body.

    Returns:
        Path to the new file.

    Raises:
        FileExistsError: If a post with the same filename exists.
    """
    on = on or date.today()
    path = posts_dir / post_filename(title, on, date_prefix)
    if path.exists():
        raise FileExistsError(path)

    meta: dict = {"title": title, "date": on}
    if tags:
        meta["tags"] = list(tags)
    if draft:
        meta["draft"] = True
    frontmatter = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True)

    posts_dir.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{frontmatter}---\n\n{body}", encoding="utf-8")
    return path
