"""Plume static site generator.

Plume reads Markdown posts with YAML frontmatter, renders them into HTML
through ``{{name}}`` placeholder templates and writes the site to an
output directory. Draft posts get their own page but are left out of the
index.

The main entry point is the CLI module, which provides commands for
scaffolding projects and posts, building the site, and running dev mode
with a preview server and rebuild-on-change.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
