"""Site configuration for Plume.

Every setting has a fixed default. A ``plume.yaml`` file at the project root
may override any of them; unknown keys are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "plume.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "posts_dir": "posts",
    "output_dir": "docs",
    "templates_dir": "templates",
    "port": 3000,
    "debounce_ms": 300,
}


class ConfigError(ValueError):
    """Raised when plume.yaml cannot be parsed.

    Attributes:
        path: Path to the configuration file.
        message: Human-readable error message.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


@dataclass(frozen=True)
class SiteConfig:
    """Resolved configuration for one project.

    Attributes:
        project_root: Root directory of the project.
        posts_dir: Directory holding ``.md`` posts.
        output_dir: Directory the site is written to.
        templates_dir: Directory holding ``index.html``, ``post.html`` and ``styles.css``.
        port: Port of the dev-mode preview server.
        debounce_ms: Dev-mode debounce delay in milliseconds.
    """

    project_root: Path
    posts_dir: Path
    output_dir: Path
    templates_dir: Path
    port: int
    debounce_ms: int

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


def load_config(project_root: Path, **overrides: Any) -> SiteConfig:
    """Load site configuration from plume.yaml.

    Args:
        project_root: Root directory of the project.
        **overrides: Values that take precedence over the file (None is ignored).

    Returns:
        SiteConfig with defaults applied and directories resolved against
        the project root.

    Raises:
        ConfigError: If plume.yaml is not valid YAML or a number is malformed.
    """
    config = DEFAULT_CONFIG.copy()
    config_path = project_root / CONFIG_FILENAME
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(config_path, f"Invalid YAML: {exc}") from exc
            if isinstance(loaded, dict):
                config.update({k: v for k, v in loaded.items() if k in DEFAULT_CONFIG})
    config.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(SiteConfig)}
    values = {k: v for k, v in config.items() if k in known}
    for key in ("posts_dir", "output_dir", "templates_dir"):
        values[key] = project_root / str(values[key])
    for key in ("port", "debounce_ms"):
        try:
            values[key] = int(values[key])
        except (TypeError, ValueError) as exc:
            raise ConfigError(config_path, f"{key} must be an integer") from exc
    return SiteConfig(project_root=project_root, **values)
