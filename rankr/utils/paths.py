# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for rankr.

Relative paths in config files (index directory, eval output directory, ...)
are resolved against the project root, which is the nearest ancestor holding
a pyproject.toml. When rankr runs outside a checkout we fall back to the
current working directory.
"""

from pathlib import Path


def resolve_project_root(start: Path | None = None) -> Path:
    """
    Walk up from `start` (default: the current working directory) looking for
    a pyproject.toml.

    Raises:
        RuntimeError: If no ancestor holds a pyproject.toml.
    """
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    raise RuntimeError(
        "Cannot find project root. No pyproject.toml found in any ancestor directory."
    )


def resolve_path(path_str: str, project_root: Path | None = None) -> Path:
    """
    Turn a config path into an absolute one.

    Absolute paths pass through untouched. Relative paths are anchored at the
    project root when one can be found, otherwise at the working directory.
    """
    path = Path(path_str)
    if path.is_absolute():
        return path
    if project_root is None:
        try:
            project_root = resolve_project_root()
        except RuntimeError:
            project_root = Path.cwd()
    return project_root / path


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if needed. Returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path
