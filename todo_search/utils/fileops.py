"""File helpers for user configuration."""

from __future__ import annotations

from pathlib import Path


def secure_mkdir(path: Path) -> None:
    """Create directory with 0o700 permissions (owner-only access).

    If the directory already exists, its permissions are tightened to 0o700.
    Parent directories are created as needed.
    """
    path.mkdir(parents=True, exist_ok=True)
    path.chmod(0o700)


def secure_write_text(path: Path, content: str) -> None:
    """Write *content* to *path* and restrict it to owner read/write."""
    path.write_text(content, encoding="utf-8")
    path.chmod(0o600)
