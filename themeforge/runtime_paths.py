"""Runtime path helpers for source and frozen executable modes."""

from __future__ import annotations

from pathlib import Path
import sys


def is_frozen() -> bool:
    """Return True when running from a PyInstaller bundle."""
    return bool(getattr(sys, "frozen", False))


def package_root() -> Path:
    """Directory holding the ``themeforge`` package resources."""
    if is_frozen():
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            candidate = Path(meipass) / "themeforge"
            return candidate if candidate.exists() else Path(meipass)
    return Path(__file__).resolve().parent


def bundled_templates_root() -> Path:
    """Templates shipped with themeforge, lowest priority in the template search path."""
    return package_root() / "templates"
