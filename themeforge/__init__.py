"""Wallpaper-driven desktop theme generator."""

__version__ = "0.4.0"
