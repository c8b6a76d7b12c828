"""Shared fixtures: generated wallpapers and logger cleanup."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

CATPPUCCIN_BASE16 = """\
scheme: "Catppuccin Mocha"
author: "https://github.com/catppuccin/catppuccin"
base00: "1e1e2e"
base01: "181825"
base02: "313244"
base03: "45475a"
base04: "585b70"
base05: "cdd6f4"
base06: "f5e0dc"
base07: "b4befe"
base08: "f38ba8"
base09: "fab387"
base0A: "f9e2af"
base0B: "a6e3a1"
base0C: "94e2d5"
base0D: "89b4fa"
base0E: "cba6f7"
base0F: "f2cdcd"
"""


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("themeforge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def solid_image(tmp_path: Path):
    """Factory writing a single-color PNG."""

    def _make(color: str = "#ff0000", size: tuple[int, int] = (1, 1), name: str = "solid.png") -> Path:
        path = tmp_path / name
        Image.new("RGB", size, color).save(path)
        return path

    return _make


@pytest.fixture
def noise_image(tmp_path: Path) -> Path:
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
    path = tmp_path / "noise.png"
    Image.fromarray(pixels, "RGB").save(path)
    return path


@pytest.fixture
def gray_image(tmp_path: Path) -> Path:
    ramp = np.linspace(32, 224, 64, dtype=np.uint8)
    pixels = np.repeat(np.tile(ramp, (64, 1))[:, :, None], 3, axis=2)
    path = tmp_path / "gray.png"
    Image.fromarray(pixels, "RGB").save(path)
    return path


@pytest.fixture
def gradient_image(tmp_path: Path) -> Path:
    x = np.linspace(0, 255, 48, dtype=np.uint8)
    y = np.linspace(255, 0, 48, dtype=np.uint8)
    pixels = np.zeros((48, 48, 3), dtype=np.uint8)
    pixels[:, :, 0] = x[None, :]
    pixels[:, :, 2] = y[:, None]
    pixels[:, :, 1] = 96
    path = tmp_path / "gradient.png"
    Image.fromarray(pixels, "RGB").save(path)
    return path


@pytest.fixture
def base16_file(tmp_path: Path) -> Path:
    path = tmp_path / "mocha.yaml"
    path.write_text(CATPPUCCIN_BASE16, encoding="utf-8")
    return path


@pytest.fixture
def base16_text() -> str:
    return CATPPUCCIN_BASE16
