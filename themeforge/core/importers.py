"""Import and export of external color scheme formats.

Base16 YAML schemes and flat ``colors.toml`` files are turned into a 16-color
Palette. Parsing is pure: text in, value or typed error out.
"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field

import yaml

from themeforge.core.palette import Palette
from themeforge.core.roles import ColorRoleMap, ExtendedColors, map_colors_to_roles
from themeforge.errors import ImportFormatError, InvalidColorError, MissingKeyError

_SIX_DIGIT_HEX = re.compile(r"^#?[0-9a-fA-F]{6}$")

BASE16_KEYS: tuple[str, ...] = tuple(f"base0{digit}" for digit in "0123456789ABCDEF")

# Palette slot -> Base16 key. Bright 9-14 reuse the normal hues.
BASE16_TO_ANSI: tuple[str, ...] = (
    "base00",
    "base08",
    "base0B",
    "base0A",
    "base0D",
    "base0E",
    "base0C",
    "base05",
    "base03",
    "base08",
    "base0B",
    "base0A",
    "base0D",
    "base0E",
    "base0C",
    "base07",
)

TOML_REQUIRED_KEYS: tuple[str, ...] = ("background", "foreground", *(f"color{i}" for i in range(16)))
TOML_EXTENDED_KEYS: tuple[str, ...] = ("accent", "cursor", "selection_foreground", "selection_background")

_BASE16_DETECT = (re.compile(r"base00\s*:", re.IGNORECASE), re.compile(r"base0F\s*:", re.IGNORECASE))
_TOML_DETECT = (
    re.compile(r"^\s*background\s*=", re.MULTILINE),
    re.compile(r"^\s*foreground\s*=", re.MULTILINE),
    re.compile(r"^\s*color0\s*=", re.MULTILINE),
)


@dataclass(frozen=True, slots=True)
class Base16Scheme:
    scheme: str
    author: str
    palette: Palette

    def to_role_map(self) -> ColorRoleMap:
        return map_colors_to_roles(self.palette)


@dataclass(frozen=True, slots=True)
class ColorsToml:
    palette: Palette
    background: str
    foreground: str
    extended: ExtendedColors = field(default_factory=ExtendedColors)

    def to_role_map(self) -> ColorRoleMap:
        """Role map honoring the file's own background and foreground entries."""
        role_map = map_colors_to_roles(self.palette, self.extended)
        overrides = {"background": self.background, "foreground": self.foreground}
        extended = self.extended.to_dict()
        overrides["cursor"] = extended.get("cursor", self.foreground)
        overrides["selection_foreground"] = extended.get("selection_foreground", self.background)
        overrides["selection_background"] = extended.get("selection_background", self.foreground)
        return role_map.with_overrides(overrides)


def is_six_digit_hex(value: object) -> bool:
    return isinstance(value, str) and bool(_SIX_DIGIT_HEX.match(value.strip()))


def _hex(value: str) -> str:
    value = value.strip()
    return (value if value.startswith("#") else f"#{value}").lower()


def _validate(values: Mapping[str, object], required: tuple[str, ...]) -> None:
    """Raise for every missing key first, then for every malformed value."""
    missing = [key for key in required if not values.get(key)]
    if missing:
        raise MissingKeyError(keys=missing)
    invalid = [key for key in required if not is_six_digit_hex(values[key])]
    if invalid:
        raise InvalidColorError(keys=invalid)


def _load_yaml_mapping(text: str) -> dict[str, object]:
    if not isinstance(text, str) or not text.strip():
        raise ImportFormatError(message="Invalid content: expected YAML text")
    try:
        # BaseLoader keeps every scalar a string, so 000000 is not read as an int.
        data = yaml.load(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise ImportFormatError(details={"original": str(exc)}) from exc
    if not isinstance(data, dict):
        raise ImportFormatError(message="Base16 scheme must be a YAML mapping")
    return data


def parse_base16_yaml(text: str) -> Base16Scheme:
    """Parse a Base16 scheme with top-level ``baseXX`` keys or a nested ``palette:`` block."""
    data = _load_yaml_mapping(text)
    colors: dict[str, object] = dict(data)
    nested = data.get("palette")
    if isinstance(nested, dict):
        colors.update(nested)

    _validate(colors, BASE16_KEYS)
    palette = Palette.from_colors([_hex(str(colors[key])) for key in BASE16_TO_ANSI])
    scheme = data.get("scheme") or data.get("name") or "Unknown Scheme"
    author = data.get("author") or "Unknown Author"
    return Base16Scheme(scheme=str(scheme), author=str(author), palette=palette)


def _flatten_one_level(data: Mapping[str, object]) -> dict[str, object]:
    flat: dict[str, object] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for inner_key, inner_value in value.items():
                if not isinstance(inner_value, dict):
                    flat.setdefault(inner_key, inner_value)
        else:
            flat[key] = value
    return flat


def parse_colors_toml(text: str) -> ColorsToml:
    """Parse a flat ``colors.toml`` (``background``, ``foreground``, ``color0``..``color15``)."""
    if not isinstance(text, str) or not text.strip():
        raise ImportFormatError(message="Invalid content: expected TOML text")
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ImportFormatError(details={"original": str(exc)}) from exc

    values = _flatten_one_level(data)
    _validate(values, TOML_REQUIRED_KEYS)

    palette = Palette.from_colors([_hex(str(values[f"color{i}"])) for i in range(16)])
    extended = ExtendedColors.from_mapping(
        {key: _hex(str(values[key])) for key in TOML_EXTENDED_KEYS if is_six_digit_hex(values.get(key))}
    )
    return ColorsToml(
        palette=palette,
        background=_hex(str(values["background"])),
        foreground=_hex(str(values["foreground"])),
        extended=extended,
    )


def generate_colors_toml(role_map: ColorRoleMap) -> str:
    """Serialize a role map in the flat ``colors.toml`` layout."""
    lines = [
        "# themeforge color scheme",
        "",
        "# UI colors (extended)",
        f'accent = "{role_map["accent"]}"',
        f'cursor = "{role_map["cursor"]}"',
        "",
        "# Primary colors",
        f'foreground = "{role_map["foreground"]}"',
        f'background = "{role_map["background"]}"',
        "",
        "# Selection colors",
        f'selection_foreground = "{role_map["selection_foreground"]}"',
        f'selection_background = "{role_map["selection_background"]}"',
        "",
        "# Normal colors (ANSI 0-7)",
        *(f'color{i} = "{role_map[f"color{i}"]}"' for i in range(8)),
        "",
        "# Bright colors (ANSI 8-15)",
        *(f'color{i} = "{role_map[f"color{i}"]}"' for i in range(8, 16)),
        "",
    ]
    return "\n".join(lines)


def is_base16_format(text: str) -> bool:
    return isinstance(text, str) and all(pattern.search(text) for pattern in _BASE16_DETECT)


def is_colors_toml_format(text: str) -> bool:
    return isinstance(text, str) and all(pattern.search(text) for pattern in _TOML_DETECT)
