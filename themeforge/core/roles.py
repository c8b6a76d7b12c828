"""Semantic color roles and the palette-to-role mapping.

Convention: ``foreground`` is palette slot 15 (bright white) and ``white`` is
slot 7. Every generator and importer produces palettes with that layout.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, fields
from enum import Enum

from themeforge.core.colors import normalize_hex
from themeforge.core.palette import Palette
from themeforge.errors import InvalidPaletteError

logger = logging.getLogger(__name__)


class ColorRole(str, Enum):
    BACKGROUND = "background"
    FOREGROUND = "foreground"
    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    BRIGHT_BLACK = "bright_black"
    BRIGHT_RED = "bright_red"
    BRIGHT_GREEN = "bright_green"
    BRIGHT_YELLOW = "bright_yellow"
    BRIGHT_BLUE = "bright_blue"
    BRIGHT_MAGENTA = "bright_magenta"
    BRIGHT_CYAN = "bright_cyan"
    BRIGHT_WHITE = "bright_white"
    COLOR0 = "color0"
    COLOR1 = "color1"
    COLOR2 = "color2"
    COLOR3 = "color3"
    COLOR4 = "color4"
    COLOR5 = "color5"
    COLOR6 = "color6"
    COLOR7 = "color7"
    COLOR8 = "color8"
    COLOR9 = "color9"
    COLOR10 = "color10"
    COLOR11 = "color11"
    COLOR12 = "color12"
    COLOR13 = "color13"
    COLOR14 = "color14"
    COLOR15 = "color15"
    ACCENT = "accent"
    CURSOR = "cursor"
    SELECTION_FOREGROUND = "selection_foreground"
    SELECTION_BACKGROUND = "selection_background"


# ANSI names in palette index order.
ANSI_ROLES: tuple[ColorRole, ...] = (
    ColorRole.BLACK,
    ColorRole.RED,
    ColorRole.GREEN,
    ColorRole.YELLOW,
    ColorRole.BLUE,
    ColorRole.MAGENTA,
    ColorRole.CYAN,
    ColorRole.WHITE,
    ColorRole.BRIGHT_BLACK,
    ColorRole.BRIGHT_RED,
    ColorRole.BRIGHT_GREEN,
    ColorRole.BRIGHT_YELLOW,
    ColorRole.BRIGHT_BLUE,
    ColorRole.BRIGHT_MAGENTA,
    ColorRole.BRIGHT_CYAN,
    ColorRole.BRIGHT_WHITE,
)

INDEX_ROLES: tuple[ColorRole, ...] = tuple(ColorRole(f"color{i}") for i in range(16))

ROLE_NAMES: frozenset[str] = frozenset(role.value for role in ColorRole)

DEFAULT_COLORS: dict[str, str] = {
    "background": "#1e1e2e",
    "foreground": "#cdd6f4",
    "color0": "#45475a",
    "color1": "#f38ba8",
    "color2": "#a6e3a1",
    "color3": "#f9e2af",
    "color4": "#89b4fa",
    "color5": "#cba6f7",
    "color6": "#94e2d5",
    "color7": "#bac2de",
    "color8": "#585b70",
    "color9": "#f38ba8",
    "color10": "#a6e3a1",
    "color11": "#f9e2af",
    "color12": "#89b4fa",
    "color13": "#cba6f7",
    "color14": "#94e2d5",
    "color15": "#cdd6f4",
}


@dataclass(frozen=True, slots=True)
class ExtendedColors:
    """Explicit UI colors that win over the palette-derived defaults."""

    accent: str | None = None
    cursor: str | None = None
    selection_foreground: str | None = None
    selection_background: str | None = None

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if value is not None:
                object.__setattr__(self, item.name, normalize_hex(value))

    @classmethod
    def from_mapping(cls, values: Mapping[str, str] | None) -> ExtendedColors:
        values = values or {}
        return cls(**{item.name: values.get(item.name) or None for item in fields(cls)})

    def to_dict(self) -> dict[str, str]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not None
        }


def _role_key(role: ColorRole | str) -> str:
    return role.value if isinstance(role, ColorRole) else str(role)


class ColorRoleMap(Mapping[str, str]):
    """Immutable mapping holding a color for every ColorRole.

    Keys may be given as ColorRole members or their string values.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[ColorRole | str, str]) -> None:
        resolved = {_role_key(key): value for key, value in values.items()}
        missing = [role.value for role in ColorRole if role.value not in resolved]
        if missing:
            raise InvalidPaletteError(
                message=f"Role map is missing roles: {', '.join(missing)}",
                details={"missing": ", ".join(missing)},
            )
        self._values = {role.value: normalize_hex(resolved[role.value]) for role in ColorRole}

    @classmethod
    def from_partial(cls, values: Mapping[ColorRole | str, str]) -> ColorRoleMap:
        """Fill unresolved roles from the default palette and log each fallback."""
        merged = default_role_map().as_dict()
        for key, value in values.items():
            name = _role_key(key)
            if name in ROLE_NAMES and value:
                merged[name] = value
        for role in ColorRole:
            supplied = values.get(role) or values.get(role.value)
            if not supplied:
                logger.info("role %s unresolved, using default %s", role.value, merged[role.value])
        return cls(merged)

    def __getitem__(self, key: ColorRole | str) -> str:
        return self._values[_role_key(key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ColorRoleMap(background={self['background']!r}, foreground={self['foreground']!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ColorRoleMap):
            return self._values == other._values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._values.items()))

    def with_overrides(self, overrides: Mapping[ColorRole | str, str] | None) -> ColorRoleMap:
        """New map with known roles replaced; unknown names are ignored."""
        if not overrides:
            return self
        merged = dict(self._values)
        for key, value in overrides.items():
            name = _role_key(key)
            if name not in ROLE_NAMES:
                logger.warning("ignoring override for unknown role %r", name)
                continue
            merged[name] = value
        return ColorRoleMap(merged)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def palette(self) -> Palette:
        return Palette.from_colors([self._values[role.value] for role in INDEX_ROLES])


def map_colors_to_roles(
    palette: Palette | Sequence[str],
    extended: ExtendedColors | Mapping[str, str] | None = None,
) -> ColorRoleMap:
    """Assign every role a color from a 16-color palette plus optional extended colors."""
    if isinstance(palette, str) or not isinstance(palette, (Palette, Sequence)):
        raise InvalidPaletteError(message="Palette must be a sequence of colors")
    if len(palette) < 16:
        raise InvalidPaletteError(count=len(palette))
    colors = [normalize_hex(color) for color in list(palette)[:16]]
    if not isinstance(extended, ExtendedColors):
        extended = ExtendedColors.from_mapping(extended)

    values: dict[str, str] = {
        ColorRole.BACKGROUND.value: colors[0],
        ColorRole.FOREGROUND.value: colors[15],
    }
    for index, role in enumerate(ANSI_ROLES):
        values[role.value] = colors[index]
    for index, role in enumerate(INDEX_ROLES):
        values[role.value] = colors[index]

    background = values[ColorRole.BACKGROUND.value]
    foreground = values[ColorRole.FOREGROUND.value]
    values[ColorRole.ACCENT.value] = extended.accent or colors[4]
    values[ColorRole.CURSOR.value] = extended.cursor or foreground
    values[ColorRole.SELECTION_FOREGROUND.value] = extended.selection_foreground or background
    values[ColorRole.SELECTION_BACKGROUND.value] = extended.selection_background or foreground
    return ColorRoleMap(values)


def default_role_map() -> ColorRoleMap:
    """Role map for the built-in default palette."""
    role_map = map_colors_to_roles([DEFAULT_COLORS[f"color{i}"] for i in range(16)])
    return role_map.with_overrides(
        {
            ColorRole.BACKGROUND: DEFAULT_COLORS["background"],
            ColorRole.FOREGROUND: DEFAULT_COLORS["foreground"],
            ColorRole.SELECTION_FOREGROUND: DEFAULT_COLORS["background"],
            ColorRole.SELECTION_BACKGROUND: DEFAULT_COLORS["foreground"],
            ColorRole.CURSOR: DEFAULT_COLORS["foreground"],
        }
    )


def build_variables(role_map: ColorRoleMap, light_mode: bool = False) -> dict[str, str]:
    """Flatten a role map into template variables, adding ``theme_type``."""
    variables = role_map.as_dict()
    variables["theme_type"] = "light" if light_mode else "dark"
    return variables
