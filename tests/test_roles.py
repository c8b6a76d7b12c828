"""Tests for themeforge.core.roles."""

import logging

import pytest

from themeforge.core.palette import Palette
from themeforge.core.roles import (
    ColorRole,
    ColorRoleMap,
    ExtendedColors,
    build_variables,
    default_role_map,
    map_colors_to_roles,
)
from themeforge.errors import FormatError, InvalidPaletteError

COLORS = [f"#{i:02x}{i:02x}{i:02x}" for i in range(0, 160, 10)]


class TestMapColorsToRoles:

    def test_every_role_is_assigned(self):
        role_map = map_colors_to_roles(COLORS)
        assert set(role_map) == {role.value for role in ColorRole}
        assert len(role_map) == len(ColorRole)

    def test_foreground_is_slot_fifteen_and_white_slot_seven(self):
        role_map = map_colors_to_roles(COLORS)
        assert role_map["background"] == COLORS[0]
        assert role_map["foreground"] == COLORS[15]
        assert role_map["white"] == COLORS[7]
        assert role_map["bright_white"] == COLORS[15]

    def test_ansi_and_index_names_agree(self):
        role_map = map_colors_to_roles(COLORS)
        assert role_map["red"] == role_map["color1"] == COLORS[1]
        assert role_map["bright_black"] == role_map["color8"] == COLORS[8]

    def test_ui_defaults(self):
        role_map = map_colors_to_roles(COLORS)
        assert role_map["accent"] == COLORS[4]
        assert role_map["cursor"] == COLORS[15]
        assert role_map["selection_foreground"] == COLORS[0]
        assert role_map["selection_background"] == COLORS[15]

    def test_extended_colors_take_precedence(self):
        role_map = map_colors_to_roles(COLORS, {"accent": "#FF0000", "cursor": "0f0"})
        assert role_map["accent"] == "#ff0000"
        assert role_map["cursor"] == "#00ff00"
        assert role_map["selection_background"] == COLORS[15]

    def test_accepts_palette_and_ignores_extra_colors(self):
        assert map_colors_to_roles(Palette.from_colors(COLORS)) == map_colors_to_roles(COLORS + ["#ffffff"])

    def test_short_palette_is_rejected(self):
        with pytest.raises(InvalidPaletteError) as excinfo:
            map_colors_to_roles(COLORS[:15])
        assert excinfo.value.count == 15

    def test_string_is_not_a_palette(self):
        with pytest.raises(InvalidPaletteError):
            map_colors_to_roles("#000000" * 16)

    def test_invalid_color_raises_format_error(self):
        with pytest.raises(FormatError):
            map_colors_to_roles(["nope"] + COLORS[1:])


class TestColorRoleMap:

    def test_missing_role_fails_at_construction(self):
        values = map_colors_to_roles(COLORS).as_dict()
        del values["accent"]
        with pytest.raises(InvalidPaletteError) as excinfo:
            ColorRoleMap(values)
        assert "accent" in excinfo.value.message

    def test_lookup_by_enum_or_name(self):
        role_map = map_colors_to_roles(COLORS)
        assert role_map[ColorRole.RED] == role_map["red"]

    def test_with_overrides_ignores_unknown_roles(self, caplog):
        role_map = map_colors_to_roles(COLORS)
        with caplog.at_level(logging.WARNING, logger="themeforge.core.roles"):
            updated = role_map.with_overrides({ColorRole.ACCENT: "#123456", "sparkle": "#ffffff"})
        assert updated["accent"] == "#123456"
        assert "sparkle" not in updated
        assert role_map["accent"] == COLORS[4]
        assert "sparkle" in caplog.text

    def test_from_partial_logs_each_fallback(self, caplog):
        with caplog.at_level(logging.INFO, logger="themeforge.core.roles"):
            role_map = ColorRoleMap.from_partial({"background": "#000000"})
        assert role_map["background"] == "#000000"
        assert role_map["red"] == default_role_map()["red"]
        assert "role accent unresolved" in caplog.text
        assert "role background unresolved" not in caplog.text

    def test_equal_maps_hash_equal(self):
        assert hash(map_colors_to_roles(COLORS)) == hash(map_colors_to_roles(list(COLORS)))

    def test_palette_round_trip(self):
        assert map_colors_to_roles(COLORS).palette() == Palette.from_colors(COLORS)


def test_extended_colors_normalize_and_drop_empty():
    extended = ExtendedColors.from_mapping({"accent": "ABC", "cursor": ""})
    assert extended.accent == "#aabbcc"
    assert extended.cursor is None
    assert extended.to_dict() == {"accent": "#aabbcc"}


def test_default_role_map_is_catppuccin():
    role_map = default_role_map()
    assert role_map["background"] == "#1e1e2e"
    assert role_map["foreground"] == "#cdd6f4"


def test_build_variables_adds_theme_type():
    variables = build_variables(map_colors_to_roles(COLORS), light_mode=True)
    assert variables["theme_type"] == "light"
    assert variables["background"] == COLORS[0]
    assert build_variables(map_colors_to_roles(COLORS))["theme_type"] == "dark"
