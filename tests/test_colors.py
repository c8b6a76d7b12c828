"""Tests for themeforge.core.colors."""

import colorsys

import pytest

from themeforge.core.colors import (
    DEFAULT_YARU_THEME,
    brighten_color,
    color_distance,
    contrast_ratio,
    hex_to_hsl,
    hex_to_rgb,
    hex_to_rgb_string,
    hex_to_rgba,
    hex_to_yaru_theme,
    hsl_to_hex,
    hsl_to_rgb,
    is_hex_color,
    normalize_hex,
    rgb_to_hex,
    rgb_to_hsl,
    round_half_up,
)
from themeforge.errors import ErrorCode, FormatError


class TestNormalizeHex:

    def test_expands_short_form_and_lowercases(self):
        assert normalize_hex("ABC") == "#aabbcc"
        assert normalize_hex("#FFaa00") == "#ffaa00"

    def test_strips_surrounding_whitespace(self):
        assert normalize_hex("  #112233 ") == "#112233"

    @pytest.mark.parametrize("value", ["", "#12345", "xyz", "#gggggg", "12345678"])
    def test_rejects_malformed_values(self, value):
        with pytest.raises(FormatError) as excinfo:
            normalize_hex(value)
        assert excinfo.value.code is ErrorCode.COLOR_FORMAT

    def test_rejects_non_strings(self):
        with pytest.raises(FormatError):
            normalize_hex(None)  # type: ignore[arg-type]

    def test_is_hex_color(self):
        assert is_hex_color("#fff")
        assert is_hex_color("a1b2c3")
        assert not is_hex_color("rgb(1,2,3)")
        assert not is_hex_color(123)


class TestConversions:

    def test_round_half_up_differs_from_bankers_rounding(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(127.5) == 128

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#ff8000") == (255, 128, 0)

    def test_rgb_to_hex_clamps(self):
        assert rgb_to_hex(300, -4, 127.5) == "#ff0080"

    def test_primary_colors_to_hsl(self):
        assert rgb_to_hsl(255, 0, 0) == (0.0, 100.0, 50.0)
        h, s, l = rgb_to_hsl(0, 0, 255)
        assert h == pytest.approx(240)
        assert s == pytest.approx(100)
        assert l == pytest.approx(50)

    def test_gray_has_no_hue_or_saturation(self):
        h, s, l = rgb_to_hsl(128, 128, 128)
        assert (h, s) == (0.0, 0.0)
        assert l == pytest.approx(50.196, abs=0.01)

    def test_hsl_matches_colorsys_hls(self):
        h, l, s = colorsys.rgb_to_hls(18 / 255, 200 / 255, 140 / 255)
        assert rgb_to_hsl(18, 200, 140) == pytest.approx((h * 360, s * 100, l * 100))
        assert hsl_to_rgb(h * 360, s * 100, l * 100) == pytest.approx((18, 200, 140))

    def test_hsl_to_hex_rounds_half_up(self):
        assert hsl_to_hex(0, 100, 50) == "#ff0000"
        assert hsl_to_hex(120, 100, 25) == "#008000"

    def test_hue_wraps(self):
        assert hsl_to_hex(360, 100, 50) == hsl_to_hex(0, 100, 50)
        assert hsl_to_hex(-120, 100, 50) == hsl_to_hex(240, 100, 50)

    @pytest.mark.parametrize(
        "color",
        ["#000000", "#ffffff", "#1e1e2e", "#f38ba8", "#89b4fa", "#7f7f7f", "#0a7b3c", "#fe01ba"],
    )
    def test_hex_hsl_round_trip_within_one_step(self, color):
        back = hex_to_rgb(hsl_to_hex(*hex_to_hsl(color)))
        original = hex_to_rgb(color)
        assert all(abs(a - b) <= 1 for a, b in zip(back, original))


class TestHelpers:

    def test_brighten_color_uses_headroom(self):
        assert brighten_color("#000000", 50) == "#808080"
        assert brighten_color("#ffffff", 50) == "#ffffff"

    def test_brighten_color_ignores_negative_percent(self):
        assert brighten_color("#336699", -20) == normalize_hex("#336699")

    def test_color_distance(self):
        assert color_distance("#000000", "#000000") == 0
        assert color_distance("#000000", "#ffffff") == pytest.approx(441.67, abs=0.01)

    def test_rgb_string(self):
        assert hex_to_rgb_string("#112233") == "17,34,51"

    def test_rgba_formats_alpha_as_float(self):
        assert hex_to_rgba("#4488ff", 0.5) == "rgba(68,136,255,0.5)"
        assert hex_to_rgba("#4488ff") == "rgba(68,136,255,1.0)"
        assert hex_to_rgba("#4488ff", 1) == "rgba(68,136,255,1.0)"

    def test_contrast_ratio_extremes(self):
        assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)
        assert contrast_ratio("#777777", "#777777") == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "color,expected",
        [
            ("#ff0000", "Yaru-red"),
            ("#ff0020", "Yaru-red"),
            ("#ffd700", "Yaru-yellow"),
            ("#00ff00", "Yaru-sage"),
            ("#0000ff", "Yaru-blue"),
            ("#8000ff", "Yaru-purple"),
            ("#ff00ff", "Yaru-magenta"),
        ],
    )
    def test_yaru_theme_by_hue(self, color, expected):
        assert hex_to_yaru_theme(color) == expected

    def test_yaru_theme_for_gray_is_default(self):
        assert hex_to_yaru_theme("#808080") == DEFAULT_YARU_THEME
