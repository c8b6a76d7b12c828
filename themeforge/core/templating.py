"""Placeholder substitution for theme templates.

Supported forms, where ``name`` is any template variable:

    {name}             the value as-is
    {name.strip}       the value without its leading ``#``
    {name.rgb}         ``r,g,b``
    {name.rgba}        ``rgba(r,g,b,1.0)``
    {name.rgba:0.5}    ``rgba(r,g,b,0.5)``
    {name.yaru}        closest Yaru icon theme variant

Placeholders naming an unknown variable are left untouched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from themeforge.core.colors import hex_to_rgb_string, hex_to_rgba, hex_to_yaru_theme, is_hex_color

PLACEHOLDER_RE = re.compile(
    r"\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"(?:\.(?P<modifier>strip|rgba|rgb|yaru)(?::(?P<alpha>\d*\.?\d+))?)?\}"
)

TEMPLATE_APP_NAME_MAP: dict[str, str] = {
    "alacritty.toml": "alacritty",
    "btop.theme": "btop",
    "chromium.theme": "chromium",
    "ghostty.conf": "ghostty",
    "hyprland.conf": "hyprland",
    "hyprlock.conf": "hyprlock",
    "icons.theme": "icons",
    "kitty.conf": "kitty",
    "mako.ini": "mako",
    "neovim.lua": "neovim",
    "swayosd.css": "swayosd",
    "vencord.theme.css": "vencord",
    "walker.css": "walker",
    "waybar.css": "waybar",
    "wofi.css": "wofi",
}


def app_name_for(file_name: str) -> str:
    """Application name a template belongs to, used to look up its overrides."""
    return TEMPLATE_APP_NAME_MAP.get(file_name) or file_name.split(".")[0]


def _substitute(match: re.Match[str], variables: Mapping[str, str]) -> str:
    name = match.group("name")
    if name not in variables:
        return match.group(0)
    value = str(variables[name])
    modifier = match.group("modifier")
    alpha = match.group("alpha")

    if modifier is None:
        return value
    if alpha is not None and modifier != "rgba":
        return match.group(0)
    if modifier == "strip":
        return value.replace("#", "", 1)
    if not (value.startswith("#") and is_hex_color(value)):
        return value
    if modifier == "rgb":
        return hex_to_rgb_string(value)
    if modifier == "rgba":
        return hex_to_rgba(value, float(alpha) if alpha is not None else 1.0)
    return hex_to_yaru_theme(value)


def render(template: str, variables: Mapping[str, str]) -> str:
    """Substitute every known placeholder in one pass."""
    return PLACEHOLDER_RE.sub(lambda match: _substitute(match, variables), template)


def placeholder_names(template: str) -> set[str]:
    """Variable names referenced by a template."""
    return {match.group("name") for match in PLACEHOLDER_RE.finditer(template)}
