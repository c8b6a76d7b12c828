"""Integrations that need more than a rendered file in the theme directory."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from themeforge.core.fileops import copy_file, ensure_dir, remove_path
from themeforge.core.renderer import (
    GTK_FILE_MODE,
    GTK_TEMPLATE,
    VENCORD_TEMPLATE,
    VSCODE_EXTENSION_DIR,
    ZED_TEMPLATE,
    RenderResult,
    TemplateRenderer,
)

logger = logging.getLogger(__name__)

GTK_CONFIG_DIRS = ("gtk-3.0", "gtk-4.0")

# Relative to $HOME. A path is used only when its parent (the app's config dir) exists.
VENCORD_THEME_DIRS: tuple[tuple[str, ...], ...] = (
    (".var", "app", "dev.vencord.Vesktop", "config", "vesktop", "themes"),
    (".config", "Vesktop", "themes"),
    (".config", "Vencord", "themes"),
    (".var", "app", "com.discordapp.Discord", "config", "Vencord", "themes"),
)


class GtkApplier:
    """Copies gtk.css into the GTK 3 and GTK 4 config directories."""

    def __init__(self, config_home: str | Path) -> None:
        self.config_home = Path(config_home)

    def targets(self) -> list[Path]:
        return [self.config_home / name / GTK_TEMPLATE for name in GTK_CONFIG_DIRS]

    def apply(self, theme_dir: str | Path) -> list[Path]:
        source = Path(theme_dir) / GTK_TEMPLATE
        if not source.is_file():
            logger.info("%s not in theme directory, skipping GTK", GTK_TEMPLATE)
            return []
        written = [copy_file(source, target, mode=GTK_FILE_MODE) for target in self.targets()]
        logger.info("copied %s to %d GTK config dir(s)", GTK_TEMPLATE, len(written))
        return written

    def clear(self) -> list[Path]:
        return [target for target in self.targets() if remove_path(target)]


class VencordApplier:
    """Copies the Vencord theme into every installed Vencord/Vesktop."""

    output_name = "themeforge.theme.css"

    def __init__(self, home: str | Path) -> None:
        self.home = Path(home)

    def installed_theme_dirs(self) -> list[Path]:
        dirs = [self.home.joinpath(*parts) for parts in VENCORD_THEME_DIRS]
        return [path for path in dirs if path.parent.is_dir()]

    def apply(self, theme_dir: str | Path) -> list[Path]:
        source = Path(theme_dir) / VENCORD_TEMPLATE
        if not source.is_file():
            logger.info("%s not in theme directory, skipping Vencord", VENCORD_TEMPLATE)
            return []
        written = [copy_file(source, ensure_dir(path) / self.output_name) for path in self.installed_theme_dirs()]
        if not written:
            logger.info("no Vencord/Vesktop installation found")
        return written

    def clear(self) -> list[Path]:
        return [
            path / self.output_name
            for path in self.installed_theme_dirs()
            if remove_path(path / self.output_name)
        ]


class ZedApplier:
    output_name = "themeforge.json"

    def __init__(self, config_home: str | Path) -> None:
        self.target = Path(config_home) / "zed" / "themes" / self.output_name

    def apply(self, theme_dir: str | Path) -> list[Path]:
        source = Path(theme_dir) / ZED_TEMPLATE
        if not source.is_file():
            logger.info("%s not in theme directory, skipping Zed", ZED_TEMPLATE)
            return []
        return [copy_file(source, self.target)]

    def clear(self) -> list[Path]:
        return [self.target] if remove_path(self.target) else []


class VscodeApplier:
    """Renders the bundled VSCode extension into ~/.vscode/extensions."""

    extension_name = "theme-themeforge"

    def __init__(self, home: str | Path, renderer: TemplateRenderer) -> None:
        self.target = Path(home) / ".vscode" / "extensions" / self.extension_name
        self.renderer = renderer

    def apply(self, variables: Mapping[str, str]) -> RenderResult:
        source = self.renderer.resolve(VSCODE_EXTENSION_DIR)
        if source is None or not source.is_dir():
            logger.info("no %s template directory, skipping VSCode", VSCODE_EXTENSION_DIR)
            return RenderResult()
        ensure_dir(self.target)
        result = self.renderer.render_tree(source, self.target, variables)
        logger.info("installed VSCode extension to %s", self.target)
        return result

    def clear(self) -> list[Path]:
        return [self.target] if remove_path(self.target) else []
