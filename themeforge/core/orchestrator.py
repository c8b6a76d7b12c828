"""Apply a role map to the live desktop: render, wire up, switch theme."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from themeforge.core.appliers import GtkApplier, VencordApplier, VscodeApplier, ZedApplier
from themeforge.core.custom_apps import DEFAULT_HOOK_TIMEOUT, apply_custom_apps, discover_custom_apps
from themeforge.core.fileops import clean_directory, copy_file, create_symlink, ensure_dir, remove_path
from themeforge.core.renderer import (
    OVERRIDE_TEMPLATE,
    AppOverrides,
    RenderResult,
    TemplateRenderer,
    ThemeSettings,
)
from themeforge.core.roles import ColorRoleMap, build_variables
from themeforge.core.system import FALLBACK_THEME, DesktopSession
from themeforge.errors import ExternalCommandError

logger = logging.getLogger(__name__)

BACKGROUNDS_DIR = "backgrounds"
LIGHT_MODE_MARKER = "light.mode"
DEFAULT_THEME_NAME = "themeforge"


@dataclass
class ThemeContext:
    """Where a theme is written and which desktop it is applied to."""

    theme_dir: Path
    config_home: Path
    home: Path
    template_dirs: list[Path]
    custom_apps_dir: Path | None = None
    theme_name: str = DEFAULT_THEME_NAME
    session: DesktopSession = field(default_factory=DesktopSession)
    hook_timeout: float = DEFAULT_HOOK_TIMEOUT

    @property
    def override_link(self) -> Path:
        return self.config_home / "themeforge" / "theme.override.css"

    @property
    def background_link(self) -> Path:
        return self.config_home / "omarchy" / "current" / "background"


@dataclass
class ApplyResult:
    success: bool
    message: str
    render: RenderResult = field(default_factory=RenderResult)
    warnings: list[str] = field(default_factory=list)
    wallpaper: Path | None = None


def _set_light_marker(directory: Path, light_mode: bool) -> None:
    marker = directory / LIGHT_MODE_MARKER
    if light_mode:
        marker.touch(exist_ok=True)
    elif marker.exists():
        marker.unlink()


def _copy_images(images: Iterable[str | Path], destination: Path, warnings: list[str]) -> list[Path]:
    copied: list[Path] = []
    for image in images:
        source = Path(image)
        try:
            copied.append(copy_file(source, destination / source.name))
        except OSError as exc:
            logger.error("could not copy image %s: %s", source, exc)
            warnings.append(f"could not copy image {source.name}")
    return copied


class ThemeOrchestrator:
    """Sequences a theme application over an explicit ThemeContext."""

    def __init__(self, context: ThemeContext) -> None:
        self.context = context
        self.renderer = TemplateRenderer(context.template_dirs)

    def apply_theme(
        self,
        role_map: ColorRoleMap,
        wallpaper: str | Path | None = None,
        settings: ThemeSettings | None = None,
        light_mode: bool = False,
        app_overrides: AppOverrides | None = None,
        additional_images: Sequence[str | Path] = (),
        sync: bool = False,
    ) -> ApplyResult:
        """Write the theme and hook it into the desktop.

        Only failing to prepare the theme directory aborts. Every later step
        logs its failure, adds a warning and lets the remaining steps run.
        """
        ctx = self.context
        settings = settings or ThemeSettings()
        warnings: list[str] = []

        try:
            ensure_dir(ctx.theme_dir)
            backgrounds = ensure_dir(ctx.theme_dir / BACKGROUNDS_DIR)
            clean_directory(backgrounds)
        except OSError as exc:
            logger.error("cannot prepare theme directory %s: %s", ctx.theme_dir, exc)
            return ApplyResult(False, f"Cannot prepare theme directory {ctx.theme_dir}: {exc}")

        copied_wallpaper: Path | None = None
        if wallpaper:
            copied = _copy_images([wallpaper], backgrounds, warnings)
            copied_wallpaper = copied[0] if copied else None
        if additional_images:
            _copy_images(additional_images, backgrounds, warnings)

        variables = build_variables(role_map, light_mode)
        render = self.renderer.render_all(ctx.theme_dir, variables, settings, app_overrides)
        warnings.extend(f"{outcome.template}: {outcome.reason}" for outcome in render.failed)
        self._link_override(warnings)

        self._run_appliers(settings, variables, render, warnings)

        try:
            _set_light_marker(ctx.theme_dir, light_mode)
        except OSError as exc:
            logger.error("could not update %s: %s", LIGHT_MODE_MARKER, exc)
            warnings.append(f"could not update {LIGHT_MODE_MARKER}")

        if ctx.custom_apps_dir is not None:
            apps = discover_custom_apps(ctx.custom_apps_dir, home=ctx.home, warnings=warnings)
            custom = apply_custom_apps(
                apps,
                self.renderer,
                ctx.theme_dir,
                variables,
                app_overrides,
                session=ctx.session,
                hook_timeout=ctx.hook_timeout,
            )
            render.extend(custom.render)
            warnings.extend(custom.warnings)

        self._switch_theme(ctx.theme_name, sync, warnings)

        message = f"Applied theme {ctx.theme_name!r} ({len(render.written)} files)"
        if warnings:
            message += f" with {len(warnings)} warning(s)"
        logger.info(message)
        return ApplyResult(True, message, render, warnings, copied_wallpaper)

    def _link_override(self, warnings: list[str]) -> None:
        source = self.context.theme_dir / OVERRIDE_TEMPLATE
        if not source.is_file():
            return
        try:
            create_symlink(source, self.context.override_link, label="theme override")
        except OSError as exc:
            logger.error("could not link theme override: %s", exc)
            warnings.append("could not link theme override")

    def _run_appliers(
        self,
        settings: ThemeSettings,
        variables: dict[str, str],
        render: RenderResult,
        warnings: list[str],
    ) -> None:
        ctx = self.context
        steps = []
        if settings.include_gtk:
            steps.append(("GTK", lambda: GtkApplier(ctx.config_home).apply(ctx.theme_dir)))
        if settings.include_vencord:
            steps.append(("Vencord", lambda: VencordApplier(ctx.home).apply(ctx.theme_dir)))
        if settings.include_zed:
            steps.append(("Zed", lambda: ZedApplier(ctx.config_home).apply(ctx.theme_dir)))
        if settings.include_vscode:
            steps.append(("VSCode", lambda: render.extend(VscodeApplier(ctx.home, self.renderer).apply(variables))))

        for label, step in steps:
            try:
                step()
            except OSError as exc:
                logger.error("%s integration failed: %s", label, exc)
                warnings.append(f"{label} integration failed: {exc}")

    def _switch_theme(self, theme_name: str, sync: bool, warnings: list[str]) -> None:
        session = self.context.session
        if session.runner.which(session.theme_switch_command) is None:
            logger.warning("%s not found, theme files written but not activated", session.theme_switch_command)
            warnings.append(f"{session.theme_switch_command} not found; theme not activated")
            return
        try:
            session.switch_theme(theme_name, sync=sync)
        except ExternalCommandError as exc:
            logger.error("theme switch failed: %s", exc.message)
            warnings.append(f"theme switch failed: {exc.message}")
            return
        session.reload_portal(sync=sync)

    def export_theme(
        self,
        role_map: ColorRoleMap,
        destination: str | Path,
        wallpaper: str | Path | None = None,
        settings: ThemeSettings | None = None,
        light_mode: bool = False,
        app_overrides: AppOverrides | None = None,
    ) -> RenderResult:
        """Render a complete theme into ``destination`` without touching the desktop."""
        dest = ensure_dir(destination)
        backgrounds = ensure_dir(dest / BACKGROUNDS_DIR)
        if wallpaper:
            source = Path(wallpaper)
            copy_file(source, backgrounds / source.name)
        variables = build_variables(role_map, light_mode)
        result = self.renderer.render_all(dest, variables, settings, app_overrides)
        _set_light_marker(dest, light_mode)
        logger.info("exported theme to %s", dest)
        return result

    def clear_theme(self, sync: bool = False) -> list[str]:
        """Remove GTK css and the theme override, then fall back to the stock theme."""
        ctx = self.context
        warnings: list[str] = []
        for path in GtkApplier(ctx.config_home).clear():
            logger.info("deleted %s", path)
        for path in (ctx.override_link, ctx.theme_dir / OVERRIDE_TEMPLATE):
            if remove_path(path):
                logger.info("deleted %s", path)
        self._switch_theme(FALLBACK_THEME, sync, warnings)
        return warnings

    def apply_wallpaper(self, wallpaper: str | Path) -> None:
        """Point the desktop background link at ``wallpaper`` and restart the wallpaper daemon."""
        create_symlink(Path(wallpaper), self.context.background_link, label="wallpaper")
        try:
            self.context.session.restart_wallpaper(self.context.background_link)
        except ExternalCommandError as exc:
            logger.warning("wallpaper daemon not restarted: %s", exc.message)
