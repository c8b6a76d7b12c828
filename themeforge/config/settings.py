"""Application settings via QSettings."""

from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtCore import QSettings

from themeforge.core.orchestrator import DEFAULT_THEME_NAME, ThemeContext
from themeforge.core.palette import ExtractionMode
from themeforge.core.renderer import ThemeSettings
from themeforge.core.system import DEFAULT_THEME_SWITCH_COMMAND, DEFAULT_TIMEOUT, CommandRunner, DesktopSession
from themeforge.runtime_paths import bundled_templates_root

_INCLUDE_FLAGS = ("gtk", "vencord", "zed", "vscode", "neovim")


def _xdg_dir(variable: str, fallback: str) -> Path:
    raw = (os.environ.get(variable) or "").strip()
    if raw and Path(raw).is_absolute():
        return Path(raw)
    return Path.home() / fallback


def _to_bool(raw: object, default: bool) -> bool:
    # QSettings INI backends hand booleans back as strings.
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value in {"true", "1", "yes", "on"}:
            return True
        if value in {"false", "0", "no", "off"}:
            return False
    return default


class AppSettings:
    """Wraps QSettings for persistent themeforge configuration."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings("themeforge", "themeforge")

    def _flag(self, key: str, default: bool) -> bool:
        return _to_bool(self._qs.value(key, default), default)

    # -- theme --

    @property
    def theme_name(self) -> str:
        raw = self._qs.value("theme/name", DEFAULT_THEME_NAME, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_THEME_NAME

    @theme_name.setter
    def theme_name(self, value: str) -> None:
        cleaned = (value or "").strip() or DEFAULT_THEME_NAME
        self._qs.setValue("theme/name", cleaned)

    @property
    def extraction_mode(self) -> ExtractionMode:
        raw = self._qs.value("theme/extraction_mode", ExtractionMode.NORMAL.value, type=str)
        return ExtractionMode.parse(raw)

    @extraction_mode.setter
    def extraction_mode(self, value: ExtractionMode | str) -> None:
        self._qs.setValue("theme/extraction_mode", ExtractionMode.parse(value).value)

    @property
    def light_mode(self) -> bool:
        return self._flag("theme/light_mode", False)

    @light_mode.setter
    def light_mode(self, value: bool) -> None:
        self._qs.setValue("theme/light_mode", bool(value))

    # -- integrations --

    def include(self, integration: str) -> bool:
        if integration not in _INCLUDE_FLAGS:
            raise KeyError(integration)
        return self._flag(f"integrations/include_{integration}", True)

    def set_include(self, integration: str, value: bool) -> None:
        if integration not in _INCLUDE_FLAGS:
            raise KeyError(integration)
        self._qs.setValue(f"integrations/include_{integration}", bool(value))

    @property
    def include_gtk(self) -> bool:
        return self.include("gtk")

    @include_gtk.setter
    def include_gtk(self, value: bool) -> None:
        self.set_include("gtk", value)

    @property
    def include_vencord(self) -> bool:
        return self.include("vencord")

    @include_vencord.setter
    def include_vencord(self, value: bool) -> None:
        self.set_include("vencord", value)

    @property
    def include_zed(self) -> bool:
        return self.include("zed")

    @include_zed.setter
    def include_zed(self, value: bool) -> None:
        self.set_include("zed", value)

    @property
    def include_vscode(self) -> bool:
        return self.include("vscode")

    @include_vscode.setter
    def include_vscode(self, value: bool) -> None:
        self.set_include("vscode", value)

    @property
    def include_neovim(self) -> bool:
        return self.include("neovim")

    @include_neovim.setter
    def include_neovim(self, value: bool) -> None:
        self.set_include("neovim", value)

    @property
    def selected_neovim_config(self) -> str:
        raw = self._qs.value("integrations/selected_neovim_config", "", type=str)
        return raw or ""

    @selected_neovim_config.setter
    def selected_neovim_config(self, value: str) -> None:
        self._qs.setValue("integrations/selected_neovim_config", value or "")

    # -- system --

    @property
    def user_templates_dir(self) -> Path:
        raw = (self._qs.value("paths/user_templates_dir", "", type=str) or "").strip()
        if raw:
            return Path(raw).expanduser()
        return self.config_home / "themeforge" / "templates"

    @user_templates_dir.setter
    def user_templates_dir(self, value: str | Path) -> None:
        self._qs.setValue("paths/user_templates_dir", str(value or "").strip())

    @property
    def theme_switch_command(self) -> str:
        raw = self._qs.value("system/theme_switch_command", DEFAULT_THEME_SWITCH_COMMAND, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_THEME_SWITCH_COMMAND

    @theme_switch_command.setter
    def theme_switch_command(self, value: str) -> None:
        cleaned = (value or "").strip() or DEFAULT_THEME_SWITCH_COMMAND
        self._qs.setValue("system/theme_switch_command", cleaned)

    @property
    def command_timeout(self) -> float:
        raw = self._qs.value("system/command_timeout", DEFAULT_TIMEOUT)
        try:
            value = float(raw)
        except (TypeError, ValueError):
            return DEFAULT_TIMEOUT
        return value if value > 0 else DEFAULT_TIMEOUT

    @command_timeout.setter
    def command_timeout(self, value: float) -> None:
        self._qs.setValue("system/command_timeout", float(value))

    # -- directories --

    @property
    def config_home(self) -> Path:
        return _xdg_dir("XDG_CONFIG_HOME", ".config")

    @property
    def data_dir(self) -> Path:
        path = _xdg_dir("XDG_DATA_HOME", ".local/share") / "themeforge"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def cache_dir(self) -> Path:
        path = _xdg_dir("XDG_CACHE_HOME", ".cache") / "themeforge"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def palette_cache_db_path(self) -> Path:
        return self.cache_dir / "palettes.db"

    @property
    def theme_dir(self) -> Path:
        return self.config_home / "omarchy" / "themes" / self.theme_name

    @property
    def custom_apps_dir(self) -> Path:
        return self.config_home / "themeforge" / "custom"

    # -- snapshots --

    def theme_settings(self) -> ThemeSettings:
        return ThemeSettings(
            include_gtk=self.include_gtk,
            include_vencord=self.include_vencord,
            include_zed=self.include_zed,
            include_vscode=self.include_vscode,
            include_neovim=self.include_neovim,
            selected_neovim_config=self.selected_neovim_config or None,
        )

    def template_dirs(self) -> list[Path]:
        """Bundled templates first, then the user directory when it exists."""
        dirs = [bundled_templates_root()]
        user_dir = self.user_templates_dir
        if user_dir.is_dir():
            dirs.append(user_dir)
        return dirs

    def theme_context(self, theme_dir: Path | None = None) -> ThemeContext:
        session = DesktopSession(
            CommandRunner(timeout=self.command_timeout),
            theme_switch_command=self.theme_switch_command,
        )
        return ThemeContext(
            theme_dir=theme_dir or self.theme_dir,
            config_home=self.config_home,
            home=Path.home(),
            template_dirs=self.template_dirs(),
            custom_apps_dir=self.custom_apps_dir,
            theme_name=self.theme_name,
            session=session,
            hook_timeout=self.command_timeout,
        )
