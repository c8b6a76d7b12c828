"""Tests for themeforge.core.orchestrator."""

from unittest.mock import MagicMock

import pytest

from themeforge.core.orchestrator import ThemeContext, ThemeOrchestrator
from themeforge.core.renderer import ThemeSettings
from themeforge.core.roles import default_role_map
from themeforge.core.system import DesktopSession
from themeforge.errors import ExternalCommandError
from themeforge.runtime_paths import bundled_templates_root


@pytest.fixture
def runner():
    runner = MagicMock()
    runner.which.return_value = "/usr/bin/omarchy-theme-set"
    runner.run.return_value = 0
    return runner


@pytest.fixture
def context(tmp_path, runner):
    return ThemeContext(
        theme_dir=tmp_path / "config" / "omarchy" / "themes" / "themeforge",
        config_home=tmp_path / "config",
        home=tmp_path / "home",
        template_dirs=[bundled_templates_root()],
        custom_apps_dir=tmp_path / "custom",
        session=DesktopSession(runner),
    )


@pytest.fixture
def wallpaper(solid_image):
    return solid_image("#336699", size=(8, 8), name="wall.png")


class TestApplyTheme:

    def test_full_apply(self, context, runner, wallpaper):
        result = ThemeOrchestrator(context).apply_theme(default_role_map(), wallpaper=wallpaper)

        assert result.success
        assert result.warnings == []
        assert result.wallpaper == context.theme_dir / "backgrounds" / "wall.png"
        assert (context.theme_dir / "alacritty.toml").is_file()
        assert (context.config_home / "gtk-3.0" / "gtk.css").is_file()
        assert (context.config_home / "zed" / "themes" / "themeforge.json").is_file()
        assert (context.home / ".vscode" / "extensions" / "theme-themeforge" / "package.json").is_file()
        assert context.override_link.is_symlink()
        assert not (context.theme_dir / "light.mode").exists()
        runner.run.assert_any_call(["omarchy-theme-set", "themeforge"], sync=False)

    def test_previous_backgrounds_are_removed(self, context, wallpaper):
        stale = context.theme_dir / "backgrounds" / "old.jpg"
        stale.parent.mkdir(parents=True)
        stale.write_bytes(b"old")

        ThemeOrchestrator(context).apply_theme(default_role_map(), wallpaper=wallpaper)

        assert not stale.exists()

    def test_light_mode_marker(self, context):
        orchestrator = ThemeOrchestrator(context)
        orchestrator.apply_theme(default_role_map(), light_mode=True)
        assert (context.theme_dir / "light.mode").exists()
        orchestrator.apply_theme(default_role_map(), light_mode=False)
        assert not (context.theme_dir / "light.mode").exists()

    def test_vscode_disabled_keeps_neutral_file(self, context):
        settings = ThemeSettings(include_vscode=False, include_gtk=False)
        ThemeOrchestrator(context).apply_theme(default_role_map(), settings=settings)

        assert (context.theme_dir / "vscode.json").read_text() == "{}\n"
        assert not (context.home / ".vscode").exists()
        assert not (context.config_home / "gtk-3.0").exists()

    def test_missing_switch_command_is_a_warning(self, context, runner):
        runner.which.return_value = None
        result = ThemeOrchestrator(context).apply_theme(default_role_map())

        assert result.success
        assert any("not found" in warning for warning in result.warnings)
        assert (context.theme_dir / "kitty.conf").is_file()
        runner.run.assert_not_called()

    def test_failed_switch_is_a_warning(self, context, runner):
        runner.run.side_effect = ExternalCommandError(command="omarchy-theme-set")
        result = ThemeOrchestrator(context).apply_theme(default_role_map())

        assert result.success
        assert any("theme switch failed" in warning for warning in result.warnings)

    def test_missing_wallpaper_is_a_warning(self, context, tmp_path):
        result = ThemeOrchestrator(context).apply_theme(default_role_map(), wallpaper=tmp_path / "gone.png")

        assert result.success
        assert result.wallpaper is None
        assert any("gone.png" in warning for warning in result.warnings)

    def test_unpreparable_theme_dir_aborts(self, context, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        context.theme_dir = blocker / "theme"

        result = ThemeOrchestrator(context).apply_theme(default_role_map())

        assert not result.success
        assert "Cannot prepare theme directory" in result.message

    def test_custom_apps_are_applied(self, context, tmp_path):
        app_dir = context.custom_apps_dir / "foot"
        app_dir.mkdir(parents=True)
        (app_dir / "config.json").write_text('{"template": "foot.ini", "destination": "~/.config/foot/theme.ini"}')
        (app_dir / "foot.ini").write_text("background={background.strip}\n")

        ThemeOrchestrator(context).apply_theme(default_role_map())

        assert (context.home / ".config" / "foot" / "theme.ini").read_text() == "background=1e1e2e\n"


def test_export_does_not_touch_desktop(context, runner, wallpaper, tmp_path):
    dest = tmp_path / "exported" / "mytheme"
    result = ThemeOrchestrator(context).export_theme(default_role_map(), dest, wallpaper=wallpaper, light_mode=True)

    assert result.ok
    assert (dest / "backgrounds" / "wall.png").is_file()
    assert (dest / "light.mode").exists()
    assert not (context.config_home / "gtk-3.0").exists()
    runner.run.assert_not_called()


def test_clear_theme_falls_back_to_stock_theme(context, runner):
    orchestrator = ThemeOrchestrator(context)
    orchestrator.apply_theme(default_role_map())
    runner.run.reset_mock()

    warnings = orchestrator.clear_theme()

    assert warnings == []
    assert not (context.config_home / "gtk-3.0" / "gtk.css").exists()
    assert not context.override_link.exists()
    runner.run.assert_any_call(["omarchy-theme-set", "tokyo-night"], sync=False)


def test_apply_wallpaper_links_background(context, runner, wallpaper):
    ThemeOrchestrator(context).apply_wallpaper(wallpaper)

    assert context.background_link.is_symlink()
    assert context.background_link.resolve() == wallpaper.resolve()
    assert runner.run.call_args.kwargs["sync"] is False
