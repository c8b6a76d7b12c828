"""Tests for themeforge.core.custom_apps."""

import json
from unittest.mock import MagicMock

import pytest

from themeforge.core.custom_apps import apply_custom_apps, discover_custom_apps, load_custom_app
from themeforge.core.renderer import TemplateRenderer
from themeforge.errors import ErrorCode, ExternalCommandError, ThemeForgeError

VARIABLES = {"background": "#112233", "accent": "#4488ff"}


def _make_app(root, name, config, template="colors.conf", body="bg={background}\n", hook=None):
    app_dir = root / name
    app_dir.mkdir(parents=True)
    (app_dir / "config.json").write_text(json.dumps(config))
    if template:
        (app_dir / template).write_text(body)
    if hook:
        (app_dir / hook).write_text("#!/bin/bash\nexit 0\n")
    return app_dir


class TestLoadCustomApp:

    def test_valid_app_with_home_destination(self, tmp_path):
        home = tmp_path / "home"
        app_dir = _make_app(
            tmp_path / "custom", "foot", {"template": "colors.conf", "destination": "~/.config/foot/colors.ini"}
        )
        app = load_custom_app(app_dir, home=home)

        assert app.name == "foot"
        assert app.label == "foot"
        assert app.destination == home / ".config" / "foot" / "colors.ini"
        assert app.post_apply is None
        assert app.output_name == "foot-colors.conf"

    def test_default_hook_is_picked_up(self, tmp_path):
        app_dir = _make_app(
            tmp_path, "foot", {"template": "colors.conf", "destination": "/tmp/x"}, hook="post-apply.sh"
        )
        assert load_custom_app(app_dir).post_apply == app_dir / "post-apply.sh"

    @pytest.mark.parametrize(
        "config",
        [
            {"destination": "/tmp/x"},
            {"template": "colors.conf"},
            {"template": "colors.conf", "destination": "relative/path"},
            {"template": "../outside.conf", "destination": "/tmp/x"},
            {"template": "colors.conf", "destination": "/tmp/x", "post_apply": "missing.sh"},
            {"template": "colors.conf", "destination": "/tmp/x", "command": "rm -rf /"},
            {"template": 5, "destination": "/tmp/x"},
        ],
    )
    def test_invalid_configs(self, tmp_path, config):
        app_dir = _make_app(tmp_path, "app", config)
        (tmp_path / "outside.conf").write_text("x")
        with pytest.raises(ThemeForgeError) as excinfo:
            load_custom_app(app_dir)
        assert excinfo.value.code is ErrorCode.CONFIG_INVALID

    def test_invalid_json(self, tmp_path):
        app_dir = tmp_path / "app"
        app_dir.mkdir()
        (app_dir / "config.json").write_text("{not json")
        with pytest.raises(ThemeForgeError):
            load_custom_app(app_dir)

    def test_existing_directory_destination_is_rejected(self, tmp_path):
        occupied = tmp_path / "config" / "nvim"
        occupied.mkdir(parents=True)
        app_dir = _make_app(tmp_path / "custom", "nvim", {"template": "colors.conf", "destination": str(occupied)})
        with pytest.raises(ThemeForgeError) as excinfo:
            load_custom_app(app_dir)
        assert excinfo.value.code is ErrorCode.CONFIG_INVALID
        assert "existing directory" in excinfo.value.message

    def test_bad_folder_name(self, tmp_path):
        app_dir = _make_app(tmp_path, "-bad", {"template": "colors.conf", "destination": "/tmp/x"})
        with pytest.raises(ThemeForgeError):
            load_custom_app(app_dir)


def test_discover_skips_invalid_apps(tmp_path):
    root = tmp_path / "custom"
    _make_app(root, "beta", {"template": "colors.conf", "destination": "/tmp/b"})
    _make_app(root, "alpha", {"template": "colors.conf", "destination": "/tmp/a"})
    _make_app(root, "broken", {"template": "missing.conf", "destination": "/tmp/c"}, template=None)
    (root / "no-config").mkdir()
    warnings = []

    apps = discover_custom_apps(root, warnings=warnings)

    assert [app.name for app in apps] == ["alpha", "beta"]
    assert len(warnings) == 1
    assert "broken" in warnings[0]
    assert discover_custom_apps(tmp_path / "missing") == []


class TestApplyCustomApps:

    def test_renders_links_and_runs_hook(self, tmp_path):
        home = tmp_path / "home"
        theme = tmp_path / "theme"
        _make_app(
            tmp_path / "custom",
            "foot",
            {"template": "colors.conf", "destination": "~/.config/foot/colors.ini"},
            hook="post-apply.sh",
        )
        apps = discover_custom_apps(tmp_path / "custom", home=home)
        session = MagicMock()

        result = apply_custom_apps(apps, TemplateRenderer([]), theme, VARIABLES, session=session, hook_timeout=7)

        link = home / ".config" / "foot" / "colors.ini"
        assert result.linked == [link]
        assert link.read_text() == "bg=#112233\n"
        assert (theme / "foot-colors.conf").exists()
        session.run_hook.assert_called_once_with(apps[0].post_apply, timeout=7)
        assert result.warnings == []

    def test_overrides_are_keyed_by_folder_name(self, tmp_path):
        _make_app(tmp_path / "custom", "foot", {"template": "colors.conf", "destination": str(tmp_path / "out.ini")})
        apps = discover_custom_apps(tmp_path / "custom")

        apply_custom_apps(
            apps, TemplateRenderer([]), tmp_path / "theme", VARIABLES, app_overrides={"foot": {"background": "#000000"}}
        )

        assert (tmp_path / "out.ini").read_text() == "bg=#000000\n"

    def test_overrides_match_dotted_folder_name_exactly(self, tmp_path):
        _make_app(tmp_path / "custom", "foot.d", {"template": "colors.conf", "destination": str(tmp_path / "out.ini")})
        apps = discover_custom_apps(tmp_path / "custom")
        overrides = {"foot": {"background": "#ffffff"}, "foot.d": {"background": "#000000"}}

        apply_custom_apps(apps, TemplateRenderer([]), tmp_path / "theme", VARIABLES, app_overrides=overrides)

        assert (tmp_path / "out.ini").read_text() == "bg=#000000\n"

    def test_directory_created_at_destination_is_left_alone(self, tmp_path):
        root = tmp_path / "custom"
        occupied = tmp_path / "config" / "nvim"
        _make_app(root, "nvim", {"template": "colors.conf", "destination": str(occupied)})
        _make_app(root, "other", {"template": "colors.conf", "destination": str(tmp_path / "other.ini")})
        apps = discover_custom_apps(root)
        occupied.mkdir(parents=True)
        (occupied / "init.lua").write_text("keep")

        result = apply_custom_apps(apps, TemplateRenderer([]), tmp_path / "theme", VARIABLES)

        assert (occupied / "init.lua").read_text() == "keep"
        assert result.linked == [tmp_path / "other.ini"]
        assert result.warnings == [f"nvim: could not link {occupied}"]

    def test_failing_hook_becomes_a_warning(self, tmp_path):
        _make_app(
            tmp_path / "custom",
            "foot",
            {"template": "colors.conf", "destination": str(tmp_path / "out.ini")},
            hook="post-apply.sh",
        )
        apps = discover_custom_apps(tmp_path / "custom")
        session = MagicMock()
        session.run_hook.side_effect = ExternalCommandError(command="bash post-apply.sh")

        result = apply_custom_apps(apps, TemplateRenderer([]), tmp_path / "theme", VARIABLES, session=session)

        assert result.linked == [tmp_path / "out.ini"]
        assert len(result.warnings) == 1
        assert "post-apply hook failed" in result.warnings[0]

    def test_unreadable_template_skips_only_that_app(self, tmp_path):
        root = tmp_path / "custom"
        bad = _make_app(root, "bad", {"template": "colors.conf", "destination": str(tmp_path / "bad.ini")})
        _make_app(root, "good", {"template": "colors.conf", "destination": str(tmp_path / "good.ini")})
        apps = discover_custom_apps(root)
        (bad / "colors.conf").write_bytes(b"\xff\xfe")

        result = apply_custom_apps(apps, TemplateRenderer([]), tmp_path / "theme", VARIABLES)

        assert result.linked == [tmp_path / "good.ini"]
        assert [outcome.template for outcome in result.render.failed] == ["bad-colors.conf"]
