from __future__ import annotations

from pathlib import Path

from themeforge import runtime_paths


def test_source_package_root_points_to_repo_package() -> None:
    root = runtime_paths.package_root()
    assert root.name == "themeforge"
    assert (root / "core").exists()


def test_bundled_templates_resolve() -> None:
    templates = runtime_paths.bundled_templates_root()
    assert templates.name == "templates"
    assert (templates / "alacritty.toml").is_file()
    assert (templates / "vscode-extension").is_dir()


def test_frozen_prefers_meipass_themeforge_dir(tmp_path: Path, monkeypatch) -> None:
    bundle_root = tmp_path / "bundle"
    package_root = bundle_root / "themeforge"
    package_root.mkdir(parents=True)
    monkeypatch.setattr(runtime_paths.sys, "frozen", True, raising=False)
    monkeypatch.setattr(runtime_paths.sys, "_MEIPASS", str(bundle_root), raising=False)

    assert runtime_paths.package_root() == package_root
    assert runtime_paths.bundled_templates_root() == package_root / "templates"


def test_frozen_falls_back_to_meipass_when_themeforge_missing(tmp_path: Path, monkeypatch) -> None:
    bundle_root = tmp_path / "bundle"
    bundle_root.mkdir(parents=True)
    monkeypatch.setattr(runtime_paths.sys, "frozen", True, raising=False)
    monkeypatch.setattr(runtime_paths.sys, "_MEIPASS", str(bundle_root), raising=False)

    assert runtime_paths.package_root() == bundle_root
