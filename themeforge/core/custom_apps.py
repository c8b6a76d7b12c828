"""User-defined custom applications.

Each custom app lives in its own folder under the custom apps directory:

    <custom_apps_dir>/<app>/config.json
    <custom_apps_dir>/<app>/<template file>
    <custom_apps_dir>/<app>/post-apply.sh      (optional)

``config.json`` holds ``template`` (file name inside the folder),
``destination`` (where the rendered file should appear, ``~`` allowed) and
optionally ``post_apply`` (hook script name inside the folder) and ``label``.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from themeforge.core.fileops import create_symlink
from themeforge.core.renderer import AppOverrides, FileStatus, RenderResult, TemplateRenderer
from themeforge.core.system import DesktopSession
from themeforge.errors import ErrorCode, ExternalCommandError, RenderError, ThemeForgeError

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"
DEFAULT_HOOK = "post-apply.sh"
DEFAULT_HOOK_TIMEOUT = 30.0

_APP_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
_MAX_CONFIG_BYTES = 16 * 1024
_ALLOWED_KEYS = {"template", "destination", "post_apply", "label"}


@dataclass(frozen=True, slots=True)
class CustomApp:
    name: str
    directory: Path
    template: Path
    destination: Path
    post_apply: Path | None = None
    label: str = ""

    @property
    def output_name(self) -> str:
        return f"{self.name}-{self.template.name}"


@dataclass
class CustomAppsResult:
    render: RenderResult = field(default_factory=RenderResult)
    linked: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _invalid(app_dir: Path, message: str) -> ThemeForgeError:
    return ThemeForgeError(ErrorCode.CONFIG_INVALID, message=f"{app_dir.name}: {message}", path=app_dir)


def _inside(app_dir: Path, name: str, key: str) -> Path:
    candidate = (app_dir / name).resolve()
    if app_dir.resolve() not in candidate.parents:
        raise _invalid(app_dir, f"{key} must name a file inside the app folder")
    return candidate


def _optional_str(data: Mapping[str, object], key: str, app_dir: Path) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _invalid(app_dir, f"field {key!r} must be a string")
    return value.strip()


def load_custom_app(app_dir: str | Path, home: str | Path | None = None) -> CustomApp:
    """Read and validate one custom app folder."""
    app_dir = Path(app_dir)
    name = app_dir.name
    if not _APP_NAME_RE.match(name):
        raise _invalid(app_dir, "folder name must be letters, digits, '.', '_' or '-'")

    config_path = app_dir / CONFIG_FILE
    try:
        raw = config_path.read_bytes()
    except OSError as exc:
        raise _invalid(app_dir, f"cannot read {CONFIG_FILE}: {exc}") from exc
    if len(raw) > _MAX_CONFIG_BYTES:
        raise _invalid(app_dir, f"{CONFIG_FILE} is too large")
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise _invalid(app_dir, f"invalid JSON in {CONFIG_FILE}: {exc}") from exc
    if not isinstance(data, dict):
        raise _invalid(app_dir, f"expected a JSON object in {CONFIG_FILE}")

    unknown = sorted(set(data) - _ALLOWED_KEYS)
    if unknown:
        raise _invalid(app_dir, f"unknown keys in {CONFIG_FILE}: {', '.join(unknown)}")

    template_name = _optional_str(data, "template", app_dir)
    destination = _optional_str(data, "destination", app_dir)
    if not template_name:
        raise _invalid(app_dir, "field 'template' must be a non-empty string")
    if not destination:
        raise _invalid(app_dir, "field 'destination' must be a non-empty string")

    template = _inside(app_dir, template_name, "template")
    if not template.is_file():
        raise _invalid(app_dir, f"template {template_name!r} not found")

    if destination.startswith("~"):
        base = Path(home) if home is not None else Path.home()
        dest_path = base / destination[1:].lstrip("/")
    else:
        dest_path = Path(destination)
    if not dest_path.is_absolute():
        raise _invalid(app_dir, "destination must be an absolute path or start with ~")
    if dest_path.is_dir() and not dest_path.is_symlink():
        raise _invalid(app_dir, f"destination {dest_path} is an existing directory")

    hook_name = _optional_str(data, "post_apply", app_dir)
    hook: Path | None = None
    if hook_name:
        hook = _inside(app_dir, hook_name, "post_apply")
        if not hook.is_file():
            raise _invalid(app_dir, f"post_apply script {hook_name!r} not found")
    elif (app_dir / DEFAULT_HOOK).is_file():
        hook = app_dir / DEFAULT_HOOK

    return CustomApp(
        name=name,
        directory=app_dir,
        template=template,
        destination=dest_path,
        post_apply=hook,
        label=_optional_str(data, "label", app_dir) or name,
    )


def discover_custom_apps(
    custom_dir: str | Path,
    home: str | Path | None = None,
    warnings: list[str] | None = None,
) -> list[CustomApp]:
    """Valid custom apps sorted by name. Invalid folders are logged and skipped."""
    root = Path(custom_dir)
    if not root.is_dir():
        return []
    apps: list[CustomApp] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir() or not (entry / CONFIG_FILE).exists():
            continue
        try:
            apps.append(load_custom_app(entry, home=home))
        except ThemeForgeError as exc:
            logger.warning("skipping custom app: %s", exc.message)
            if warnings is not None:
                warnings.append(exc.message)
    return apps


def apply_custom_apps(
    apps: list[CustomApp],
    renderer: TemplateRenderer,
    theme_dir: str | Path,
    variables: Mapping[str, str],
    app_overrides: AppOverrides | None = None,
    session: DesktopSession | None = None,
    hook_timeout: float = DEFAULT_HOOK_TIMEOUT,
) -> CustomAppsResult:
    """Render each app's template into the theme dir and link it into place.

    A failing app is recorded as a warning; the remaining apps still run.
    """
    result = CustomAppsResult()
    theme_dir = Path(theme_dir)

    for app in apps:
        output = theme_dir / app.output_name
        try:
            renderer.render_file(
                app.template,
                output,
                variables,
                file_name=app.output_name,
                app_overrides=app_overrides,
                app_name=app.name,
            )
        except RenderError as exc:
            logger.error("custom app %s failed to render: %s", app.name, exc.message)
            result.render.record(app.output_name, FileStatus.FAILED, output, exc.message)
            result.warnings.append(f"{app.name}: {exc.message}")
            continue
        result.render.record(app.output_name, FileStatus.WRITTEN, output)

        try:
            create_symlink(output, app.destination, label=app.name)
            result.linked.append(app.destination)
        except OSError as exc:
            logger.error("custom app %s could not be linked to %s: %s", app.name, app.destination, exc)
            result.warnings.append(f"{app.name}: could not link {app.destination}")
            continue

        if app.post_apply is not None and session is not None:
            try:
                session.run_hook(app.post_apply, timeout=hook_timeout)
                logger.info("ran post-apply hook for %s", app.name)
            except ExternalCommandError as exc:
                logger.warning("post-apply hook for %s failed: %s", app.name, exc.message)
                result.warnings.append(f"{app.name}: post-apply hook failed ({exc.message})")

    return result
