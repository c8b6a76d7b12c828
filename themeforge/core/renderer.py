"""Render a directory of templates into a theme directory."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from themeforge.core.fileops import atomic_write_text, ensure_dir
from themeforge.core.templating import app_name_for, render
from themeforge.errors import RenderError

logger = logging.getLogger(__name__)

NEOVIM_TEMPLATE = "neovim.lua"
VENCORD_TEMPLATE = "vencord.theme.css"
ZED_TEMPLATE = "themeforge.zed.json"
GTK_TEMPLATE = "gtk.css"
VSCODE_TEMPLATE = "vscode.json"
VSCODE_EMPTY_TEMPLATE = "vscode.empty.json"
OVERRIDE_TEMPLATE = "themeforge.override.css"
VSCODE_EXTENSION_DIR = "vscode-extension"

GTK_FILE_MODE = 0o644

AppOverrides = Mapping[str, Mapping[str, str]]


@dataclass(frozen=True, slots=True)
class ThemeSettings:
    """Per-application toggles. An integration is skipped only when its flag is False."""

    include_gtk: bool = True
    include_vencord: bool = True
    include_zed: bool = True
    include_vscode: bool = True
    include_neovim: bool = True
    selected_neovim_config: str | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, object] | None) -> ThemeSettings:
        """Build from snake_case or camelCase keys (``include_gtk`` / ``includeGtk``)."""
        values = values or {}

        def flag(snake: str, camel: str) -> bool:
            raw = values.get(snake, values.get(camel, True))
            return raw is not False

        neovim = values.get("selected_neovim_config", values.get("selectedNeovimConfig"))
        return cls(
            include_gtk=flag("include_gtk", "includeGtk"),
            include_vencord=flag("include_vencord", "includeVencord"),
            include_zed=flag("include_zed", "includeZed"),
            include_vscode=flag("include_vscode", "includeVscode"),
            include_neovim=flag("include_neovim", "includeNeovim"),
            selected_neovim_config=str(neovim) if neovim else None,
        )


# Template file -> ThemeSettings flag that must be true for it to render.
SKIP_RULES: dict[str, str] = {
    NEOVIM_TEMPLATE: "include_neovim",
    VENCORD_TEMPLATE: "include_vencord",
    ZED_TEMPLATE: "include_zed",
    GTK_TEMPLATE: "include_gtk",
}


class FileStatus(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FileOutcome:
    template: str
    status: FileStatus
    output: Path | None = None
    reason: str = ""


@dataclass
class RenderResult:
    """What happened to each template during one render pass."""

    outcomes: list[FileOutcome] = field(default_factory=list)

    def record(self, template: str, status: FileStatus, output: Path | None = None, reason: str = "") -> None:
        self.outcomes.append(FileOutcome(template, status, output, reason))

    def extend(self, other: RenderResult) -> None:
        self.outcomes.extend(other.outcomes)

    def _with_status(self, status: FileStatus) -> list[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is status]

    @property
    def written(self) -> list[FileOutcome]:
        return self._with_status(FileStatus.WRITTEN)

    @property
    def skipped(self) -> list[FileOutcome]:
        return self._with_status(FileStatus.SKIPPED)

    @property
    def failed(self) -> list[FileOutcome]:
        return self._with_status(FileStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed

    def outcome_for(self, template: str) -> FileOutcome | None:
        for outcome in self.outcomes:
            if outcome.template == template:
                return outcome
        return None


class TemplateRenderer:
    """Renders templates from one or more directories.

    Directories are given lowest priority first; a file in a later directory
    replaces the file with the same name from an earlier one.
    """

    def __init__(self, template_dirs: Sequence[str | Path]) -> None:
        self._template_dirs = [Path(path) for path in template_dirs]

    @property
    def template_dirs(self) -> list[Path]:
        return list(self._template_dirs)

    def template_map(self) -> dict[str, Path]:
        """Template file name -> path, sorted by name. Subdirectories are excluded."""
        templates: dict[str, Path] = {}
        for directory in self._template_dirs:
            if not directory.is_dir():
                continue
            for entry in directory.iterdir():
                if entry.is_file() and not entry.name.startswith("."):
                    templates[entry.name] = entry
        return dict(sorted(templates.items()))

    def resolve(self, name: str) -> Path | None:
        """Highest-priority file or directory called ``name``."""
        for directory in reversed(self._template_dirs):
            candidate = directory / name
            if candidate.exists():
                return candidate
        return None

    def render_file(
        self,
        template_path: str | Path,
        output_path: str | Path,
        variables: Mapping[str, str],
        file_name: str | None = None,
        app_overrides: AppOverrides | None = None,
        app_name: str | None = None,
    ) -> Path:
        """Render one template. Raises RenderError on any read or write failure.

        Overrides are looked up under ``app_name`` when given, otherwise under
        the app name derived from ``file_name``.
        """
        source = Path(template_path)
        file_name = file_name or source.name
        try:
            content = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise RenderError(
                message=f"Could not read template {file_name}",
                path=source,
                file_name=file_name,
                details={"original": str(exc)},
            ) from exc

        merged = dict(variables)
        overrides = (app_overrides or {}).get(app_name or app_name_for(file_name)) or {}
        if overrides:
            merged.update({str(key): str(value) for key, value in overrides.items()})
            logger.info("applied %d override(s) to %s", len(overrides), file_name)

        mode = GTK_FILE_MODE if file_name == GTK_TEMPLATE else None
        try:
            return atomic_write_text(output_path, render(content, merged), mode=mode)
        except OSError as exc:
            raise RenderError(
                message=f"Could not write {Path(output_path).name}",
                path=Path(output_path),
                file_name=file_name,
                details={"original": str(exc)},
            ) from exc

    def render_all(
        self,
        output_dir: str | Path,
        variables: Mapping[str, str],
        settings: ThemeSettings | None = None,
        app_overrides: AppOverrides | None = None,
    ) -> RenderResult:
        """Render every standard template into ``output_dir``.

        A template that fails is logged and recorded; the rest still render.
        """
        settings = settings or ThemeSettings()
        output = ensure_dir(output_dir)
        result = RenderResult()

        for file_name, template_path in self.template_map().items():
            flag = SKIP_RULES.get(file_name)
            if flag is not None and not getattr(settings, flag):
                logger.debug("skipping %s (%s disabled)", file_name, flag)
                result.record(file_name, FileStatus.SKIPPED, reason=f"{flag} is off")
                continue

            target = output / file_name
            if file_name == VSCODE_EMPTY_TEMPLATE:
                if settings.include_vscode:
                    result.record(file_name, FileStatus.SKIPPED, reason="include_vscode is on")
                    continue
                target = output / VSCODE_TEMPLATE
            elif file_name == VSCODE_TEMPLATE and not settings.include_vscode:
                result.record(file_name, FileStatus.SKIPPED, reason="replaced by neutral vscode.json")
                continue

            try:
                if file_name == NEOVIM_TEMPLATE and settings.selected_neovim_config:
                    self._write_literal(target, settings.selected_neovim_config, file_name)
                    logger.info("wrote selected neovim config to %s", target)
                else:
                    self.render_file(template_path, target, variables, file_name, app_overrides)
            except RenderError as exc:
                logger.error("template %s failed: %s", file_name, exc.message)
                result.record(file_name, FileStatus.FAILED, target, exc.message)
                continue
            result.record(file_name, FileStatus.WRITTEN, target)

        logger.info(
            "rendered %d template(s) into %s (%d skipped, %d failed)",
            len(result.written),
            output,
            len(result.skipped),
            len(result.failed),
        )
        return result

    def render_tree(
        self,
        source_dir: str | Path,
        dest_dir: str | Path,
        variables: Mapping[str, str],
    ) -> RenderResult:
        """Render a template directory recursively, mirroring its layout."""
        source = Path(source_dir)
        result = RenderResult()
        for entry in sorted(source.rglob("*")):
            if not entry.is_file():
                continue
            relative = entry.relative_to(source)
            target = Path(dest_dir) / relative
            try:
                self.render_file(entry, target, variables)
            except RenderError as exc:
                logger.error("template %s failed: %s", relative, exc.message)
                result.record(str(relative), FileStatus.FAILED, target, exc.message)
                continue
            result.record(str(relative), FileStatus.WRITTEN, target)
        return result

    @staticmethod
    def _write_literal(target: Path, text: str, file_name: str) -> None:
        try:
            atomic_write_text(target, text)
        except OSError as exc:
            raise RenderError(
                message=f"Could not write {target.name}",
                path=target,
                file_name=file_name,
                details={"original": str(exc)},
            ) from exc
