"""themeforge command line."""

from __future__ import annotations

import json
import logging
from dataclasses import fields
from pathlib import Path

import click
from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from themeforge import __version__
from themeforge.app import configure_logging
from themeforge.config.settings import AppSettings
from themeforge.core.batch import BatchQueue
from themeforge.core.extraction import PaletteExtractor
from themeforge.core.importers import parse_base16_yaml, parse_colors_toml
from themeforge.core.orchestrator import ApplyResult, ThemeOrchestrator
from themeforge.core.palette import ExtractionMode, Palette
from themeforge.core.palette_cache import PaletteCache
from themeforge.core.renderer import AppOverrides
from themeforge.core.roles import ColorRoleMap, ExtendedColors, map_colors_to_roles
from themeforge.errors import ImportFormatError, ThemeForgeError, format_error_for_user

logger = logging.getLogger(__name__)

console = Console()

MODE_CHOICES = [mode.value for mode in ExtractionMode]
OVERRIDES_PATH = click.Path(exists=True, dir_okay=False, path_type=Path)
OVERRIDES_HELP = "JSON file with extended colors and per-app overrides."


def _swatch(color: str, width: int = 6) -> Text:
    return Text(" " * width, style=Style(bgcolor=color))


def print_palette(palette: Palette, title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Color", no_wrap=True)
    table.add_column("")
    for index, color in enumerate(palette):
        table.add_row(str(index), color, _swatch(color))
    console.print(table)


def print_role_map(role_map: ColorRoleMap, title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Role", style="cyan", no_wrap=True)
    table.add_column("Color", no_wrap=True)
    table.add_column("")
    for role, color in role_map.items():
        table.add_row(role, color, _swatch(color))
    console.print(table)


def print_apply_result(result: ApplyResult) -> None:
    style = "green" if result.success else "red"
    console.print(f"[{style}]{result.message}[/{style}]")
    for warning in result.warnings:
        console.print(f"  [yellow]warning:[/yellow] {warning}")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ImportFormatError(message=f"Cannot read {path.name}", path=path, details={"original": str(exc)}) from exc


def _extractor(settings: AppSettings, use_cache: bool) -> tuple[PaletteExtractor, PaletteCache | None]:
    if not use_cache:
        return PaletteExtractor(), None
    cache = PaletteCache(settings.palette_cache_db_path)
    cache.open()
    return PaletteExtractor(cache=cache), cache


def _load_overrides(path: Path | None) -> tuple[ExtendedColors, dict[str, dict[str, str]]]:
    """Read an overrides JSON file: ``{"extended": {...}, "apps": {"<app>": {...}}}``.

    ``extended`` takes accent, cursor, selection_foreground and
    selection_background. ``apps`` maps an app name to template variables
    that replace the role colors for that app only.
    """
    if path is None:
        return ExtendedColors(), {}
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise ImportFormatError(message=f"Invalid JSON in {path.name}", path=path, details={"original": str(exc)}) from exc
    if not isinstance(data, dict):
        raise ImportFormatError(message=f"Expected a JSON object in {path.name}", path=path)
    unknown = sorted(set(data) - {"extended", "apps"})
    if unknown:
        raise ImportFormatError(message=f"Unknown keys in {path.name}: {', '.join(unknown)}", path=path)

    extended = data.get("extended") or {}
    apps = data.get("apps") or {}
    if not isinstance(extended, dict) or not all(isinstance(value, str) for value in extended.values()):
        raise ImportFormatError(message=f"'extended' in {path.name} must map names to hex colors", path=path)
    if not isinstance(apps, dict) or not all(
        isinstance(values, dict) and all(isinstance(value, str) for value in values.values())
        for values in apps.values()
    ):
        raise ImportFormatError(message=f"'apps' in {path.name} must map app names to variables", path=path)

    extra = sorted(set(extended) - {item.name for item in fields(ExtendedColors)})
    if extra:
        logger.warning("ignoring unknown extended colors in %s: %s", path.name, ", ".join(extra))
    app_overrides = {str(app): {str(key): value for key, value in values.items()} for app, values in apps.items()}
    return ExtendedColors.from_mapping(extended), app_overrides


def _apply(
    settings: AppSettings,
    role_map: ColorRoleMap,
    wallpaper: Path | None,
    light_mode: bool,
    sync: bool,
    app_overrides: AppOverrides | None = None,
) -> int:
    orchestrator = ThemeOrchestrator(settings.theme_context())
    result = orchestrator.apply_theme(
        role_map,
        wallpaper=wallpaper,
        settings=settings.theme_settings(),
        light_mode=light_mode,
        app_overrides=app_overrides,
        sync=sync,
    )
    print_apply_result(result)
    return 0 if result.success else 1


@click.group()
@click.version_option(__version__, prog_name="themeforge")
@click.option("-v", "--verbose", is_flag=True, help="Also log to stderr at debug level.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Generate desktop themes from wallpapers and color schemes."""
    if ctx.obj is None:
        ctx.obj = AppSettings()
    configure_logging(ctx.obj, verbose=verbose)


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--mode", type=click.Choice(MODE_CHOICES), default=None, help="Extraction mode.")
@click.option("--light/--dark", "light", default=None, help="Generate a light or dark palette.")
@click.option("--apply/--no-apply", "apply_theme", default=True, show_default=True)
@click.option("--sync", is_flag=True, help="Wait for the theme switch command to finish.")
@click.option("--json", "as_json", is_flag=True, help="Print the palette as JSON.")
@click.option("--no-cache", is_flag=True, help="Ignore the palette cache.")
@click.option("--overrides", "overrides_file", type=OVERRIDES_PATH, default=None, help=OVERRIDES_HELP)
@click.pass_obj
def generate(
    settings: AppSettings,
    image: Path,
    mode: str | None,
    light: bool | None,
    apply_theme: bool,
    sync: bool,
    as_json: bool,
    no_cache: bool,
    overrides_file: Path | None,
) -> int:
    """Extract a palette from IMAGE and optionally apply it."""
    extended, app_overrides = _load_overrides(overrides_file)
    extraction_mode = ExtractionMode.parse(mode) if mode else settings.extraction_mode
    light_mode = settings.light_mode if light is None else light

    extractor, cache = _extractor(settings, not no_cache)
    try:
        palette = extractor.extract(image, extraction_mode, light_mode)
    finally:
        if cache is not None:
            cache.close()

    if as_json:
        click.echo(json.dumps({"mode": extraction_mode.value, "light_mode": light_mode, "colors": palette.to_list()}))
    else:
        print_palette(palette, f"{image.name} ({extraction_mode.value})")

    if not apply_theme:
        return 0
    role_map = map_colors_to_roles(palette, extended)
    return _apply(settings, role_map, image, light_mode, sync, app_overrides)


@cli.command("import-base16")
@click.argument("scheme_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--apply", "apply_theme", is_flag=True, help="Apply the scheme to the desktop.")
@click.option("--light/--dark", "light", default=None)
@click.option("--wallpaper", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--sync", is_flag=True)
@click.option("--overrides", "overrides_file", type=OVERRIDES_PATH, default=None, help=OVERRIDES_HELP)
@click.pass_obj
def import_base16(
    settings: AppSettings,
    scheme_file: Path,
    apply_theme: bool,
    light: bool | None,
    wallpaper: Path | None,
    sync: bool,
    overrides_file: Path | None,
) -> int:
    """Import a Base16 YAML scheme."""
    extended, app_overrides = _load_overrides(overrides_file)
    scheme = parse_base16_yaml(_read_text(scheme_file))
    role_map = scheme.to_role_map().with_overrides(extended.to_dict())
    print_role_map(role_map, scheme.scheme or scheme_file.name)
    if not apply_theme:
        return 0
    light_mode = settings.light_mode if light is None else light
    return _apply(settings, role_map, wallpaper, light_mode, sync, app_overrides)


@cli.command("import-toml")
@click.argument("scheme_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--apply", "apply_theme", is_flag=True, help="Apply the scheme to the desktop.")
@click.option("--light/--dark", "light", default=None)
@click.option("--wallpaper", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--sync", is_flag=True)
@click.option("--overrides", "overrides_file", type=OVERRIDES_PATH, default=None, help=OVERRIDES_HELP)
@click.pass_obj
def import_toml(
    settings: AppSettings,
    scheme_file: Path,
    apply_theme: bool,
    light: bool | None,
    wallpaper: Path | None,
    sync: bool,
    overrides_file: Path | None,
) -> int:
    """Import a flat colors.toml scheme."""
    extended, app_overrides = _load_overrides(overrides_file)
    scheme = parse_colors_toml(_read_text(scheme_file))
    role_map = scheme.to_role_map().with_overrides(extended.to_dict())
    print_role_map(role_map, scheme_file.name)
    if not apply_theme:
        return 0
    light_mode = settings.light_mode if light is None else light
    return _apply(settings, role_map, wallpaper, light_mode, sync, app_overrides)


@cli.command()
@click.argument("name")
@click.argument("dest", type=click.Path(file_okay=False, path_type=Path))
@click.option("--image", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--base16", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--toml", "toml_file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--mode", type=click.Choice(MODE_CHOICES), default=None)
@click.option("--light/--dark", "light", default=None)
@click.pass_obj
def export(
    settings: AppSettings,
    name: str,
    dest: Path,
    image: Path | None,
    base16: Path | None,
    toml_file: Path | None,
    mode: str | None,
    light: bool | None,
) -> int:
    """Write a complete theme called NAME under DEST without applying it."""
    sources = [source for source in (image, base16, toml_file) if source is not None]
    if len(sources) != 1:
        raise click.UsageError("Give exactly one of --image, --base16 or --toml.")
    light_mode = settings.light_mode if light is None else light

    if image is not None:
        extraction_mode = ExtractionMode.parse(mode) if mode else settings.extraction_mode
        role_map = map_colors_to_roles(PaletteExtractor().extract(image, extraction_mode, light_mode))
    elif base16 is not None:
        role_map = parse_base16_yaml(_read_text(base16)).to_role_map()
    else:
        role_map = parse_colors_toml(_read_text(toml_file)).to_role_map()

    orchestrator = ThemeOrchestrator(settings.theme_context())
    result = orchestrator.export_theme(
        role_map,
        dest / name,
        wallpaper=image,
        settings=settings.theme_settings(),
        light_mode=light_mode,
    )
    console.print(f"[green]Exported {len(result.written)} file(s) to {dest / name}[/green]")
    for outcome in result.failed:
        console.print(f"  [yellow]warning:[/yellow] {outcome.template}: {outcome.reason}")
    return 0 if result.ok else 1


@cli.command()
@click.argument("images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--mode", type=click.Choice(MODE_CHOICES), default=None)
@click.option("--light/--dark", "light", default=None)
@click.option("--json", "as_json", is_flag=True)
@click.pass_obj
def batch(settings: AppSettings, images: tuple[Path, ...], mode: str | None, light: bool | None, as_json: bool) -> int:
    """Extract palettes for up to ten IMAGES, one after another."""
    extraction_mode = ExtractionMode.parse(mode) if mode else settings.extraction_mode
    light_mode = settings.light_mode if light is None else light

    extractor, cache = _extractor(settings, True)
    try:
        queue = BatchQueue(extractor)
        added = queue.add(images)
        if added < len(images):
            console.print(f"[yellow]Only the first {added} image(s) will be processed.[/yellow]")
        results = queue.process(light_mode, extraction_mode)
    finally:
        if cache is not None:
            cache.close()

    if as_json:
        payload = [
            {
                "index": result.index,
                "path": str(result.path),
                "colors": result.palette.to_list() if result.palette else None,
                "error": result.error,
            }
            for result in results
        ]
        click.echo(json.dumps(payload))
    else:
        table = Table(title=f"Batch ({extraction_mode.value})", show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="cyan")
        table.add_column("Image", no_wrap=True)
        table.add_column("Palette")
        for result in results:
            if result.palette is None:
                strip = Text(result.error or "failed", style="red")
            else:
                strip = Text()
                for color in result.palette:
                    strip.append("  ", style=Style(bgcolor=color))
            table.add_row(str(result.index + 1), result.path.name, strip)
        console.print(table)

    return 0 if all(result.success for result in results) else 1


@cli.command("set-wallpaper")
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def set_wallpaper(settings: AppSettings, image: Path) -> int:
    """Point the desktop background at IMAGE."""
    ThemeOrchestrator(settings.theme_context()).apply_wallpaper(image.resolve())
    console.print(f"[green]Wallpaper set to {image.name}[/green]")
    return 0


@cli.command()
@click.option("--sync", is_flag=True)
@click.pass_obj
def clear(settings: AppSettings, sync: bool) -> int:
    """Remove generated GTK css and the theme override, then switch to the fallback theme."""
    warnings = ThemeOrchestrator(settings.theme_context()).clear_theme(sync=sync)
    console.print("[green]Theme cleared[/green]")
    for warning in warnings:
        console.print(f"  [yellow]warning:[/yellow] {warning}")
    return 0


@cli.command("clear-cache")
@click.pass_obj
def clear_cache(settings: AppSettings) -> int:
    """Forget every cached palette."""
    with PaletteCache(settings.palette_cache_db_path) as cache:
        count = cache.count()
        cache.clear()
    console.print(f"Removed {count} cached palette(s)")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Console script entry point. Returns the process exit code."""
    try:
        rv = cli.main(args=argv, prog_name="themeforge", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        console.print("Aborted.")
        return 1
    except ThemeForgeError as exc:
        logger.error("%s", exc)
        console.print(f"[red]Error:[/red] {format_error_for_user(exc)}")
        return 1
    except OSError as exc:
        logger.exception("unexpected filesystem error")
        console.print(f"[red]Error:[/red] {format_error_for_user(exc)}")
        return 1
    return rv if isinstance(rv, int) else 0
