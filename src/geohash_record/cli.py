# src/geohash_record/cli.py
"""geohash-record command line.

Commands:
    run       Route input files through the configured transform
    encode    Encode one coordinate pair
    decode    Decode one geohash
    validate  Check a settings file without processing data
    plugins   Inspect registered readers, writers and transforms
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from geohash_record import __version__
from geohash_record.contracts import GeohashCodecError, GeohashFormat
from geohash_record.core.config import GeohashRecordSettings, load_settings, resolve_config
from geohash_record.plugins.config_base import PluginConfigError

if TYPE_CHECKING:
    from geohash_record.engine import BatchProcessor
    from geohash_record.plugins.manager import PluginManager

__all__ = ["app"]

app = typer.Typer(
    name="geohash-record",
    help="Enrich record batches with geohashes, or decode geohashes back to coordinates.",
    no_args_is_help=True,
)
plugins_app = typer.Typer(help="Inspect registered plugins.")
app.add_typer(plugins_app, name="plugins")

SettingsOption = typer.Option(..., "--settings", "-s", help="Settings YAML file.")
FormatOption = typer.Option(GeohashFormat.BASE_32, "--format", "-f", help="BASE_32 or BINARY.")

_manager: PluginManager | None = None


def _get_plugin_manager() -> PluginManager:
    """Process-wide plugin manager with the built-ins registered."""
    global _manager

    from geohash_record.plugins.manager import PluginManager

    if _manager is None:
        manager = PluginManager()
        manager.register_builtin_plugins()
        _manager = manager
    return _manager


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"geohash-record version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None) -> None:
    """Populate os.environ from a .env file without overriding set variables.

    An explicit --env-file must exist. Otherwise the nearest .env upwards
    from the working directory is used, if any.
    """
    from dotenv import find_dotenv, load_dotenv

    if env_file is None:
        found = find_dotenv(usecwd=True)
        if found:
            load_dotenv(found, override=False)
        return

    if not env_file.is_file():
        typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    load_dotenv(env_file, override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(None, "--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Do not read a .env file."),
    env_file: Path | None = typer.Option(None, "--env-file", help="Read this .env file instead of searching for one."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Log one JSON object per line."),
) -> None:
    """Enrich record batches with geohashes."""
    from geohash_record.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if no_dotenv:
        if env_file is not None:
            typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)
        return
    _load_dotenv(env_file)


def _error_panel(title: str, message: str, *, hint: str | None = None, details: list[str] | None = None) -> None:
    """Print an error box on stderr."""
    from rich.console import Console, Group
    from rich.panel import Panel
    from rich.text import Text

    parts: list[Text] = [Text(message)]
    if details:
        parts.append(Text("\n".join(f"  • {detail}" for detail in details), style="dim"))
    if hint:
        parts.append(Text.assemble(("Hint: ", "yellow bold"), (hint, "yellow")))

    Console(stderr=True).print(Panel(Group(*parts), title=f"[red bold]{title}[/]", border_style="red", padding=(0, 1)))


def _load_settings_or_exit(settings_path: Path) -> GeohashRecordSettings:
    try:
        return load_settings(settings_path)
    except FileNotFoundError:
        _error_panel("File Not Found", f"Settings file does not exist: {settings_path}")
        raise typer.Exit(1) from None
    except (YamlParserError, YamlScannerError) as e:
        problem = getattr(e, "problem", None)
        _error_panel(
            "YAML Syntax Error",
            f"Failed to parse {settings_path.name}",
            details=[str(problem)] if problem else None,
            hint="Check indentation and quoting.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        _error_panel(
            "Configuration Validation Failed",
            f"Invalid settings in {settings_path.name}",
            details=[f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()],
            hint="See the geohash, reader, writer and schema sections of the settings file.",
        )
        raise typer.Exit(1) from None


@app.command()
def run(
    settings: Path = SettingsOption,
    inputs: list[Path] = typer.Option(..., "--input", "-i", help="Input file, one batch each. Repeatable."),
    output_dir: Path = typer.Option(..., "--output-dir", "-o", help="Where <relationship>-<N>.json files are written."),
) -> None:
    """Route each input file as one batch.

    Input N (counting from 1) produces success-N.json, failure-N.json and
    original-N.json, each only when the batch emitted to it. Exits 1 if any
    batch went to failure as a whole.
    """
    from geohash_record.cli_helpers import build_processor

    config = _load_settings_or_exit(settings.expanduser())
    try:
        processor = build_processor(config, _get_plugin_manager())
    except (ValueError, PluginConfigError) as e:
        typer.echo(f"Error instantiating plugins: {e}", err=True)
        raise typer.Exit(1) from None

    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        any_failed = _route_inputs(processor, inputs, output_dir)
    finally:
        processor.close()

    if any_failed:
        raise typer.Exit(1)


def _route_inputs(processor: BatchProcessor, inputs: list[Path], output_dir: Path) -> bool:
    """Process each input as one batch; True if any batch failed as a whole."""
    any_failed = False
    for index, input_path in enumerate(inputs, start=1):
        try:
            raw = input_path.read_bytes()
        except OSError as e:
            typer.echo(f"Error reading {input_path}: {e}", err=True)
            raise typer.Exit(1) from None

        with structlog.contextvars.bound_contextvars(input=input_path.name):
            result = processor.process(raw)

        for output in result.outputs:
            (output_dir / f"{output.relationship.value}-{index}.json").write_bytes(output.content)

        batch = result.batch
        if batch is None:
            typer.echo(f"{input_path.name}: unreadable, routed to failure ({result.error})")
        else:
            typer.echo(
                f"{input_path.name}: {batch.disposition.value} (records={batch.record_count}, "
                f"enriched={batch.enriched_count}, unchanged={batch.unchanged_count}, failed={batch.failed_count})"
            )
        any_failed |= result.failed
    return any_failed


@app.command()
def encode(
    latitude: float = typer.Argument(..., help="Degrees, -90 to 90."),
    longitude: float = typer.Argument(..., help="Degrees, -180 to 180."),
    precision: int = typer.Option(12, "--precision", "-p", help="Characters for BASE_32, bits for BINARY."),
    geohash_format: GeohashFormat = FormatOption,
) -> None:
    """Print the geohash of a coordinate pair.

    Put `--` before negative coordinates: geohash-record encode -- -33.86 151.21
    """
    from geohash_record.core.geohash import encode as encode_geohash

    try:
        typer.echo(encode_geohash(latitude, longitude, precision, geohash_format))
    except GeohashCodecError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def decode(
    geohash: str = typer.Argument(..., help="Geohash to decode."),
    geohash_format: GeohashFormat = FormatOption,
    bounds: bool = typer.Option(False, "--bounds", "-b", help="Print the cell's ranges instead of its centre."),
) -> None:
    """Print the centre (or bounds) of a geohash cell."""
    from geohash_record.core.geohash import decode as decode_geohash
    from geohash_record.core.geohash import decode_bounds

    try:
        if bounds:
            lat_min, lat_max, lon_min, lon_max = decode_bounds(geohash, geohash_format)
            typer.echo(f"latitude: [{lat_min}, {lat_max}]\nlongitude: [{lon_min}, {lon_max}]")
        else:
            latitude, longitude = decode_geohash(geohash, geohash_format)
            typer.echo(f"{latitude} {longitude}")
    except GeohashCodecError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def validate(
    settings: Path = SettingsOption,
    show: bool = typer.Option(False, "--show", help="Also print the resolved settings, defaults included, as YAML."),
) -> None:
    """Check settings and plugin options without processing anything."""
    import yaml

    from geohash_record.cli_helpers import build_processor

    config = _load_settings_or_exit(settings.expanduser())
    try:
        build_processor(config, _get_plugin_manager()).close()
    except (ValueError, PluginConfigError) as e:
        _error_panel("Plugin Configuration Error", str(e), hint="Run `geohash-record plugins list` for available plugin names.")
        raise typer.Exit(1) from None

    geohash = config.geohash
    typer.echo("Configuration valid!")
    typer.echo(f"  Mode: {geohash.mode.value}")
    typer.echo(f"  Routing: {geohash.routing_strategy.value}")
    typer.echo(f"  Format: {geohash.geohash_format.value} (precision {geohash.precision})")
    typer.echo(f"  Reader: {config.reader.plugin}")
    typer.echo(f"  Writer: {config.writer.plugin}")
    if show:
        typer.echo(yaml.safe_dump(resolve_config(config), sort_keys=False))


@plugins_app.command("list")
def plugins_list() -> None:
    """List registered readers, writers and transforms."""
    manager = _get_plugin_manager()
    sections: list[tuple[str, list[type]]] = [
        ("READERS", list(manager.get_readers())),
        ("WRITERS", list(manager.get_writers())),
        ("TRANSFORMS", list(manager.get_transforms())),
    ]
    for heading, plugin_classes in sections:
        typer.echo(f"\n{heading}:")
        if not plugin_classes:
            typer.echo("  (none)")
        for plugin_cls in plugin_classes:
            summary = (plugin_cls.__doc__ or "").strip().splitlines()
            typer.echo(f"  {plugin_cls.name:20} - {summary[0] if summary else '(no description)'}")  # type: ignore[attr-defined]
    typer.echo()
