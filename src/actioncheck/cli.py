"""actioncheck CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from actioncheck import __version__

if TYPE_CHECKING:
    from actioncheck.config import CheckConfig
    from actioncheck.discovery.models import DiscoverySource


@click.group()
@click.version_option(version=__version__, prog_name="actioncheck")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """actioncheck - find HTTP actions missing anti-forgery or authorization."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_source(config: CheckConfig) -> DiscoverySource:
    """Pick the discovery source named by *config* (manifest wins over module)."""
    from actioncheck.discovery import ManifestSource, ModuleSource

    if config.manifest is not None:
        return ManifestSource(config.manifest)
    if config.module:
        return ModuleSource(config.module, search_path=config.project_root)
    msg = "Nothing to check: pass --module or --manifest, or set one in actioncheck.yml."
    raise click.UsageError(msg)


def _resolve_config(project: Path | None) -> CheckConfig:
    from actioncheck.config import ConfigError, load_config

    project_root = project or Path.cwd()
    try:
        return load_config(project_root)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)


def _with_source(
    config: CheckConfig, module_name: str | None, manifest: Path | None
) -> CheckConfig:
    """Apply --module/--manifest; either flag replaces both configured sources."""
    from dataclasses import replace

    if manifest is not None:
        return replace(config, manifest=manifest.resolve(), module=None)
    if module_name is not None:
        return replace(config, module=module_name, manifest=None)
    return config


_project_option = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
_module_option = click.option(
    "--module", "module_name", default=None, help="Python module or package to reflect over."
)
_manifest_option = click.option(
    "--manifest",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML manifest declaring controllers and tags.",
)


@main.command()
@_project_option
@_module_option
@_manifest_option
@click.option(
    "--ignore",
    "ignore_keys",
    multiple=True,
    help="Policy key to suppress (antiforgery, authorization). Repeatable.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain", "html"]),
    default=None,
    help="Output format (default: rich on TTY, porcelain otherwise).",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Evaluation threads.")
@click.option("--strict", is_flag=True, help="Exit with code 1 when issues are found.")
def check(
    *,
    project: Path | None,
    module_name: str | None,
    manifest: Path | None,
    ignore_keys: tuple[str, ...],
    fmt: str | None,
    workers: int | None,
    strict: bool,
) -> None:
    """Check controller actions against the anti-forgery and authorization policies.

    Exit codes: 0 = clean or issues without --strict,
    1 = issues with --strict, 2 = configuration or discovery error.
    """
    from actioncheck import ActionCheckError
    from actioncheck.checker.ignore import parse_ignore
    from actioncheck.checker.runner import run_check
    from actioncheck.render import FORMATTERS

    config = _with_source(_resolve_config(project), module_name, manifest).override(
        format=fmt,
        workers=workers,
    )
    ignore = config.ignore | parse_ignore(ignore_keys)
    source = build_source(config)

    # Resolve output format: explicit flag > config > TTY detection.
    output_fmt = config.format or ("rich" if sys.stdout.isatty() else "porcelain")

    try:
        result = run_check(source, ignore=ignore, workers=config.workers)
    except ActionCheckError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    output = FORMATTERS[output_fmt](result)
    if output:
        click.echo(output)

    if strict and not result.report.is_empty:
        sys.exit(1)


@main.command()
def policies() -> None:
    """List the policies and their ignore keys."""
    from rich.console import Console
    from rich.table import Table

    from actioncheck.checker.policies import DEFAULT_POLICIES

    console = Console()
    table = Table(title="Policies")
    table.add_column("Ignore key", style="bold")
    table.add_column("Protections")
    table.add_column("Message")
    for policy in DEFAULT_POLICIES:
        table.add_row(policy.key, ", ".join(policy.protections), policy.message)
    console.print(table)


@main.command()
@_project_option
@_module_option
@_manifest_option
@click.option("--host", default=None, help="Bind address (default: 127.0.0.1).")
@click.option("--port", type=int, default=None, help="Port (default: 8765).")
def serve(
    *,
    project: Path | None,
    module_name: str | None,
    manifest: Path | None,
    host: str | None,
    port: int | None,
) -> None:
    """Serve the System Check page to local callers."""
    import uvicorn

    from actioncheck.server import create_app

    config = _with_source(_resolve_config(project), module_name, manifest).override(
        host=host,
        port=port,
    )
    app = create_app(build_source(config), config=config)
    click.echo(f"Serving System Check on http://{config.host}:{config.port}/system")
    uvicorn.run(app, host=config.host, port=config.port)
