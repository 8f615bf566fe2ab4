"""
chocosync — CLI entrypoint.

Usage:
    python -m chocosync.main --help
    python -m chocosync.main status git vim
    python -m chocosync.main install git --pin git=2.6.2 vim
    python -m chocosync.main apply --dry-run
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable
from pathlib import Path

import click

from chocosync import __version__
from chocosync.core.observability.logging_config import (
    FILE_ENV,
    FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="chocosync")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to chocosync.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """chocosync — converge Chocolatey packages to a declared state."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(FILE_ENV),
        log_file_level=os.environ.get(FILE_LEVEL_ENV),
    )


# ── Helpers ─────────────────────────────────────────────────────


def _load_settings(ctx: click.Context, required: bool = False, mock: bool = False):
    from chocosync.core.config.loader import ConfigError, load_settings

    try:
        settings = load_settings(ctx.obj.get("config_path"), required=required)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if mock and not settings.choco_path:
        settings = settings.model_copy(update={"choco_path": "choco.exe"})
    return settings


def _make_runner(mock: bool):
    if mock:
        from chocosync.adapters.mock import MockRunner

        return MockRunner()

    from chocosync.adapters.shell.command import ShellCommandRunner

    return ShellCommandRunner()


def _build_declaration(
    names: tuple[str, ...],
    pins: tuple[str, ...],
    options: str,
    source: str | None,
):
    """Pair --pin NAME=VERSION flags positionally with the NAME arguments."""
    from chocosync.core.models.package import PackageDeclaration

    versions: dict[str, str] = {}
    for pin in pins:
        name, sep, version = pin.partition("=")
        if not sep or not name.strip() or not version.strip():
            raise click.BadParameter(f"expected NAME=VERSION, got {pin!r}", param_hint="--pin")
        versions[name.strip().lower()] = version.strip()

    unknown = set(versions) - {n.lower() for n in names}
    if unknown:
        raise click.BadParameter(
            f"pinned package(s) not requested: {', '.join(sorted(unknown))}",
            param_hint="--pin",
        )

    return PackageDeclaration(
        name=list(names),
        version=[versions.get(n.lower()) for n in names] if versions else None,
        options=options,
        source=source,
    )


def _render_result(ctx: click.Context, result, as_json: bool) -> None:
    """Print a ReconcileResult and exit non-zero on failure."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    verbose = ctx.obj.get("verbose", False)

    for receipt in result.receipts:
        if receipt.ok:
            click.secho("   ✓ ", fg="green", nl=False)
            click.echo(receipt.command)
            if verbose and receipt.output:
                for line in receipt.output.split("\n")[:10]:
                    click.echo(f"     │ {line}")
        elif receipt.failed:
            click.secho("   ✗ ", fg="red", nl=False)
            click.echo(receipt.command)
        else:
            click.secho("   ⊘ ", fg="yellow", nl=False)
            click.echo(receipt.output)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    if report is not None and report.up_to_date and not ctx.obj.get("quiet"):
        click.secho(f"✅ {result.declaration.label}: nothing to do", fg="green")


def _action_options(func: Callable) -> Callable:
    """Options shared by every package action command."""
    decorators = [
        click.argument("names", nargs=-1, required=True),
        click.option("--pin", "pins", multiple=True, metavar="NAME=VERSION",
                     help="Pin a package to a version (repeatable)."),
        click.option("--options", "-o", "options", default="",
                     help="Extra options passed through to choco."),
        click.option("--source", default=None, help="Package source (unsupported by choco)."),
        click.option("--dry-run", is_flag=True, help="Plan but don't execute."),
        click.option("--force", is_flag=True,
                     help="Act on every named package, even if already converged."),
        click.option("--mock", is_flag=True, help="Use mock runner (no real execution)."),
        click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."),
        click.pass_context,
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _run_action(
    ctx: click.Context,
    action: str,
    names: tuple[str, ...],
    pins: tuple[str, ...],
    options: str,
    source: str | None,
    dry_run: bool,
    force: bool,
    mock: bool,
    as_json: bool,
) -> None:
    from chocosync.core.models.action import PackageAction
    from chocosync.core.use_cases.reconcile import reconcile_packages

    settings = _load_settings(ctx, mock=mock)
    declaration = _build_declaration(names, pins, options, source)

    if not as_json and not ctx.obj.get("quiet"):
        mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
        click.secho(f"\n📦 {mode_label}{action} — {declaration.label}", fg="cyan", bold=True)

    result = reconcile_packages(
        declaration,
        settings,
        _make_runner(mock),
        action=PackageAction(action),
        converge=not force,
        dry_run=dry_run,
    )
    _render_result(ctx, result, as_json)


# ── Observe ─────────────────────────────────────────────────────


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--mock", is_flag=True, help="Use mock runner (no real execution).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, names: tuple[str, ...], mock: bool, as_json: bool) -> None:
    """Show installed and candidate versions of packages."""
    from chocosync.core.models.package import PackageDeclaration
    from chocosync.core.use_cases.reconcile import query_state

    settings = _load_settings(ctx, mock=mock)
    result = query_state(PackageDeclaration(name=list(names)), settings, _make_runner(mock))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.state is not None
    click.secho("📦 Packages:", fg="cyan", bold=True)
    for name, current, candidate in zip(
        result.state.names, result.state.current, result.state.candidate
    ):
        click.echo(f"   {name:<30} {current or '-':<16} → {candidate or '-'}")
    click.echo()


# ── Act ─────────────────────────────────────────────────────────


@cli.command()
@_action_options
def install(ctx: click.Context, **kwargs) -> None:
    """Install packages (pinned ones one at a time, the rest in one call)."""
    _run_action(ctx, "install", **kwargs)


@cli.command()
@_action_options
def upgrade(ctx: click.Context, **kwargs) -> None:
    """Upgrade packages to their candidate versions (no pins allowed)."""
    _run_action(ctx, "upgrade", **kwargs)


@cli.command()
@_action_options
def remove(ctx: click.Context, **kwargs) -> None:
    """Remove packages."""
    _run_action(ctx, "remove", **kwargs)


@cli.command()
@_action_options
def purge(ctx: click.Context, **kwargs) -> None:
    """Remove packages (choco makes no purge/remove distinction)."""
    _run_action(ctx, "purge", **kwargs)


@cli.command(hidden=True, deprecated=True)
@_action_options
def uninstall(ctx: click.Context, **kwargs) -> None:
    """Deprecated alias of remove."""
    _run_action(ctx, "uninstall", **kwargs)


@cli.command()
@click.option("--dry-run", is_flag=True, help="Plan but don't execute.")
@click.option("--mock", is_flag=True, help="Use mock runner (no real execution).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def apply(ctx: click.Context, dry_run: bool, mock: bool, as_json: bool) -> None:
    """Reconcile every package declared in chocosync.yml."""
    from chocosync.core.use_cases.reconcile import apply_settings

    settings = _load_settings(ctx, required=True, mock=mock)
    outcome = apply_settings(settings, _make_runner(mock), dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        if not outcome.ok:
            sys.exit(1)
        return

    if not outcome.results:
        click.secho("⚠️  No packages declared", fg="yellow")
        return

    for result in outcome.results:
        assert result.declaration is not None
        click.secho(f"\n📦 {result.action} — {result.declaration.label}", fg="cyan", bold=True)
        if result.error:
            click.secho(f"   ❌ {result.error}", fg="red")
            continue
        report = result.report
        if report is None or report.up_to_date:
            click.secho("   ✅ up to date", fg="green")
            continue
        for receipt in report.receipts:
            marker = "⊘" if receipt.status == "skipped" else "✓"
            click.echo(f"   {marker} {receipt.command}")

    click.echo()
    if not outcome.ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()
