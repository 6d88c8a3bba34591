"""CLI commands for dbus-explorer."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from dbus_explorer.bus.session import BusSession
from dbus_explorer.config import ConfigLoadError, ExplorerConfig, load_config
from dbus_explorer.errors import ConfigValidationError, ConnectionError, ValidationError
from dbus_explorer.exploration import ExplorationResult, Explorer
from dbus_explorer.reporting import ConsoleReporter, JSONReporter

console = Console()

EXIT_FAILURES = 1
EXIT_USAGE = 2


def setup_logging(config: ExplorerConfig, verbose: bool) -> None:
    """Configure logging based on config and verbosity."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper())
    logging.basicConfig(level=level, format=config.log_format, stream=sys.stderr)


def _session(config: ExplorerConfig) -> BusSession:
    return BusSession(
        bus=config.bus,
        address=config.bus_address,
        call_timeout=config.call_timeout,
        include_unique_names=config.include_unique_names,
    )


def _run(coro: Any) -> Any:
    """Run a coroutine, turning a fatal bus error into exit status 1."""
    try:
        return asyncio.run(coro)
    except ConnectionError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_FAILURES)
    except ValidationError as e:
        click.echo(f"Invalid input: {e.message}", err=True)
        sys.exit(EXIT_USAGE)


def _emit(result: ExplorationResult, output_format: str, members: bool, strict: bool) -> None:
    if output_format == "json":
        click.echo(JSONReporter().report(result))
    else:
        reporter = ConsoleReporter(color=console.is_terminal, show_members=members)
        click.echo(reporter.report(result), nl=False)

    if strict and not result.success:
        sys.exit(EXIT_FAILURES)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to YAML config file")
@click.option("--system/--session", "system", default=None, help="Which well-known bus to use")
@click.option("--address", help="Explicit bus address, e.g. unix:path=/run/dbus/system_bus_socket")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config: str | None,
    system: bool | None,
    address: str | None,
) -> None:
    """dbus-explorer - Walk D-Bus services and their object trees."""
    ctx.ensure_object(dict)

    bus = None if system is None else ("system" if system else "session")
    try:
        config_obj = load_config(config, bus=bus, bus_address=address)
    except (ConfigLoadError, ConfigValidationError) as e:
        raise click.UsageError(str(e)) from e

    ctx.obj["config"] = config_obj
    ctx.obj["verbose"] = verbose

    setup_logging(config_obj, verbose)


@cli.command()
@click.option("--owners", is_flag=True, help="Also show each service's unique owner")
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text")
@click.pass_context
def services(ctx: click.Context, owners: bool, output_format: str) -> None:
    """List the services registered on the bus."""
    config: ExplorerConfig = ctx.obj["config"]

    async def list_services() -> list[tuple[str, str | None]]:
        async with _session(config) as session:
            names = await Explorer(session).list_services()
            if not owners:
                return [(n, None) for n in names]
            return [(n, await session.get_name_owner(n)) for n in names]

    rows = _run(list_services())

    if output_format == "json":
        data: list[Any] = [{"name": n, "owner": o} for n, o in rows] if owners else [n for n, _ in rows]
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title=f"Services on the {config.bus_address or config.bus} bus")
    table.add_column("Service", style="cyan")
    if owners:
        table.add_column("Owner", style="dim")
    for name, owner in rows:
        table.add_row(*([name, owner or "-"] if owners else [name]))
    console.print(table)


@cli.command()
@click.argument("service")
@click.option("--path", "-p", "root_path", default="/", show_default=True, help="Root object path")
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text")
@click.option("--strategy", type=click.Choice(["bfs", "dfs"]), default=None)
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Overall time budget in seconds")
@click.option("--all-interfaces", is_flag=True,
              help="Keep the standard Introspectable/Properties/Peer/ObjectManager interfaces")
@click.option("--no-members", is_flag=True, help="Only show object paths and interface names")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any object failed")
@click.pass_context
def explore(
    ctx: click.Context,
    service: str,
    root_path: str,
    output_format: str,
    strategy: str | None,
    timeout: float | None,
    all_interfaces: bool,
    no_members: bool,
    strict: bool,
) -> None:
    """Walk the object tree of SERVICE."""
    config: ExplorerConfig = ctx.obj["config"].model_copy(
        update={
            k: v
            for k, v in {
                "strategy": strategy,
                "exploration_timeout": timeout,
                "include_standard_interfaces": all_interfaces or None,
            }.items()
            if v is not None
        }
    )

    async def explore_service() -> ExplorationResult:
        result = ExplorationResult()
        async with _session(config) as session:
            tree = await Explorer.from_config(session, config).explore(service, root_path)
        result.add_service(tree)
        result.finish()
        return result

    _emit(_run(explore_service()), output_format, not no_members, strict)


@cli.command("explore-all")
@click.option("--filter", "name_filter", help="Only services whose name contains this text")
@click.option("--format", "-f", "output_format", type=click.Choice(["text", "json"]), default="text")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Overall time budget in seconds")
@click.option("--no-members", is_flag=True, help="Only show object paths and interface names")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any object failed")
@click.pass_context
def explore_all(
    ctx: click.Context,
    name_filter: str | None,
    output_format: str,
    timeout: float | None,
    no_members: bool,
    strict: bool,
) -> None:
    """Walk every service on the bus."""
    config: ExplorerConfig = ctx.obj["config"]
    if timeout is not None:
        config = config.model_copy(update={"exploration_timeout": timeout})

    async def explore_everything() -> ExplorationResult:
        async with _session(config) as session:
            return await Explorer.from_config(session, config).explore_all(name_filter=name_filter)

    _emit(_run(explore_everything()), output_format, not no_members, strict)
