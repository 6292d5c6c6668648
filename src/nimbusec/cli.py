"""Command line interface for the nimbusec API."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

import click
import httpx
from rich.console import Console
from rich.table import Table

from . import __version__
from .api_clients import EMPTY_FILTER, NimbusecAPI
from .config import load_config
from .exceptions import APIClientError
from .models import Agent

console = Console()

T = TypeVar("T")


def run_with_client(
    ctx: click.Context, operation: Callable[[NimbusecAPI], Awaitable[T]]
) -> T:
    """Run one API operation with a client built from the CLI configuration.

    Any API or transport failure is reported and ends the command with
    exit status 1.
    """

    async def execute() -> T:
        config = load_config(ctx.obj.get("config_path"))
        transport = ctx.obj.get("transport")
        async with NimbusecAPI.from_config(config, transport=transport) as api:
            return await operation(api)

    try:
        return asyncio.run(execute())
    except (APIClientError, httpx.HTTPError) as e:
        console.print(f"[red]❌ {type(e).__name__}: {e}[/red]")
        sys.exit(1)


def render_table(title: str, columns: Sequence[str], rows: List[Sequence[Any]]) -> None:
    """Print rows as a rich table, or a notice when there are none."""
    if not rows:
        console.print(f"[yellow]No {title.lower()} found[/yellow]")
        return

    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*["" if value is None else str(value) for value in row])
    console.print(table)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON configuration file with url, key and secret",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="nimbusec")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """nimbusec - website security monitoring from the command line.

    Credentials are read from --config and the NIMBUSEC_URL, NIMBUSEC_KEY
    and NIMBUSEC_SECRET environment variables.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.group()
def domains():
    """Manage monitored domains."""


@domains.command("list")
@click.option("--filter", "-f", "filter_", default=EMPTY_FILTER, help="Filter expression")
@click.pass_context
def domains_list(ctx: click.Context, filter_: str):
    """List domains."""
    found = run_with_client(ctx, lambda api: api.find_domains(filter_))
    render_table(
        "Domains",
        ["ID", "Name", "Scheme", "Bundle", "Deep scan"],
        [(d.id, d.name, d.scheme, d.bundle, d.deep_scan) for d in found],
    )


@domains.command("get")
@click.argument("domain_id", type=int)
@click.pass_context
def domains_get(ctx: click.Context, domain_id: int):
    """Show a single domain."""
    domain = run_with_client(ctx, lambda api: api.get_domain(domain_id))
    console.print_json(domain.model_dump_json(by_alias=True))


@domains.command("delete")
@click.argument("domain_id", type=int)
@click.option("--purge", is_flag=True, help="Remove all associated data immediately")
@click.confirmation_option(prompt="Delete this domain?")
@click.pass_context
def domains_delete(ctx: click.Context, domain_id: int, purge: bool):
    """Delete a domain."""
    run_with_client(ctx, lambda api: api.delete_domain(domain_id, clean=purge))
    console.print(f"[green]✅ Domain {domain_id} deleted[/green]")


@cli.command()
@click.option("--filter", "-f", "filter_", default=EMPTY_FILTER, help="Filter expression")
@click.pass_context
def infected(ctx: click.Context, filter_: str):
    """List domains with pending results."""
    found = run_with_client(ctx, lambda api: api.find_infected(filter_))
    render_table(
        "Infected domains",
        ["ID", "Name", "Scheme"],
        [(d.id, d.name, d.scheme) for d in found],
    )


@cli.group()
def results():
    """Inspect scan results."""


@results.command("list")
@click.argument("domain_id", type=int)
@click.option("--filter", "-f", "filter_", default=EMPTY_FILTER, help="Filter expression")
@click.pass_context
def results_list(ctx: click.Context, domain_id: int, filter_: str):
    """List the results of a domain."""
    found = run_with_client(ctx, lambda api: api.find_results(domain_id, filter_))
    render_table(
        "Results",
        ["ID", "Status", "Category", "Severity", "Threat", "Resource"],
        [
            (r.id, r.status, r.category, r.severity, r.threatname, r.resource)
            for r in found
        ],
    )


@cli.group()
def users():
    """Manage users."""


@users.command("list")
@click.option("--filter", "-f", "filter_", default=EMPTY_FILTER, help="Filter expression")
@click.pass_context
def users_list(ctx: click.Context, filter_: str):
    """List users."""
    found = run_with_client(ctx, lambda api: api.find_users(filter_))
    render_table(
        "Users",
        ["ID", "Login", "Mail", "Role"],
        [(u.id, u.login, u.mail, u.role) for u in found],
    )


@cli.group()
def bundles():
    """Inspect subscription bundles."""


@bundles.command("list")
@click.option("--filter", "-f", "filter_", default=EMPTY_FILTER, help="Filter expression")
@click.pass_context
def bundles_list(ctx: click.Context, filter_: str):
    """List bundles."""
    found = run_with_client(ctx, lambda api: api.find_bundles(filter_))
    render_table(
        "Bundles",
        ["ID", "Name", "Start", "End", "Active", "Contingent"],
        [(b.id, b.name, b.start_date, b.end_date, b.active, b.contingent) for b in found],
    )


@cli.group()
def tokens():
    """Manage agent tokens."""


@tokens.command("list")
@click.option("--filter", "-f", "filter_", default=EMPTY_FILTER, help="Filter expression")
@click.pass_context
def tokens_list(ctx: click.Context, filter_: str):
    """List agent tokens."""
    found = run_with_client(ctx, lambda api: api.find_tokens(filter_))
    render_table(
        "Tokens",
        ["ID", "Name", "Key", "Last call", "Version"],
        [(t.id, t.name, t.key, t.last_call, t.version) for t in found],
    )


@cli.group()
def agents():
    """Download server agents."""


@agents.command("list")
@click.option("--filter", "-f", "filter_", default=EMPTY_FILTER, help="Filter expression")
@click.pass_context
def agents_list(ctx: click.Context, filter_: str):
    """List available agent builds."""
    found = run_with_client(ctx, lambda api: api.find_agents(filter_))
    render_table(
        "Agents",
        ["OS", "Arch", "Version", "Format", "SHA1"],
        [(a.os, a.arch, a.version, a.format, a.sha1) for a in found],
    )


@agents.command("download")
@click.option("--os", "os_", required=True, help="Operating system, e.g. linux")
@click.option("--arch", required=True, help="Architecture, e.g. 64bit")
@click.option("--version", "version", required=True, type=int, help="Agent version")
@click.option("--format", "format_", default="bin", show_default=True, help="Package format")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Target file, defaults to the agent's file name",
)
@click.pass_context
def agents_download(
    ctx: click.Context,
    os_: str,
    arch: str,
    version: int,
    format_: str,
    output: Optional[Path],
):
    """Download an agent build."""
    agent = Agent(os=os_, arch=arch, version=version, format=format_)
    data = run_with_client(ctx, lambda api: api.download_agent(agent))
    target = output or Path(agent.filename)
    target.write_bytes(data)
    console.print(f"[green]✅ Saved {len(data)} bytes to {target}[/green]")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
