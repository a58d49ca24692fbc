#!/usr/bin/env python3
"""
Main entry point for the Tool Shed Repository Reconciler.

Provides the ``shedctl`` command line: install a declared repository,
refresh its known state, uninstall it, or look one up by ID.
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, NoReturn, Optional

import click
import yaml
from tabulate import tabulate

from config import get_config
from diagnostics import Diagnostic
from errors import ReconcilerError, ValidationError
from models import RepositoryResource, RepositoryState
from plugins.clients.base import RegistryClient
from plugins.reconcilers.base import ReconcilerContext, ReconcileResult
from plugins.registry import get_registry, register_builtin_plugins
from state import delete_resource_file, load_resource, save_resource

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "ToolShedRepository"

OUTPUT_FORMATS = click.Choice(["table", "json", "yaml"])


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure root logging from the CLI option or LOG_LEVEL."""
    cfg = get_config().logging
    logging.basicConfig(
        level=(log_level or cfg.log_level).upper(),
        format=cfg.log_format,
    )


async def get_client() -> RegistryClient:
    """Get the configured registry client, initialized."""
    plugin_config = get_config().plugins
    name = plugin_config.registry_client
    return await get_registry().get_client(
        name, plugin_config.get_plugin_config(name)
    )


async def run_operation(
    operation: str, resource: RepositoryResource
) -> ReconcileResult:
    """
    Run one reconciler operation against the registry.

    Args:
        operation: One of 'create', 'read' or 'delete'
        resource: The resource to operate on

    Returns:
        The ReconcileResult from the reconciler.
    """
    reconciler = get_registry().get_reconciler_for_resource_type(RESOURCE_TYPE)
    if reconciler is None:
        raise ValueError(f"No reconciler registered for {RESOURCE_TYPE}")

    ctx = ReconcilerContext(client=await get_client())
    return await getattr(reconciler, operation)(resource, ctx)


def load_attributes(filename: str) -> Dict[str, Any]:
    """Read declared attributes from a YAML or JSON file."""
    with open(filename, "r") as f:
        try:
            if filename.endswith(".yaml") or filename.endswith(".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValidationError(f"Could not parse {filename}: {e}")

    if not isinstance(data, dict):
        raise ValidationError(f"{filename} must contain a mapping of attributes")
    return data


def default_state_file(spec_file: str) -> str:
    return f"{os.path.splitext(spec_file)[0]}.state.json"


def render_state(state: RepositoryState, output: str) -> str:
    data = state.to_dict()
    if output == "json":
        return json.dumps(data, indent=2)
    if output == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    rows = [[key, value] for key, value in data.items()]
    return tabulate(rows, headers=["Field", "Value"], tablefmt="simple")


def echo_diagnostics(diagnostics: List[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        prefix = "Error" if diagnostic.is_error else "Warning"
        click.echo(f"{prefix}: {diagnostic.summary}", err=True)
        if diagnostic.detail:
            click.echo(f"  {diagnostic.detail}", err=True)


def fail(error: Exception) -> NoReturn:
    """Report a fatal error and exit with status 1."""
    echo_diagnostics([Diagnostic.from_error(error)])
    raise SystemExit(1)


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """Tool shed repository reconciler - install and track Galaxy repositories"""
    setup_logging(log_level)
    try:
        register_builtin_plugins()
    except ValueError as e:
        fail(e)


@cli.command()
@click.argument("spec_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--state-file", "-s", default=None, help="Where to record the state")
@click.option("--output", "-o", type=OUTPUT_FORMATS, default="table")
def install(spec_file, state_file, output):
    """Install the repository declared in SPEC_FILE"""
    state_file = state_file or default_state_file(spec_file)

    try:
        resource = RepositoryResource.from_attributes(load_attributes(spec_file))
        if os.path.exists(state_file) and load_resource(state_file).state:
            raise ValidationError(
                f"{state_file} already tracks an installed repository; "
                f"uninstall it first"
            )
        result = asyncio.run(run_operation("create", resource))
    except (ReconcilerError, ValueError) as e:
        fail(e)

    save_resource(resource, state_file)
    echo_diagnostics(result.diagnostics)
    click.echo(render_state(resource.state, output))
    click.echo(f"State written to {state_file}")


@cli.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=OUTPUT_FORMATS, default="table")
def refresh(state_file, output):
    """Refresh the known state of the repository in STATE_FILE"""
    try:
        resource = load_resource(state_file)
        result = asyncio.run(run_operation("read", resource))
    except (ReconcilerError, ValueError) as e:
        fail(e)

    save_resource(resource, state_file)
    if result.drift_detected:
        click.echo(
            f"Warning: repository {resource.id} is no longer installed "
            f"(deleted={resource.state.deleted}, "
            f"uninstalled={resource.state.uninstalled})",
            err=True,
        )
    click.echo(render_state(resource.state, output))


@cli.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
@click.confirmation_option(
    prompt="Are you sure you want to uninstall this repository?"
)
def uninstall(state_file):
    """Uninstall the repository in STATE_FILE"""
    try:
        resource = load_resource(state_file)
    except (ReconcilerError, ValueError) as e:
        fail(e)

    try:
        result = asyncio.run(run_operation("delete", resource))
    except (ReconcilerError, ValueError) as e:
        if resource.id is not None:
            click.echo(
                f"State kept in {state_file}; run refresh before retrying",
                err=True,
            )
        fail(e)

    delete_resource_file(state_file)
    click.echo(result.message)


@cli.command()
@click.argument("repository_id")
@click.option("--output", "-o", type=OUTPUT_FORMATS, default="table")
def show(repository_id, output):
    """Show the registry's view of REPOSITORY_ID"""

    async def fetch() -> RepositoryState:
        client = await get_client()
        return RepositoryState.from_result(await client.get(repository_id))

    try:
        state = asyncio.run(fetch())
    except (ReconcilerError, ValueError) as e:
        fail(e)

    click.echo(render_state(state, output))


if __name__ == "__main__":
    cli()
