#!/usr/bin/env python3
"""
CLI tool for the Enterprise Reconciler.

Provides a kubectl-like interface for creating, inspecting and updating
enterprises from YAML/JSON declaration files.
"""

import asyncio
import json
import logging
import sys
from typing import Any, Dict

import click
import yaml
from tabulate import tabulate

from client import build_client
from config import get_config
from errors import ReconcilerError, RemoteFailure
from instance import ResourceInstance
from plugins.registry import get_registry, register_builtin_plugins
from schema import RESOURCE_TYPE
from validation import validate_declared


def load_declaration(filename: str) -> Dict[str, Any]:
    """Read declared attributes from a YAML or JSON file."""
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if not isinstance(data, dict):
        raise click.ClickException(f"{filename} must contain a mapping of attributes")
    return data


def get_reconciler():
    registry = get_registry()
    if not registry.has_reconciler_for_resource_type(RESOURCE_TYPE):
        register_builtin_plugins()
    return registry.get_reconciler_for_resource_type(RESOURCE_TYPE)


def run(coro, timeout: int):
    """Run one reconciler operation within the engine's time budget."""
    try:
        return asyncio.run(asyncio.wait_for(coro, timeout=timeout))
    except asyncio.TimeoutError:
        click.echo(f"Error: operation timed out after {timeout}s", err=True)
        sys.exit(1)
    except ReconcilerError as e:
        click.echo(f"Error: {e}", err=True)
        if isinstance(e, RemoteFailure) and e.response_body:
            click.echo(f"Response: {e.response_body}", err=True)
        sys.exit(1)


def show_instance(instance: ResourceInstance, output: str) -> None:
    if output == "json":
        click.echo(json.dumps(instance.to_dict(), indent=2))
    elif output == "yaml":
        click.echo(yaml.dump(instance.to_dict(), default_flow_style=False))
    else:
        rows = [["id", instance.id]]
        rows.extend([name, value] for name, value in instance.attributes.items())
        click.echo(tabulate(rows, headers=["Attribute", "Value"], tablefmt="grid"))


def require_valid(declared: Dict[str, Any]) -> None:
    is_valid, error = validate_declared(declared, get_reconciler().schema)
    if not is_valid:
        raise click.ClickException(f"Invalid declaration: {error}")


output_option = click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
)


@click.group()
def cli():
    """Enterprise Reconciler CLI - manage enterprises from declaration files"""
    cfg = get_config()
    logging.basicConfig(
        level=cfg.logging.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
def validate(filename):
    """Validate a declaration file"""
    require_valid(load_declaration(filename))
    click.echo("Declaration is valid")


@cli.command()
def schema():
    """Show the enterprise attribute schema"""
    rows = [
        [
            attr.name,
            attr.type,
            attr.mutability.value,
            "yes" if attr.required else "no",
            attr.description,
        ]
        for attr in get_reconciler().schema.values()
    ]
    click.echo(
        tabulate(
            rows,
            headers=["Attribute", "Type", "Mutability", "Required", "Description"],
            tablefmt="grid",
        )
    )


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@output_option
def create(filename, output):
    """Create an enterprise from a declaration file"""
    declared = load_declaration(filename)
    require_valid(declared)

    cfg = get_config()
    reconciler = get_reconciler()
    instance = ResourceInstance(schema=reconciler.schema)

    async def _create():
        client = build_client(cfg.api)
        await reconciler.create(declared, instance, client)

    run(_create(), cfg.timeouts.create)
    click.echo("Enterprise created successfully!")
    show_instance(instance, output)


@cli.command()
@click.argument("enterprise_id")
@output_option
def get(enterprise_id, output):
    """Show an existing enterprise"""
    cfg = get_config()
    reconciler = get_reconciler()

    async def _import():
        return await reconciler.import_state(enterprise_id, build_client(cfg.api))

    instance = run(_import(), cfg.api.request_timeout)
    show_instance(instance, output)


@cli.command()
@click.argument("enterprise_id")
@click.argument("filename", type=click.Path(exists=True))
def update(enterprise_id, filename):
    """Update an enterprise from a declaration file"""
    declared = load_declaration(filename)
    require_valid(declared)

    cfg = get_config()
    reconciler = get_reconciler()

    async def _update():
        client = build_client(cfg.api)
        instance = await reconciler.import_state(enterprise_id, client)
        return await reconciler.update(declared, instance, client)

    changes = run(_update(), cfg.timeouts.update)
    if "source_account_id" in declared:
        click.echo(
            "Note: source_account_id is set at creation and cannot be "
            "changed or verified by update"
        )
    if changes:
        click.echo("Enterprise updated successfully!")
        for name, value in changes.items():
            click.echo(f"  {name}: {value}")
    else:
        click.echo("Enterprise is up to date")


@cli.command()
@click.argument("enterprise_id")
@click.confirmation_option(prompt="Are you sure you want to delete this enterprise?")
def delete(enterprise_id):
    """Delete an enterprise (local record only)"""
    cfg = get_config()
    reconciler = get_reconciler()
    instance = ResourceInstance(id=enterprise_id, schema=reconciler.schema)

    run(reconciler.delete(instance), cfg.timeouts.delete)
    click.echo(f"Enterprise '{enterprise_id}' removed from state")
    click.echo("Note: the remote enterprise is not deleted; the API has no delete call")


if __name__ == "__main__":
    cli()
