#!/usr/bin/env python3
"""
CLI host for the Pterodactyl provider.

Drives the provider's lifecycle commands against one resource instance whose
state is kept in a local JSON state file: plan, apply, refresh, destroy,
import and show.
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

import click
import yaml
from tabulate import tabulate

from config import get_config
from plugins.base import (
    CreateCommand,
    DeleteCommand,
    Diagnostics,
    ImportCommand,
    ReadCommand,
    ResourceResponse,
    UpdateCommand,
    UserModel,
)
from plugins.registry import get_registry, register_builtin_resources
from plugins.resources.base import PlanAction
from provider import PterodactylProvider

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = "terraform.tfstate.json"
DEFAULT_RESOURCE_TYPE = "pterodactyl_user"


def build_provider() -> PterodactylProvider:
    """Load configuration and return a configured provider."""
    try:
        cfg = get_config()
    except ValueError as e:
        raise click.ClickException(str(e))

    logging.basicConfig(
        level=cfg.logging.level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    registry = get_registry()
    if not registry.list_resources():
        register_builtin_resources()

    provider = PterodactylProvider(registry)
    diagnostics = provider.configure(cfg.panel)
    _report(diagnostics)
    return provider


def _report(diagnostics: Diagnostics) -> None:
    """Print diagnostics to stderr and abort on errors."""
    for diagnostic in diagnostics:
        click.echo(str(diagnostic), err=True)
    if diagnostics.has_error():
        raise click.exceptions.Exit(1)


def _load_state(path: str) -> Tuple[str, Optional[UserModel]]:
    """Read the recorded resource from the state file, if any."""
    if not os.path.exists(path):
        return DEFAULT_RESOURCE_TYPE, None

    with open(path, "r") as f:
        data = json.load(f)

    type_name = data.get("type", DEFAULT_RESOURCE_TYPE)
    attributes = data.get("attributes")
    if not attributes:
        return type_name, None

    try:
        return type_name, UserModel.from_dict(attributes)
    except ValueError as e:
        raise click.ClickException(f"Corrupt state file {path}: {e}")


def _save_state(path: str, type_name: str, record: Optional[UserModel]) -> None:
    """Write the authoritative record, or clear it when the resource is gone."""
    data = {
        "version": 1,
        "type": type_name,
        "attributes": record.to_dict() if record else None,
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def _load_config_file(filename: str) -> Tuple[str, Dict[str, Any]]:
    """Read declared attributes from a YAML/JSON file."""
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if not isinstance(data, dict) or not isinstance(data.get("attributes"), dict):
        raise click.ClickException(f"{filename} must contain an 'attributes' mapping")
    return data.get("type", DEFAULT_RESOURCE_TYPE), data["attributes"]


def _run(provider: PterodactylProvider, command: Any) -> ResourceResponse:
    response = asyncio.run(provider.dispatch(command))
    for diagnostic in response.diagnostics:
        click.echo(str(diagnostic), err=True)
    return response


def _echo_record(record: UserModel, output: str) -> None:
    data = record.to_dict()
    if output == "json":
        click.echo(json.dumps(data, indent=2))
    elif output == "yaml":
        click.echo(yaml.dump(data, default_flow_style=False))
    else:
        rows = [[name, value] for name, value in data.items()]
        click.echo(tabulate(rows, headers=["Attribute", "Value"], tablefmt="grid"))


@click.group()
@click.option(
    "--state",
    "state_path",
    default=DEFAULT_STATE_FILE,
    show_default=True,
    help="Path of the JSON state file",
)
@click.pass_context
def cli(ctx, state_path):
    """Pterodactyl provider CLI - reconcile a panel user against a state file"""
    ctx.ensure_object(dict)
    ctx.obj["state_path"] = state_path


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def plan(ctx, filename):
    """Show which call would converge the panel to FILE"""
    state_path = ctx.obj["state_path"]
    provider = build_provider()
    type_name, attributes = _load_config_file(filename)
    _, prior = _load_state(state_path)

    result, diagnostics = provider.plan(type_name, prior, attributes)
    _report(diagnostics)

    click.echo(f"Action: {result.action.value}")
    if result.action is PlanAction.NOOP:
        click.echo("No changes. The panel matches the configuration.")
        return

    before = prior.declared() if prior else {}
    after = result.planned.declared() if result.planned else {}
    rows = [
        [name, before.get(name, "(none)"), after.get(name, "(known after apply)")]
        for name in result.changed
    ]
    headers = ["Attribute", "Before", "After"]
    click.echo(tabulate(rows, headers=headers, tablefmt="grid"))


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def apply(ctx, filename):
    """Create or update the user declared in FILE"""
    state_path = ctx.obj["state_path"]
    provider = build_provider()
    type_name, attributes = _load_config_file(filename)
    _, prior = _load_state(state_path)

    result, diagnostics = provider.plan(type_name, prior, attributes)
    _report(diagnostics)

    if result.action is PlanAction.NOOP:
        click.echo("No changes. The panel matches the configuration.")
        return

    if result.action is PlanAction.CREATE:
        response = _run(provider, CreateCommand(type_name, result.planned))
    else:
        response = _run(provider, UpdateCommand(type_name, result.planned))

    if not response.success:
        ctx.exit(1)

    _save_state(state_path, type_name, response.state)
    click.echo(f"Apply complete! User ID: {response.state.id}")


@cli.command()
@click.pass_context
def refresh(ctx):
    """Refresh the recorded user from the panel"""
    state_path = ctx.obj["state_path"]
    type_name, prior = _load_state(state_path)
    if prior is None:
        click.echo("No user recorded in state.")
        return

    provider = build_provider()
    response = _run(provider, ReadCommand(type_name, prior))

    if not response.success:
        # A user the panel can no longer return is dropped from state.
        logger.warning(f"Removing user ID {prior.id} from state")
        _save_state(state_path, type_name, None)
        click.echo(f"User ID {prior.id} could not be read and was removed from state.")
        ctx.exit(1)

    _save_state(state_path, type_name, response.state)
    click.echo(f"Refreshed user ID {response.state.id}")


@cli.command()
@click.confirmation_option(prompt="Are you sure you want to delete this user?")
@click.pass_context
def destroy(ctx):
    """Delete the recorded user from the panel"""
    state_path = ctx.obj["state_path"]
    type_name, prior = _load_state(state_path)
    if prior is None:
        click.echo("No user recorded in state.")
        return

    provider = build_provider()
    response = _run(provider, DeleteCommand(type_name, prior))

    if not response.success:
        ctx.exit(1)

    _save_state(state_path, type_name, None)
    click.echo(f"Destroyed user ID {prior.id}")


@cli.command(name="import")
@click.argument("username")
@click.option("--type", "type_name", default=DEFAULT_RESOURCE_TYPE, show_default=True)
@click.pass_context
def import_user(ctx, username, type_name):
    """Adopt an existing panel user by USERNAME"""
    state_path = ctx.obj["state_path"]
    _, prior = _load_state(state_path)
    if prior is not None:
        raise click.ClickException(
            f"State already holds user ID {prior.id}; destroy or remove it first"
        )

    provider = build_provider()
    response = _run(provider, ImportCommand(type_name, username))

    if not response.success:
        ctx.exit(1)

    _save_state(state_path, type_name, response.state)
    click.echo(f"Imported user {username} (ID {response.state.id})")


@cli.command()
@click.option(
    "--output", "-o", type=click.Choice(["table", "json", "yaml"]), default="table"
)
@click.pass_context
def show(ctx, output):
    """Show the recorded user"""
    _, record = _load_state(ctx.obj["state_path"])
    if record is None:
        click.echo("No user recorded in state.")
        return
    _echo_record(record, output)


if __name__ == "__main__":
    cli()
