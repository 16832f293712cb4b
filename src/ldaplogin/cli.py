"""Command-line interface for testing the LDAP connector."""

from __future__ import annotations

from pathlib import Path

import click
from pydantic import ValidationError
from safir.asyncio import run_with_asyncio
from safir.click import display_help

from .config import EnvironmentSettings, LDAPConnectorConfig
from .factory import Factory

__all__ = [
    "authenticate",
    "check_config",
    "help",
    "main",
]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Command-line interface for ldaplogin."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic)


@main.command()
@click.argument("username")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    help="Password of the user (prompted for if not given).",
)
@click.option(
    "--config-path",
    envvar="LDAPLOGIN_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Connector configuration file.",
)
@run_with_asyncio
async def authenticate(
    *, username: str, password: str, config_path: Path | None
) -> None:
    """Authenticate a user and print the result as JSON.

    Exits with status 1 if the user is not valid.
    """
    factory = _load_factory(config_path)
    provider = factory.create_provider()
    result = await provider.authenticate(username, password)
    click.echo(result.to_json(indent=2))
    if not result.valid_user:
        raise click.exceptions.Exit(1)


@main.command()
@click.option(
    "--config-path",
    envvar="LDAPLOGIN_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Connector configuration file.",
)
def check_config(*, config_path: Path | None) -> None:
    """Validate the configuration and print it with secrets masked."""
    settings = EnvironmentSettings()
    path = config_path or settings.config_path
    try:
        config = LDAPConnectorConfig.from_file(path, settings)
    except (OSError, ValidationError) as e:
        raise click.ClickException(f"Invalid configuration {path}: {e}") from e
    click.echo(config.model_dump_json(by_alias=True, indent=2))


def _load_factory(config_path: Path | None) -> Factory:
    try:
        return Factory.from_file(config_path)
    except (OSError, ValidationError) as e:
        msg = f"Cannot load configuration: {e}"
        raise click.ClickException(msg) from e
