"""This module defines the 'config' command group for the Licita Brasil CLI."""

import click
from licita_brasil.providers.config_manager import ConfigManager
from licita_brasil.providers.secrets import is_secret_key, mask_value

ENV_FILE_OPTION = click.option(
    "--file", "env_file", type=click.Path(dir_okay=False), default=".env", help="Path to the .env file."
)


@click.group("config")
def config_group() -> None:
    """Groups commands related to configuration management."""
    pass


@config_group.command("list")
@click.option("--show-secrets", is_flag=True, help="Show secret values without masking.")
@ENV_FILE_OPTION
def list_values(show_secrets: bool, env_file: str) -> None:
    """Lists all configuration key-value pairs.

    Args:
        show_secrets: If True, shows secret values without masking.
        env_file: The path to the .env file.
    """
    values = ConfigManager(env_file).get_all()
    if not values:
        click.echo(f"No configuration found in {env_file}")
        return

    click.echo(f"Configuration from {env_file}:")
    for key, value in values.items():
        shown = value if show_secrets or not is_secret_key(key) else mask_value(value)
        click.echo(f"{key}={shown}")


@config_group.command("get")
@click.argument("key")
@click.option("--raw", is_flag=True, help="Show the raw value without masking.")
@ENV_FILE_OPTION
def get_value(key: str, raw: bool, env_file: str) -> None:
    """Prints one configuration value.

    Args:
        key: The configuration key.
        raw: If True, shows the raw value without masking.
        env_file: The path to the .env file.
    """
    value = ConfigManager(env_file).get(key)
    if value is None:
        click.secho(f"Key '{key}' not found in {env_file}", fg="red", err=True)
        raise click.Abort()
    click.echo(value if raw or not is_secret_key(key) else mask_value(value))


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@ENV_FILE_OPTION
def set_value(key: str, value: str, env_file: str) -> None:
    """Writes a configuration value to the .env file.

    Args:
        key: The configuration key.
        value: The value to store.
        env_file: The path to the .env file.
    """
    ConfigManager(env_file).set(key, value)
    click.secho(f"Set '{key}' in {env_file}", fg="green")


@config_group.command("unset")
@click.argument("key")
@ENV_FILE_OPTION
def unset_value(key: str, env_file: str) -> None:
    """Removes a configuration key from the .env file.

    Args:
        key: The configuration key.
        env_file: The path to the .env file.
    """
    if ConfigManager(env_file).unset(key):
        click.secho(f"Unset '{key}' in {env_file}", fg="yellow")
    else:
        click.secho(f"Key '{key}' not found in {env_file}", fg="red", err=True)
        raise click.Abort()
