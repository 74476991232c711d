"""This module initializes the CLI application."""

import click
from licita_brasil.cli.config import config_group
from licita_brasil.cli.search import search_command
from licita_brasil.cli.serve import serve_command
from licita_brasil.providers.logging import LoggingProvider


def create_cli() -> click.Group:
    """Create and configure the main CLI group with all subcommands.

    This function acts as a factory for the CLI application. It gathers the
    commands defined in the sibling modules under a single root group.

    Returns:
        The main Click command group for the application.
    """

    @click.group()
    @click.option(
        "--log-level",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
        help="Override the default log level for this command.",
    )
    def cli(log_level: str | None) -> None:
        """A command-line interface for searching Brazilian public procurements.

        It serves the HTTP API, runs searches straight from the terminal and
        manages the local .env configuration.

        Args:
            log_level: The desired logging level.
        """
        LoggingProvider().get_logger(level_override=log_level)

    cli.add_command(serve_command)
    cli.add_command(search_command)
    cli.add_command(config_group)

    return cli
