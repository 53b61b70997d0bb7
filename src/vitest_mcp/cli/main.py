"""vitest-mcp CLI - serve MCP over stdio, or inspect a project."""

import sys
from typing import Any

import click

from vitest_mcp import __version__
from vitest_mcp.cli.versions import versions_command
from vitest_mcp.config.cli_args import config_options
from vitest_mcp.core.logging import configure_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="vitest-mcp")
@config_options
@click.pass_context
def cli(ctx: click.Context, **options: Any) -> None:
    """Vitest MCP server - structured Vitest runs and coverage for AI agents.

    With no command, serves MCP over stdio. Options here are one tier of
    configuration, above VITEST_MCP_* variables and the config file.
    """
    if ctx.invoked_subcommand is not None:
        # Subcommands write results to stdout; logs stay on stderr.
        configure_logging(level="DEBUG" if options.get("verbose") else "WARNING")
        return

    from vitest_mcp.mcp.server import run_server

    # The loader re-parses argv so the CLI tier is read one way everywhere.
    run_server(sys.argv[1:])


cli.add_command(versions_command, name="versions")


if __name__ == "__main__":
    cli()
