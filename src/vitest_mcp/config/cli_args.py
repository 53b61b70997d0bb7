"""Command-line configuration tier.

The same click options back the ``vitest-mcp`` command and the CLI tier of
configuration resolution, so argv is parsed exactly one way.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import click
from click.core import ParameterSource

F = TypeVar("F", bound=Callable[..., Any])

_OPTIONS: list[Callable[[F], F]] = [
    click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False),
        help="Path to a JSON or YAML config file.",
    ),
    click.option(
        "--format",
        "test_format",
        type=click.Choice(["summary", "detailed"]),
        help="Default run_tests output format.",
    ),
    click.option("--timeout", type=int, help="Runner timeout in milliseconds."),
    click.option(
        "--coverage-format",
        type=click.Choice(["summary", "detailed"]),
        help="Default analyze_coverage output format.",
    ),
    click.option("--max-depth", type=int, help="Maximum directory depth for discovery."),
    click.option("--verbose", "-v", is_flag=True, help="Enable debug logging."),
    click.option("--working-dir", type=click.Path(file_okay=False), help="Working directory."),
    click.option(
        "--allowed-path",
        "allowed_paths",
        multiple=True,
        type=click.Path(file_okay=False),
        help="Restrict project roots to this directory (repeatable).",
    ),
    click.option("--dev-mode", is_flag=True, help="Allow targeting the vitest-mcp package."),
]


def config_options(fn: F) -> F:
    """Apply the shared configuration options to a click command."""
    for option in reversed(_OPTIONS):
        fn = option(fn)
    return fn


@click.command(
    add_help_option=False,
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
)
@config_options
def _argv_command(**_: Any) -> None:
    """Parse-only command; never invoked."""


def _explicit_params(argv: Sequence[str]) -> dict[str, Any]:
    """Return only the parameters actually present on the command line."""
    ctx = _argv_command.make_context("vitest-mcp", list(argv), resilient_parsing=True)
    return {
        name: value
        for name, value in ctx.params.items()
        if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE and value is not None
    }


def get_config_path_from_args(argv: Sequence[str]) -> str | None:
    """Return the --config value, if given."""
    value = _explicit_params(argv).get("config_path")
    return str(value) if value else None


def parse_cli_args(argv: Sequence[str]) -> dict[str, Any]:
    """Map argv onto a partial config dict (camelCase, file shape).

    Options not given on the command line are absent from the result so
    they fall through to lower tiers.
    """
    params = _explicit_params(argv)
    tier: dict[str, dict[str, Any]] = {}

    def put(section: str, key: str, value: Any) -> None:
        tier.setdefault(section, {})[key] = value

    if "test_format" in params:
        put("testDefaults", "format", params["test_format"])
    if "timeout" in params:
        put("testDefaults", "timeout", params["timeout"])
    if "coverage_format" in params:
        put("coverageDefaults", "format", params["coverage_format"])
    if "max_depth" in params:
        put("discovery", "maxDepth", params["max_depth"])
    if params.get("verbose"):
        put("server", "verbose", True)
    if "working_dir" in params:
        put("server", "workingDirectory", params["working_dir"])
    if params.get("dev_mode"):
        put("server", "devMode", True)
    if params.get("allowed_paths"):
        put("safety", "allowedPaths", list(params["allowed_paths"]))

    return tier
