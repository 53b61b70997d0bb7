"""vitest-mcp versions command - check vitest and coverage provider versions."""

import asyncio
import json
from pathlib import Path

import click
from rich.table import Table

from vitest_mcp.core.console import get_console, status
from vitest_mcp.testing.versions import (
    PROVIDER_MINIMUM,
    VITEST_MINIMUM,
    VITEST_RECOMMENDED,
    VersionChecker,
    VersionInfo,
)


def _fmt(version: tuple[int, int, int] | None) -> str:
    return ".".join(map(str, version)) if version else "-"


def _status_cell(info: VersionInfo | None) -> str:
    if info is None:
        return "[red]missing[/red]"
    if not info.compatible:
        return "[red]incompatible[/red]"
    if not info.is_recommended:
        return "[yellow]outdated[/yellow]"
    return "[green]ok[/green]"


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def versions_command(path: Path, as_json: bool) -> None:
    """Check the vitest and coverage provider versions installed in a project.

    PATH is the project root (default: current directory). Exits 1 when a
    version is missing or incompatible.
    """
    project_root = path.resolve()
    result = asyncio.run(VersionChecker().check_all_versions(project_root))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        table = Table(title=f"Vitest versions in {project_root}")
        table.add_column("Package", style="cyan")
        table.add_column("Installed")
        table.add_column("Minimum")
        table.add_column("Recommended")
        table.add_column("Status")

        table.add_row(
            "vitest",
            result.vitest.version if result.vitest else "-",
            _fmt(VITEST_MINIMUM),
            _fmt(VITEST_RECOMMENDED),
            _status_cell(result.vitest),
        )
        provider = result.coverage_provider
        table.add_row(
            result.coverage_provider_name or "coverage provider",
            provider.version if provider else "-",
            _fmt(PROVIDER_MINIMUM),
            f"{result.vitest.major}.x" if result.vitest else "-",
            _status_cell(provider) if provider else "[yellow]missing[/yellow]",
        )

        console = get_console()
        console.print(table)
        for message in result.errors:
            status(message, style="error")
        for message in result.warnings:
            status(message, style="warning")

    if result.errors:
        raise SystemExit(1)
