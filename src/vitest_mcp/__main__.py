"""python -m vitest_mcp."""

from vitest_mcp.cli.main import cli

if __name__ == "__main__":
    cli()
