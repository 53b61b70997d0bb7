"""vitest-mcp command line."""
