"""Test file discovery - list_tests tool."""

from vitest_mcp.discovery.finder import (
    TestFile,
    classify_test_type,
    find_project_root,
    find_test_files,
    is_test_file,
)

__all__ = [
    "TestFile",
    "classify_test_type",
    "find_project_root",
    "find_test_files",
    "is_test_file",
]
