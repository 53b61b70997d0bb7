"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local vitest_mcp package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of vitest_mcp modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("vitest_mcp"):
        del sys.modules[module_name]


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """No VITEST_MCP_* variables, cwd and HOME in a scratch directory.

    Keeps a developer's real config files and environment out of tests.
    """
    import os

    for name in list(os.environ):
        if name.upper().startswith("VITEST_MCP_"):
            monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def js_project(tmp_path: Path) -> Path:
    """A minimal JS project: package.json plus a few source and test files."""
    root = tmp_path / "app"
    (root / "src" / "utils").mkdir(parents=True)
    (root / "tests" / "integration").mkdir(parents=True)
    (root / "package.json").write_text('{"name": "app", "version": "1.0.0"}')
    (root / "src" / "utils" / "math.ts").write_text("export const add = (a, b) => a + b;\n")
    (root / "src" / "utils" / "math.test.ts").write_text("test('add', () => {});\n")
    (root / "src" / "app.spec.tsx").write_text("test('renders', () => {});\n")
    (root / "tests" / "integration" / "api.test.js").write_text("test('api', () => {});\n")
    return root
