"""Tests for testing/console_logs.py."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vitest_mcp.testing.console_logs import LogCapture, capture_console_logs, render_capture_config


class TestRenderCaptureConfig:
    """Tests for the generated Vitest config."""

    def test_standalone(self, tmp_path: Path) -> None:
        """Without a base config the capture config is exported alone."""
        source = render_capture_config(None, tmp_path / "out.jsonl")
        assert "onConsoleLog" in source
        assert json.dumps(str(tmp_path / "out.jsonl")) in source
        assert "export default captureConfig;" in source
        assert "baseConfig" not in source

    def test_extends_base(self, tmp_path: Path) -> None:
        """A base config is imported and merged."""
        base = tmp_path / "vitest.config.ts"
        source = render_capture_config(base, tmp_path / "out.jsonl")
        assert json.dumps(base.as_uri()) in source
        assert "mergeConfig(resolvedBase, captureConfig)" in source


class TestLogCapture:
    """Tests for reading captured logs and cleanup."""

    def test_read_logs(self, tmp_path: Path) -> None:
        """JSON lines become prefixed strings; junk lines pass through."""
        log_path = tmp_path / "console.jsonl"
        log_path.write_text(
            json.dumps({"type": "stdout", "log": "hello\n"})
            + "\n\n"
            + json.dumps({"type": "stderr", "log": "oops"})
            + "\nraw line\n"
        )
        capture = LogCapture(config_path=tmp_path / "c.mjs", log_path=log_path)
        assert capture.read_logs() == ["[stdout] hello", "[stderr] oops", "raw line"]

    def test_read_missing(self, tmp_path: Path) -> None:
        """Nothing logged, nothing returned."""
        assert LogCapture(tmp_path / "c.mjs", tmp_path / "none.jsonl").read_logs() == []

    def test_config_removed_afterwards(self, js_project: Path) -> None:
        """The temporary config lives in the project root only during the run."""
        with capture_console_logs(js_project) as capture:
            assert capture.config_path.parent == js_project
            assert capture.config_path.is_file()
            log_dir = capture.log_path.parent
            assert log_dir.is_dir()
        assert not capture.config_path.exists()
        assert not log_dir.exists()

    def test_removed_on_error(self, js_project: Path) -> None:
        """Cleanup also runs when the run raises."""
        with pytest.raises(RuntimeError, match="runner crashed"):
            with capture_console_logs(js_project) as capture:
                raise RuntimeError("runner crashed")
        assert not capture.config_path.exists()
