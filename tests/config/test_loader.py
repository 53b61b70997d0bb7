"""Tests for config/loader.py module.

Covers:
- _load_file() for JSON and YAML
- _deep_merge() / _merge_tier()
- find_config_file() search order
- load_configuration() tier precedence and failure tolerance
- ConfigResolver caching
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vitest_mcp.config.loader import (
    ConfigResolver,
    EnvironmentOverrides,
    _deep_merge,
    _load_file,
    _merge_tier,
    find_config_file,
    load_configuration,
    read_environment,
)
from vitest_mcp.config.models import DEFAULT_COVERAGE_EXCLUDE
from vitest_mcp.core.errors import ConfigError


class TestLoadFile:
    """Tests for _load_file function."""

    def test_loads_json(self, tmp_path: Path) -> None:
        """JSON object is returned as a dict."""
        path = tmp_path / "c.json"
        path.write_text('{"testDefaults": {"timeout": 5000}}')
        assert _load_file(path) == {"testDefaults": {"timeout": 5000}}

    def test_loads_yaml(self, tmp_path: Path) -> None:
        """YAML is used for .yaml/.yml files."""
        path = tmp_path / "c.yaml"
        path.write_text("testDefaults:\n  format: detailed\n")
        assert _load_file(path) == {"testDefaults": {"format": "detailed"}}

    def test_empty_yaml_is_empty_dict(self, tmp_path: Path) -> None:
        """An empty YAML document means no settings."""
        path = tmp_path / "c.yml"
        path.write_text("")
        assert _load_file(path) == {}

    def test_malformed_json_raises(self, tmp_path: Path) -> None:
        """Parse errors raise ConfigError."""
        path = tmp_path / "c.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            _load_file(path)

    def test_non_object_raises(self, tmp_path: Path) -> None:
        """A top-level array is rejected."""
        path = tmp_path / "c.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="must be an object"):
            _load_file(path)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Unreadable files raise ConfigError."""
        with pytest.raises(ConfigError):
            _load_file(tmp_path / "absent.json")


class TestMerging:
    """Tests for _deep_merge and _merge_tier."""

    def test_none_never_overwrites(self) -> None:
        """None values fall through to the lower tier."""
        base = {"testDefaults": {"timeout": 100, "format": "summary"}}
        merged = _deep_merge(base, {"testDefaults": {"timeout": None, "format": "detailed"}})
        assert merged == {"testDefaults": {"timeout": 100, "format": "detailed"}}

    def test_nested_dicts_merge(self) -> None:
        """Sibling keys survive a nested override."""
        merged = _deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}}

    def test_does_not_mutate_base(self) -> None:
        """Base dict is left untouched."""
        base = {"a": 1}
        _deep_merge(base, {"a": 2})
        assert base == {"a": 1}

    def test_coverage_exclude_is_unioned(self) -> None:
        """User excludes are appended to the existing list, duplicates dropped."""
        current = {"coverageDefaults": {"exclude": ["a", "b"]}}
        merged = _merge_tier(current, {"coverageDefaults": {"exclude": ["b", "c"]}})
        assert merged["coverageDefaults"]["exclude"] == ["a", "b", "c"]

    def test_non_dict_section_does_not_crash(self) -> None:
        """A malformed section is merged as-is and left for validation."""
        merged = _merge_tier({"coverageDefaults": {"exclude": ["a"]}}, {"coverageDefaults": 5})
        assert merged["coverageDefaults"] == 5


class TestFindConfigFile:
    """Tests for config file discovery order."""

    def test_cli_flag_wins(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """--config beats VITEST_MCP_CONFIG."""
        monkeypatch.setenv("VITEST_MCP_CONFIG", "/from/env.json")
        found = find_config_file(["--config", "/from/cli.json"], read_environment())
        assert found == Path("/from/cli.json")

    def test_env_var_used(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """VITEST_MCP_CONFIG is used without --config."""
        monkeypatch.setenv("VITEST_MCP_CONFIG", "/from/env.json")
        assert find_config_file([], read_environment()) == Path("/from/env.json")

    def test_default_in_cwd(self, isolated_env: Path) -> None:
        """./.vitest-mcp.json is picked up."""
        (isolated_env / ".vitest-mcp.json").write_text("{}")
        assert find_config_file([], read_environment()) == isolated_env / ".vitest-mcp.json"

    def test_home_config(self, isolated_env: Path) -> None:
        """~/.vitest-mcp.json is the fallback."""
        home = Path.home()
        (home / ".vitest-mcp.json").write_text("{}")
        assert find_config_file([], read_environment()) == home / ".vitest-mcp.json"

    def test_none_found(self, isolated_env: Path) -> None:
        """No file anywhere returns None."""
        assert find_config_file([], read_environment()) is None


class TestLoadConfiguration:
    """Tests for load_configuration tier precedence."""

    def test_defaults(self, isolated_env: Path) -> None:
        """No file, env or argv yields built-in defaults."""
        config = load_configuration([])
        assert config.test_defaults.format == "summary"
        assert config.test_defaults.timeout == 30000
        assert config.discovery.max_depth == 10
        assert config.server.validate_paths is True
        assert config.safety.allowed_paths is None
        assert list(config.coverage_defaults.exclude) == list(DEFAULT_COVERAGE_EXCLUDE)

    def test_file_over_defaults(self, isolated_env: Path) -> None:
        """Config file values override defaults."""
        (isolated_env / ".vitest-mcp.json").write_text(
            json.dumps({"testDefaults": {"timeout": 60000}, "discovery": {"maxDepth": 3}})
        )
        config = load_configuration([])
        assert config.test_defaults.timeout == 60000
        assert config.discovery.max_depth == 3

    def test_env_over_file(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment beats the file."""
        (isolated_env / ".vitest-mcp.json").write_text(
            json.dumps({"testDefaults": {"timeout": 60000}})
        )
        monkeypatch.setenv("VITEST_MCP_TEST_TIMEOUT", "45000")
        assert load_configuration([]).test_defaults.timeout == 45000

    def test_cli_over_env(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Command line beats the environment."""
        monkeypatch.setenv("VITEST_MCP_TEST_TIMEOUT", "45000")
        monkeypatch.setenv("VITEST_MCP_TEST_FORMAT", "detailed")
        config = load_configuration(["--timeout", "1000"])
        assert config.test_defaults.timeout == 1000
        assert config.test_defaults.format == "detailed"

    def test_coverage_excludes_extend_defaults(self, isolated_env: Path) -> None:
        """File excludes are added to the built-in list, never replace it."""
        (isolated_env / ".vitest-mcp.json").write_text(
            json.dumps({"coverageDefaults": {"exclude": ["**/generated/**"]}})
        )
        exclude = load_configuration([]).coverage_defaults.exclude
        assert "**/generated/**" in exclude
        assert set(DEFAULT_COVERAGE_EXCLUDE) <= set(exclude)

    def test_malformed_file_is_skipped(self, isolated_env: Path) -> None:
        """A broken file never raises; defaults apply."""
        (isolated_env / ".vitest-mcp.json").write_text("{oops")
        assert load_configuration([]).test_defaults.timeout == 30000

    def test_invalid_tier_is_skipped(self, isolated_env: Path) -> None:
        """A tier that fails validation is dropped, lower tiers survive."""
        (isolated_env / ".vitest-mcp.json").write_text(
            json.dumps({"testDefaults": {"timeout": -5}})
        )
        assert load_configuration([]).test_defaults.timeout == 30000

    def test_invalid_env_var_is_ignored(
        self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An unparsable env var is dropped, others still apply."""
        monkeypatch.setenv("VITEST_MCP_TEST_TIMEOUT", "soon")
        monkeypatch.setenv("VITEST_MCP_TEST_FORMAT", "detailed")
        config = load_configuration([])
        assert config.test_defaults.timeout == 30000
        assert config.test_defaults.format == "detailed"

    def test_debug_env_sets_log_level(
        self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """VITEST_MCP_DEBUG switches logging to DEBUG."""
        monkeypatch.setenv("VITEST_MCP_DEBUG", "true")
        assert load_configuration([]).logging.level == "DEBUG"

    def test_env_threshold_and_dev_mode(
        self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Threshold and dev mode come from the environment."""
        monkeypatch.setenv("VITEST_MCP_COVERAGE_THRESHOLD", "75")
        monkeypatch.setenv("VITEST_MCP_DEV_MODE", "true")
        config = load_configuration([])
        assert config.coverage_defaults.threshold == 75
        assert config.server.dev_mode is True

    def test_yaml_file_via_flag(self, isolated_env: Path) -> None:
        """--config accepts YAML."""
        path = isolated_env / "settings.yaml"
        path.write_text("safety:\n  allowedPaths:\n    - /srv/projects\n")
        config = load_configuration(["--config", str(path)])
        assert config.safety.allowed_paths == ["/srv/projects"]


class TestEnvironmentOverrides:
    """Tests for the environment tier shape."""

    def test_unset_fields_are_none(self, isolated_env: Path) -> None:
        """Nothing set maps to an all-None tier."""
        tier = EnvironmentOverrides().to_tier()
        assert tier["testDefaults"] == {"format": None, "timeout": None}
        assert "logging" not in tier


class TestConfigResolver:
    """Tests for ConfigResolver caching."""

    def test_same_argv_same_instance(self, isolated_env: Path) -> None:
        """Identical argv resolves to the identical object."""
        resolver = ConfigResolver()
        assert resolver.resolve(["--timeout", "10"]) is resolver.resolve(["--timeout", "10"])

    def test_different_argv_different_config(self, isolated_env: Path) -> None:
        """Different argv is resolved separately."""
        resolver = ConfigResolver()
        a = resolver.resolve(["--timeout", "10"])
        b = resolver.resolve(["--timeout", "20"])
        assert a.test_defaults.timeout == 10
        assert b.test_defaults.timeout == 20

    def test_clear_rereads(self, isolated_env: Path) -> None:
        """clear() drops the cache."""
        resolver = ConfigResolver()
        first = resolver.resolve([])
        resolver.clear()
        assert resolver.resolve([]) is not first

    def test_separate_resolvers_do_not_share(self, isolated_env: Path) -> None:
        """The cache belongs to one resolver instance."""
        assert ConfigResolver().resolve([]) is not ConfigResolver().resolve([])
