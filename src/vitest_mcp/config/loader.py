"""Configuration loading with pydantic-settings.

Merges four tiers with strict precedence:
1. Command-line arguments (highest priority)
2. Environment variables (VITEST_MCP_*)
3. Config file (JSON, or YAML for .yaml/.yml)
4. Built-in defaults (lowest priority)

A None value at any tier falls through to the tier below. Coverage exclusion
globs are unioned with the built-in list instead of replacing it.

Resolution never raises: unreadable or malformed files and tiers that fail
validation are logged and skipped.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from vitest_mcp.config.cli_args import get_config_path_from_args, parse_cli_args
from vitest_mcp.config.models import OutputFormat, VitestMCPConfig
from vitest_mcp.core.errors import ConfigError

log = structlog.get_logger(__name__)

# Searched in order when neither --config nor VITEST_MCP_CONFIG is given.
DEFAULT_CONFIG_FILENAMES = (".vitest-mcp.json", "vitest-mcp.config.json")
GLOBAL_CONFIG_PATHS = (
    Path("~/.vitest-mcp.json"),
    Path("~/.config/vitest-mcp/config.json"),
)

# (section, key) pairs whose list values are unioned across tiers.
_UNION_FIELDS: frozenset[tuple[str, str]] = frozenset({("coverageDefaults", "exclude")})


class EnvironmentOverrides(BaseSettings):
    """Environment tier. Every field defaults to None so unset vars fall through."""

    model_config = SettingsConfigDict(
        env_prefix="VITEST_MCP_",
        case_sensitive=False,
        extra="ignore",
    )

    config: str | None = Field(default=None, description="Config file path")
    test_format: OutputFormat | None = None
    test_timeout: int | None = None
    coverage_threshold: float | None = None
    verbose: bool | None = None
    working_dir: str | None = None
    dev_mode: bool | None = None
    debug: bool | None = None

    def to_tier(self) -> dict[str, Any]:
        """Map onto a partial config dict (camelCase, file shape)."""
        tier: dict[str, Any] = {
            "testDefaults": {"format": self.test_format, "timeout": self.test_timeout},
            "coverageDefaults": {"threshold": self.coverage_threshold},
            "server": {
                "verbose": self.verbose,
                "workingDirectory": self.working_dir,
                "devMode": self.dev_mode,
            },
        }
        if self.debug:
            tier["logging"] = {"level": "DEBUG"}
        return tier


def read_environment() -> EnvironmentOverrides:
    """Read VITEST_MCP_* variables, dropping any that fail validation."""
    try:
        return EnvironmentOverrides()
    except ValidationError as e:
        bad = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
        log.warning("env_config_invalid", variables=sorted(bad), error=str(e))
        # init kwargs outrank env vars, so None masks the invalid values
        return EnvironmentOverrides(**{name: None for name in bad})


def _load_file(path: Path) -> dict[str, Any]:
    """Parse a config file. Raises ConfigError on unreadable or malformed input."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError.parse_error(str(path), e.strerror or str(e)) from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError.parse_error(str(path), str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be an object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base. None values never overwrite."""
    result = base.copy()
    for key, value in override.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _union(base: list[Any], extra: list[Any]) -> list[Any]:
    """Order-preserving de-duplicated union."""
    return list(dict.fromkeys([*base, *extra]))


def _merge_tier(current: dict[str, Any], tier: dict[str, Any]) -> dict[str, Any]:
    merged = _deep_merge(current, tier)
    for section, key in _UNION_FIELDS:
        tier_section, current_section = tier.get(section), current.get(section)
        if not isinstance(tier_section, dict) or not isinstance(current_section, dict):
            continue
        extra, base = tier_section.get(key), current_section.get(key)
        if isinstance(extra, list) and isinstance(base, list):
            merged[section] = {**merged[section], key: _union(base, extra)}
    return merged


def find_config_file(argv: Sequence[str], env: EnvironmentOverrides) -> Path | None:
    """Pick the config file: --config > VITEST_MCP_CONFIG > default locations."""
    explicit = get_config_path_from_args(argv) or env.config
    if explicit:
        return Path(explicit).expanduser()

    candidates = [Path.cwd() / name for name in DEFAULT_CONFIG_FILENAMES]
    candidates += [p.expanduser() for p in GLOBAL_CONFIG_PATHS]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_configuration(argv: Sequence[str] = ()) -> VitestMCPConfig:
    """Resolve configuration from defaults, file, environment and argv.

    Never raises: each tier that cannot be read or validated is skipped.
    """
    env = read_environment()
    tiers: list[tuple[str, dict[str, Any]]] = []

    config_path = find_config_file(argv, env)
    if config_path is not None:
        try:
            tiers.append(("file", _load_file(config_path)))
            log.debug("config_file_loaded", path=str(config_path))
        except ConfigError as e:
            log.warning("config_file_invalid", path=str(config_path), error=e.message)

    tiers.append(("env", env.to_tier()))
    tiers.append(("cli", parse_cli_args(argv)))

    current: dict[str, Any] = VitestMCPConfig().model_dump(by_alias=True)
    resolved = VitestMCPConfig.model_validate(current)
    for source, tier in tiers:
        candidate = _merge_tier(current, tier)
        try:
            resolved = VitestMCPConfig.model_validate(candidate)
        except ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(loc) for loc in err["loc"])
            log.warning(
                "config_tier_invalid",
                source=source,
                error=ConfigError.invalid_value(field, err.get("input"), err["msg"]).message,
            )
            continue
        current = candidate

    return resolved


def _fingerprint(argv: Sequence[str]) -> str:
    return hashlib.sha256(json.dumps(list(argv)).encode()).hexdigest()


class ConfigResolver:
    """Resolves configuration once per distinct argument vector.

    Identical argv returns the identical instance and reads the config file
    at most once. The environment is read on first resolution only.
    """

    def __init__(self) -> None:
        self._cache: dict[str, VitestMCPConfig] = {}

    def resolve(self, argv: Sequence[str] | None = None) -> VitestMCPConfig:
        key = _fingerprint(argv or ())
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        config = load_configuration(argv or ())
        self._cache[key] = config
        log.debug("config_resolved", fingerprint=key[:12], pid=os.getpid())
        return config

    def clear(self) -> None:
        """Drop cached configurations (next resolve re-reads every tier)."""
        self._cache.clear()
