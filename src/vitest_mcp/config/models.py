"""Pydantic configuration models.

Configuration Hierarchy (highest to lowest precedence):
1. Command-line arguments (--format, --timeout, ...)
2. Environment variables (VITEST_MCP_*)
3. Config file (--config, VITEST_MCP_CONFIG, or a default location)
4. Built-in defaults (this file)

Config files use camelCase keys mirroring these models:

    {
      "testDefaults": {"format": "detailed", "timeout": 60000},
      "coverageDefaults": {"exclude": ["**/generated/**"]},
      "safety": {"allowedPaths": ["/home/me/projects"]}
    }
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
OutputFormat = Literal["summary", "detailed"]

# Non-production sources that never count toward coverage.
DEFAULT_COVERAGE_EXCLUDE: tuple[str, ...] = (
    "**/node_modules/**",
    "**/*.stories.*",
    "**/*.story.*",
    "**/.storybook/**",
    "**/storybook-static/**",
    "**/e2e/**",
    "**/*.e2e.*",
    "**/__mocks__/**",
    "**/mocks/**",
    "**/*.mock.*",
    "**/fixtures/**",
    "**/test-utils/**",
    "**/test-helpers/**",
    "**/*.test.*",
    "**/*.spec.*",
    "**/*.d.ts",
)


class _Section(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class LogOutputConfig(_Section):
    """Single logging output. stdout is reserved for the MCP transport."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v == "stderr":
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(_Section):
    """Logging configuration.

    Env vars:
        VITEST_MCP_DEBUG: Any truthy value switches the level to DEBUG
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG includes runner command lines and raw stderr.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class TestDefaultsConfig(_Section):
    """Defaults for run_tests.

    Env vars:
        VITEST_MCP_TEST_FORMAT: summary | detailed
        VITEST_MCP_TEST_TIMEOUT: Runner timeout in milliseconds
    """

    format: OutputFormat = Field(
        default="summary",
        description="Output format when the call does not force one.",
    )
    timeout: int = Field(
        default=30000,
        description="Kill the runner after this many milliseconds.",
    )
    watch_mode: bool = Field(
        default=False,
        description="Reserved. Runs are always single-shot (vitest run).",
    )

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class CoverageDefaultsConfig(_Section):
    """Defaults for analyze_coverage.

    User-supplied ``exclude`` patterns are added to the built-in list, never
    replace it.

    Env vars:
        VITEST_MCP_COVERAGE_THRESHOLD: Uniform fallback threshold (0-100)
    """

    format: OutputFormat = "summary"
    exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_COVERAGE_EXCLUDE))
    threshold: float | None = Field(
        default=None,
        description="Applied to every metric when vitest.config declares no thresholds.",
    )

    @field_validator("threshold")
    @classmethod
    def validate_threshold(cls, v: float | None) -> float | None:
        if v is not None and not (0 <= v <= 100):
            raise ValueError(f"Threshold must be 0-100, got {v}")
        return v


class DiscoveryConfig(_Section):
    """Test file discovery.

    ``testPatterns`` is accepted and kept for config compatibility only;
    discovery always matches ``*.test|spec.(js|ts|jsx|tsx)``.
    """

    test_patterns: list[str] = Field(
        default_factory=lambda: ["**/*.{test,spec}.{js,ts,jsx,tsx}"],
        description="Reserved. Not consulted by discovery.",
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["node_modules", "dist", "coverage", ".git"],
        description="Directory names skipped during discovery.",
    )
    max_depth: int = Field(default=10, ge=0)


class ServerConfig(_Section):
    """Server configuration.

    Env vars:
        VITEST_MCP_VERBOSE: Log at DEBUG level
        VITEST_MCP_WORKING_DIR: Working directory reported at startup
        VITEST_MCP_DEV_MODE: Allow targeting the vitest-mcp package itself
    """

    verbose: bool = False
    validate_paths: bool = Field(
        default=True,
        description="Reject tool path arguments that escape the project root.",
    )
    allow_root_execution: bool = Field(
        default=False,
        description="Allow running tests or coverage against the whole project root.",
    )
    working_directory: str = Field(default_factory=os.getcwd)
    dev_mode: bool = False


class SafetyConfig(_Section):
    """Sandboxing limits.

    Only ``allowedPaths`` is enforced. ``maxFiles``, ``requireConfirmation``
    and ``allowedRunners`` are reserved: validated and carried in the
    resolved config, but no operation reads them yet.
    """

    max_files: int = Field(default=100, ge=1, description="Reserved.")
    require_confirmation: bool = Field(default=True, description="Reserved.")
    allowed_runners: list[str] = Field(
        default_factory=lambda: ["vitest"], description="Reserved."
    )
    allowed_paths: list[str] | None = Field(
        default=None,
        description="If set, project roots and targets must live under one of these.",
    )


class VitestMCPConfig(_Section):
    """Fully resolved configuration. Immutable."""

    test_defaults: TestDefaultsConfig = Field(default_factory=TestDefaultsConfig)
    coverage_defaults: CoverageDefaultsConfig = Field(default_factory=CoverageDefaultsConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    safety: SafetyConfig = Field(default_factory=SafetyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
