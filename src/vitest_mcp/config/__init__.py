"""Config module exports."""

from vitest_mcp.config.loader import ConfigResolver, load_configuration
from vitest_mcp.config.models import (
    CoverageDefaultsConfig,
    DiscoveryConfig,
    LoggingConfig,
    SafetyConfig,
    ServerConfig,
    TestDefaultsConfig,
    VitestMCPConfig,
)

__all__ = [
    "load_configuration",
    "ConfigResolver",
    "VitestMCPConfig",
    "TestDefaultsConfig",
    "CoverageDefaultsConfig",
    "DiscoveryConfig",
    "ServerConfig",
    "SafetyConfig",
    "LoggingConfig",
]
