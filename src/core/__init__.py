"""
Core - Application infrastructure shared by the graphscript tools.

Provides:
- ConfigManager: Configuration with persistence (JSON or TOML)
- setup_logging: Loguru sinks for console and rotating log files

Usage:
    from src.core import ConfigManager, setup_logging

    config = ConfigManager("config.json")
    setup_logging(config.data.general.debug_mode, config.data.general.log_dir)
"""
from .config import (
    ConfigManager,
    AppConfig,
    GeneralSettings,
    CodegenSettings,
    BuildSettings,
    PackagingSettings,
)
from .logging import setup_logging

__all__ = [
    "ConfigManager",
    "AppConfig",
    "GeneralSettings",
    "CodegenSettings",
    "BuildSettings",
    "PackagingSettings",
    "setup_logging",
]
