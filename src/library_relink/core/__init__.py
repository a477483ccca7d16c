"""Core infrastructure layer - no domain dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging (Loguru)
- Console management (Rich)
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_log_file_path,
    create_default_config,
    ensure_directories,
)
from .console import get_console, safe_print
from .output import log, setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_log_file_path",
    "create_default_config",
    "ensure_directories",
    # Console
    "get_console",
    "safe_print",
    # Output
    "log",
    "setup_loguru",
]
