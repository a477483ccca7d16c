"""
Configuration management for Library Relink
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

BASE_PATH_ENV = "LIBRARY_RELINK_BASE_PATH"

LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class RelinkConfig:
    """Configuration for matching and export."""

    base_path: str = ""  # Empty: the scanned candidate folder
    export_filename: str = "rekordbox_relinked.xml"
    suggestion_count: int = 5
    auto_match_threshold: float = 0.8

    def validate(self) -> None:
        """Validate relink configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0.0 <= self.auto_match_threshold <= 1.0:
            raise ValueError(
                f"auto_match_threshold must be between 0 and 1, got {self.auto_match_threshold}"
            )
        if self.suggestion_count < 1:
            raise ValueError(f"suggestion_count must be at least 1, got {self.suggestion_count}")
        if not self.export_filename.strip():
            raise ValueError("export_filename must not be empty")


@dataclass
class CandidatesConfig:
    """Configuration for candidate folder scanning."""

    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".m4a", ".aac", ".aif", ".aiff", ".wav", ".flac", ".ogg", ".opus"]
    )
    scan_recursive: bool = True

    def validate(self) -> None:
        """Validate candidate scanning values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not isinstance(self.supported_formats, list) or not all(
            isinstance(fmt, str) and fmt.startswith(".") for fmt in self.supported_formats
        ):
            raise ValueError(
                f"supported_formats must be a list of extensions like \".mp3\", got {self.supported_formats!r}"
            )
        if not isinstance(self.scan_recursive, bool):
            raise ValueError(f"scan_recursive must be true or false, got {self.scan_recursive!r}")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/library-relink/library-relink.log)
    )
    console_output: bool = False  # Also output to stderr (for debugging)

    def validate(self) -> None:
        """Validate logging values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {LOG_LEVELS}, got {self.level!r}")
        if not isinstance(self.console_output, bool):
            raise ValueError(f"console_output must be true or false, got {self.console_output!r}")


@dataclass
class Config:
    """Main configuration object."""

    relink: RelinkConfig = field(default_factory=RelinkConfig)
    candidates: CandidatesConfig = field(default_factory=CandidatesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "library-relink"
    return Path.home() / ".config" / "library-relink"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/library-relink (or ~/.config/library-relink)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "library-relink"
    return Path.home() / ".local" / "share" / "library-relink"


def get_log_file_path(config: Config) -> Path:
    """Configured log file, or the default one in the data directory."""
    if config.logging.log_file:
        return Path(config.logging.log_file)
    return get_data_dir() / "library-relink.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Library Relink Configuration

[relink]
# Root the rewritten locations resolve under, e.g. "file://localhost/Users/dj/Music"
# Leave empty to use the scanned folder itself
base_path = ""

# File name used when exporting into a directory
export_filename = "rekordbox_relinked.xml"

# Number of suggestions shown per track
suggestion_count = 5

# Minimum score (0-1) for automatic matching
auto_match_threshold = 0.8

[candidates]
# Audio file formats considered as remap targets
supported_formats = [".mp3", ".m4a", ".aac", ".aif", ".aiff", ".wav", ".flac", ".ogg", ".opus"]

# Recursively scan subdirectories
scan_recursive = true

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/library-relink/library-relink.log)
# log_file = "/path/to/custom/library-relink.log"

# Also output logs to stderr (useful for debugging)
console_output = false
""".strip()


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - LIBRARY_RELINK_BASE_PATH

    Args:
        config_path: Explicit config file (skips the lookup order)
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = get_config_path()
        if not config_path.exists():
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            logger.info(f"Created default configuration at: {config_path}")

    config = Config()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}")
        logger.warning("Using default configuration.")
        toml_data = {}

    if "relink" in toml_data:
        relink_data = toml_data["relink"]
        base_path = relink_data.get("base_path", config.relink.base_path)
        try:
            config.relink = RelinkConfig(
                base_path=base_path,
                export_filename=relink_data.get("export_filename", config.relink.export_filename),
                suggestion_count=int(
                    relink_data.get("suggestion_count", config.relink.suggestion_count)
                ),
                auto_match_threshold=float(
                    relink_data.get("auto_match_threshold", config.relink.auto_match_threshold)
                ),
            )
            config.relink.validate()
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid relink configuration: {e}")
            logger.warning("Using default relink configuration.")
            config.relink = RelinkConfig(base_path=base_path)

    if "candidates" in toml_data:
        candidates_data = toml_data["candidates"]
        try:
            candidates = CandidatesConfig(
                supported_formats=candidates_data.get(
                    "supported_formats", config.candidates.supported_formats
                ),
                scan_recursive=candidates_data.get(
                    "scan_recursive", config.candidates.scan_recursive
                ),
            )
            candidates.validate()
            candidates.supported_formats = [fmt.lower() for fmt in candidates.supported_formats]
            config.candidates = candidates
        except ValueError as e:
            logger.warning(f"Invalid candidates configuration: {e}")
            logger.warning("Using default candidates configuration.")

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        try:
            if log_file is not None and not isinstance(log_file, str):
                raise ValueError(f"log_file must be a path string, got {log_file!r}")
            logging_config = LoggingConfig(
                level=str(logging_data.get("level", config.logging.level)).upper(),
                log_file=str(Path(log_file).expanduser()) if log_file else None,
                console_output=logging_data.get(
                    "console_output", config.logging.console_output
                ),
            )
            logging_config.validate()
            config.logging = logging_config
        except ValueError as e:
            logger.warning(f"Invalid logging configuration: {e}")
            logger.warning("Using default logging configuration.")

    base_path = os.environ.get(BASE_PATH_ENV)
    if base_path:
        config.relink.base_path = base_path

    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
