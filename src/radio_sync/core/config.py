"""
Configuration management for radio-sync
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger


@dataclass
class RadioConfigSection:
    """Configuration for the listening session."""

    poll_interval_seconds: float = 5.0
    seek_delay_seconds: float = 0.2  # Seek this long after a fresh native play
    volume: float = 0.8  # 0.0 - 1.0
    progress_interval_seconds: float = 1.0

    def validate(self) -> None:
        """Validate radio configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.poll_interval_seconds <= 0:
            raise ValueError(
                f"poll_interval_seconds must be positive, got {self.poll_interval_seconds}"
            )
        if self.seek_delay_seconds < 0:
            raise ValueError(
                f"seek_delay_seconds must not be negative, got {self.seek_delay_seconds}"
            )
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError(f"volume must be between 0 and 1, got {self.volume}")
        if self.progress_interval_seconds <= 0:
            raise ValueError(
                "progress_interval_seconds must be positive, "
                f"got {self.progress_interval_seconds}"
            )


@dataclass
class PlayerConfig:
    """Configuration for the mpv-backed players."""

    mpv_path: str = "mpv"
    mpv_socket_path: Optional[str] = None
    startup_timeout_seconds: float = 5.0


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/radio-sync/radio-sync.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of rotated files to keep
    console_output: bool = False  # Also output to stderr (for debugging)


@dataclass
class WebConfig:
    """Configuration for the web API."""

    host: str = "127.0.0.1"
    port: int = 8642


@dataclass
class Config:
    """Main configuration object."""

    radio: RadioConfigSection = field(default_factory=RadioConfigSection)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    web: WebConfig = field(default_factory=WebConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "radio-sync"
    return Path.home() / ".config" / "radio-sync"


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
    3. XDG_CONFIG_HOME/radio-sync (or ~/.config/radio-sync)
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
        return Path(data_home) / "radio-sync"
    return Path.home() / ".local" / "share" / "radio-sync"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# radio-sync configuration

[radio]
# Seconds between reconciliation ticks
poll_interval_seconds = 5.0

# Delay before seeking a freshly started native track
seek_delay_seconds = 0.2

# Listening volume (0.0 - 1.0)
volume = 0.8

# Seconds between position updates while the embedded player is playing
progress_interval_seconds = 1.0

[player]
# mpv executable
mpv_path = "mpv"

# Path for the mpv socket (auto-generated if not specified)
# mpv_socket_path = "/tmp/radio-sync-mpv"

# Seconds to wait for mpv to create its socket
startup_timeout_seconds = 5.0

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/radio-sync/radio-sync.log)
# log_file = "/path/to/radio-sync.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of rotated log files to keep
backup_count = 5

# Also output logs to stderr (useful for debugging)
console_output = false

[web]
host = "127.0.0.1"
port = 8642
""".strip()


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for missing keys."""
    config = Config()

    if "radio" in toml_data:
        radio_data = toml_data["radio"]
        config.radio = RadioConfigSection(
            poll_interval_seconds=float(
                radio_data.get(
                    "poll_interval_seconds", config.radio.poll_interval_seconds
                )
            ),
            seek_delay_seconds=float(
                radio_data.get("seek_delay_seconds", config.radio.seek_delay_seconds)
            ),
            volume=float(radio_data.get("volume", config.radio.volume)),
            progress_interval_seconds=float(
                radio_data.get(
                    "progress_interval_seconds",
                    config.radio.progress_interval_seconds,
                )
            ),
        )
        try:
            config.radio.validate()
        except ValueError as e:
            logger.warning(f"Invalid radio configuration: {e}. Using defaults.")
            config.radio = RadioConfigSection()

    if "player" in toml_data:
        player_data = toml_data["player"]
        socket_path = player_data.get("mpv_socket_path")
        config.player = PlayerConfig(
            mpv_path=player_data.get("mpv_path", config.player.mpv_path),
            mpv_socket_path=str(Path(socket_path).expanduser()) if socket_path else None,
            startup_timeout_seconds=float(
                player_data.get(
                    "startup_timeout_seconds", config.player.startup_timeout_seconds
                )
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    if "web" in toml_data:
        web_data = toml_data["web"]
        config.web = WebConfig(
            host=web_data.get("host", config.web.host),
            port=int(web_data.get("port", config.web.port)),
        )

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides on top of file values."""
    poll_interval = os.environ.get("RADIO_SYNC_POLL_INTERVAL")
    if poll_interval:
        try:
            value = float(poll_interval)
            if value <= 0:
                raise ValueError(value)
            config.radio.poll_interval_seconds = value
        except ValueError:
            logger.warning(f"Ignoring invalid RADIO_SYNC_POLL_INTERVAL={poll_interval!r}")
    return config


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - RADIO_SYNC_POLL_INTERVAL
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            logger.info(f"Created default configuration at: {config_path}")
        except OSError as e:
            logger.warning(f"Could not write default configuration: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(_parse_config(toml_data))


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
