"""
Configuration management for youtube-mp3

This module handles loading and validation of application settings from YAML
files and environment variables. Settings are grouped into dataclass sections:
- Download behaviour (temporary and output directories, chunking, container filter)
- Audio output (format and the accepted bitrate range)
- Metadata resolution (lookup endpoint, title separators, default album)
- Network and logging options

Command-line flags always win over these values; the settings only provide the
defaults a user may want to change once instead of on every invocation.
"""

import os
import tempfile
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


DEFAULT_SEPARATORS = ["-", "—"]


@dataclass
class DownloadConfig:
    """
    Download configuration settings

    Controls where intermediate files go and how the selected stream is fetched.
    chunk_size is the size of each ranged HTTP request when the stream length
    is known up front.
    """
    temp_directory: str = str(Path(tempfile.gettempdir()) / "youtube-mp3")
    output_directory: str = "."
    chunk_size: int = 10 * 1024 * 1024
    container: Optional[str] = None  # e.g. "mp4" to only consider mp4 streams
    socket_timeout: int = 30


@dataclass
class AudioConfig:
    """
    Audio output configuration

    The bitrate bounds apply to the --bitrate flag and to the bitrate derived
    from the source stream.
    """
    format: str = "mp3"
    min_bitrate: int = 32
    max_bitrate: int = 320


@dataclass
class MetadataConfig:
    """
    Song metadata resolution and tagging configuration

    lookup_url points at an iTunes-compatible search endpoint. separators are
    the literal tokens used to split "Artist - Title" video titles.
    """
    lookup_url: str = "https://itunes.apple.com/search"
    lookup_limit: int = 25
    country: str = "US"
    default_album: str = "Single"
    separators: List[str] = field(default_factory=lambda: list(DEFAULT_SEPARATORS))
    id3_version: str = "2.4"


@dataclass
class NetworkConfig:
    """HTTP client configuration for the metadata lookup and stream download"""
    user_agent: str = "youtube-mp3/1.0"
    request_timeout: int = 30


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    file is optional; when set, a rotating log file receives every record
    including the technical detail hidden from the console.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, then applies environment
    variable overrides. Sections are exposed as attributes (settings.download,
    settings.metadata, ...).
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".youtube-mp3"

        self.download = DownloadConfig()
        self.audio = AudioConfig()
        self.metadata = MetadataConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()

        self._load_config()
        self._load_environment_variables()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches the explicit path, the user config directory and the working
        directory, in that order. The first existing file is used.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except (OSError, yaml.YAMLError) as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only keys that exist on the matching dataclass are applied; unknown
        sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = {
            'download': self.download,
            'audio': self.audio,
            'metadata': self.metadata,
            'network': self.network,
            'logging': self.logging,
        }

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """Environment variables take precedence over file-based configuration"""
        env_mappings = {
            'YOUTUBE_MP3_OUTPUT_DIR': lambda v: setattr(self.download, 'output_directory', v),
            'YOUTUBE_MP3_TEMP_DIR': lambda v: setattr(self.download, 'temp_directory', v),
            'YOUTUBE_MP3_LOOKUP_URL': lambda v: setattr(self.metadata, 'lookup_url', v),
            'YOUTUBE_MP3_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_temp_directory(self) -> Path:
        """
        Get the temporary directory, creating it if needed

        Returns:
            Path object for the scratch directory used for intermediate files
        """
        path = Path(self.download.temp_directory).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_output_directory(self) -> Path:
        """
        Get the expanded output directory path

        Returns:
            Path object for the directory receiving the final files
        """
        return Path(self.download.output_directory).expanduser()

    def get_config_directory(self) -> Path:
        """Get the expanded config directory path"""
        return self.config_dir

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to a YAML file

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path the configuration was written to
        """
        target = Path(path) if path else self.get_config_directory() / "config.yaml"
        config_data = {
            'download': asdict(self.download),
            'audio': asdict(self.audio),
            'metadata': asdict(self.metadata),
            'network': asdict(self.network),
            'logging': asdict(self.logging),
        }

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2, allow_unicode=True)
        return target

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable problems, empty when the configuration is valid
        """
        errors = []

        if self.audio.format != 'mp3':
            errors.append(f"Unsupported audio format: {self.audio.format}")

        if not (0 < self.audio.min_bitrate <= self.audio.max_bitrate):
            errors.append(
                f"Invalid bitrate range: {self.audio.min_bitrate}-{self.audio.max_bitrate}"
            )

        if not self.metadata.separators or not all(self.metadata.separators):
            errors.append("At least one non-empty title separator is required")

        if self.download.chunk_size <= 0:
            errors.append(f"Invalid chunk size: {self.download.chunk_size}")

        return errors

    def __str__(self) -> str:
        sections = [
            f"Audio: {self.audio.format} ({self.audio.min_bitrate}-{self.audio.max_bitrate} kbps)",
            f"Output: {self.download.output_directory}",
            f"Lookup: {self.metadata.lookup_url}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
