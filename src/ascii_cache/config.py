"""
ascii_cache Configuration
=========================

This module handles configuration loading for the frame cache.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    ASCII_CACHE_DIR               -> cache.directory
    ASCII_CACHE_COLUMNS           -> recording.num_columns
    ASCII_CACHE_BRIGHTNESS        -> recording.brightness
    ASCII_CACHE_CHARSET           -> recording.charset
    ASCII_CACHE_FRAME_INTERVAL_MS -> recording.frame_interval_ms
    ASCII_CACHE_LOG_LEVEL         -> logging.level
    ASCII_CACHE_LOG_FORMAT        -> logging.format

Example:
    from ascii_cache.config import settings

    print(settings.cache.directory)
    print(settings.recording.num_columns)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from ascii_cache.conversion.charsets import DEFAULT_CHARSET, CharsetKey
from ascii_cache.conversion.luma import round_half_up
from ascii_cache.presets import ConversionPreset


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class CacheConfig(BaseModel):
    """Cache directory configuration."""

    directory: str = Field(
        default="~/.ascii_cache",
        description="Directory holding .ascache files",
    )

    @property
    def path(self) -> Path:
        return Path(self.directory).expanduser()


class RecordingConfig(BaseModel):
    """Default capture settings for new recordings."""

    num_columns: int = Field(
        default=80,
        ge=20,
        le=200,
        description="Glyph columns per frame",
    )
    brightness: float = Field(
        default=1.0,
        ge=0.0,
        le=2.0,
        description="Brightness multiplier",
    )
    charset: CharsetKey = Field(
        default=DEFAULT_CHARSET,
        description="Charset used for glyph indices",
    )
    frame_interval_ms: int = Field(
        default=50,
        ge=1,
        le=65535,
        description="Nominal capture interval (50ms = 20 fps)",
    )

    @field_validator("charset", mode="before")
    @classmethod
    def _normalize_charset(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_preset(self) -> ConversionPreset:
        """
        Capture settings as a preset for the batch converter.

        Presets carry a frame rate rather than an interval; the rate is
        round(1000 / frame_interval_ms) limited to 1..60 fps.
        """
        fps = min(60, max(1, round_half_up(1000 / self.frame_interval_ms)))
        return ConversionPreset(
            name="Configured",
            description="Recording defaults from settings",
            num_columns=self.num_columns,
            brightness=self.brightness,
            charset_key=self.charset,
            fps=fps,
        )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for ascii_cache.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("ascii_cache.yaml"),
            Path("config.yaml"),
            Path("~/.config/ascii_cache/config.yaml").expanduser(),
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Cache settings
    if env_dir := os.environ.get("ASCII_CACHE_DIR"):
        config_data.setdefault("cache", {})["directory"] = env_dir

    # Recording defaults
    if env_cols := os.environ.get("ASCII_CACHE_COLUMNS"):
        config_data.setdefault("recording", {})["num_columns"] = int(env_cols)
    if env_brightness := os.environ.get("ASCII_CACHE_BRIGHTNESS"):
        config_data.setdefault("recording", {})["brightness"] = float(env_brightness)
    if env_charset := os.environ.get("ASCII_CACHE_CHARSET"):
        config_data.setdefault("recording", {})["charset"] = env_charset
    if env_interval := os.environ.get("ASCII_CACHE_FRAME_INTERVAL_MS"):
        config_data.setdefault("recording", {})["frame_interval_ms"] = int(env_interval)

    # Logging settings
    if env_log := os.environ.get("ASCII_CACHE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_fmt := os.environ.get("ASCII_CACHE_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_fmt


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
