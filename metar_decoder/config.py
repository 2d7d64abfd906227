"""Configuration management with persistence."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".metar_decoder" / "config.json"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class WeatherSourceConfig(BaseModel):
    """Configuration for the report source."""
    base_url: str = "https://tgftp.nws.noaa.gov/data/observations/metar/stations"
    cache_seconds: int = Field(default=60, ge=0, le=3600)
    timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http:// or https:// URL")
        return v.rstrip("/")


class DisplayConfig(BaseModel):
    """Configuration for text output."""
    fahrenheit: bool = False


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = Field(default="WARNING")
    file: Optional[str] = None

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {v}")
        return level


class WebUIConfig(BaseModel):
    """Configuration for the web API."""
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1024, le=65535)


class AppConfig(BaseModel):
    """Main application configuration."""
    weather_source: WeatherSourceConfig = Field(default_factory=WeatherSourceConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    log: LoggingConfig = Field(default_factory=LoggingConfig)
    web_ui: WebUIConfig = Field(default_factory=WebUIConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """Load configuration from file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.exists():
            with open(config_path, "r") as f:
                data = json.load(f)
            return cls(**data)
        else:
            # Create default config
            config = cls()
            config.save(config_path)
            return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump()
