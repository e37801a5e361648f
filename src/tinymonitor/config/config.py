"""
Configuration management for the Tiny-Monitor gateway using Pydantic.

With no file and no TINYMON_* variables the process listens on :7270 and
scrapes ``http://192.168.1.124/?m=1``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

DEFAULT_DEVICE_NAME = "Tasmota Tiny-Monitor"

# --- Nested Configuration Models ---


class UpstreamConfig(BaseModel):
    """Where and how the device status page is fetched."""

    url: str = Field(default="http://192.168.1.124/?m=1", description="Device status page URL.")
    connect_timeout: float = Field(default=2.0, gt=0, description="TCP connect timeout in seconds.")
    total_timeout: float = Field(default=3.0, gt=0, description="Overall request timeout in seconds.")
    max_redirects: int = Field(default=5, ge=0, description="Maximum redirect hops to follow; 0 rejects any redirect.")
    user_agent: str = Field(default=f"{DEFAULT_DEVICE_NAME}/1.0", description="User-Agent sent upstream.")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"upstream url must be an absolute http(s) URL, got {v!r}")
        return v

    @model_validator(mode="after")
    def check_timeouts(self) -> "UpstreamConfig":
        if self.connect_timeout > self.total_timeout:
            raise ValueError("connect_timeout must not exceed total_timeout")
        return self


class ExtractionConfig(BaseModel):
    """Markers and capacities of the label-anchored scanner."""

    value_marker: str = Field(default="style='text-align:left'>", min_length=1)
    state_marker: str = Field(default="font-size:62px'>", min_length=1)
    field_capacity: int = Field(default=63, ge=4, description="Maximum UTF-8 bytes kept per numeric field.")
    state_capacity: int = Field(default=31, ge=4, description="Maximum UTF-8 bytes kept for the state.")
    unknown_state: str = Field(default="UNKNOWN", description="State reported when the page has none.")


class ServerConfig(BaseModel):
    """Inbound listener settings."""

    host: str = Field(default="0.0.0.0", description="Interface to bind.")
    port: int = Field(default=7270, ge=0, le=65535, description="TCP port to listen on.")
    device_name: str = Field(default=DEFAULT_DEVICE_NAME, description="Name reported in every reading.")
    max_body_bytes: int = Field(default=1024, gt=0, description="Size bound of a serialized reading.")
    max_concurrent_requests: int = Field(default=1, ge=1, description="Requests handled at the same time.")
    backlog: int = Field(default=16, gt=0, description="Listen backlog.")


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: Optional[str] = Field(default=None, description="Path to log file. If None, logs to console.")
    log_format: Literal["console", "json"] = Field(default="console", description="Renderer for console output.")
    prometheus_port: Optional[int] = Field(
        default=None,
        description="Port for the Prometheus metrics exporter. None to disable.",
    )

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="TINYMON_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls()
        return cls(**yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "config.yaml", current_dir / "config.yml"):
        if path.is_file():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ``path``, a local config file, or defaults."""
    config_path = path or find_config_file()
    if config_path is None:
        log.debug("No config file found. Using default settings.")
        return Config()
    log.info("Loading configuration from: %s", config_path)
    return Config.from_yaml(config_path)
