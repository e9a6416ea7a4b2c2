"""Configuration management for termhost.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/termhost.yaml")

DEFAULT_HOME = "/Users/Public"

DEFAULT_LIBRARIES = [
    "termhost.display.buffer",
    "termhost.display.fit",
    "termhost.editor.line_editor",
]


class ThemeConfig(BaseModel):
    background: str = "#000000"
    foreground: str = "#F8F8F2"
    cursor: str = "#FFFFFF"
    cursor_accent: str = "#2C001E"
    black: str = "#000000"
    red: str = "#FF5555"
    green: str = "#4FF04F"
    yellow: str = "#FFB86C"
    blue: str = "#42A5F5"
    magenta: str = "#FF79C6"
    cyan: str = "#8BE9FD"
    white: str = "#F8F8F2"
    bright_black: str = "#6272A4"
    bright_red: str = "#FF6E6E"
    bright_green: str = "#69FF94"
    bright_yellow: str = "#FFFFA5"
    bright_blue: str = "#D6ACFF"
    bright_magenta: str = "#FF92DF"
    bright_cyan: str = "#A4FFFF"
    bright_white: str = "#FFFFFF"


class DisplayConfig(BaseModel):
    font_family: str = Field(default="Ubuntu Mono, monospace")
    font_size: int = Field(default=14, gt=0)
    line_height: float = Field(default=1.2, gt=0)
    scrollback: int = Field(default=10000, ge=0)
    cursor_style: Literal["block", "underline", "bar"] = Field(default="block")
    cursor_blink: bool = Field(default=True)
    allow_transparency: bool = Field(default=True)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    container_width: int = Field(default=800, gt=0, description="Default container width in pixels")
    container_height: int = Field(default=480, gt=0, description="Default container height in pixels")


class SessionConfig(BaseModel):
    username: str = Field(default_factory=lambda: os.environ.get("USER") or "user")
    hostname: str = Field(default="localhost")
    home: str = Field(default=DEFAULT_HOME, min_length=1)
    history_size: int = Field(default=1000, gt=0)
    libraries: list[str] = Field(default_factory=lambda: list(DEFAULT_LIBRARIES))


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)
    base_url: str = Field(default="http://localhost:8080")
    timeout: float = Field(default=10.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)
    quiet_libraries: list[str] = Field(default_factory=lambda: ["httpx", "uvicorn.access"])


def _default_extensions() -> dict[str, str]:
    return {
        ".txt": "edit",
        ".md": "edit",
        ".json": "edit",
        ".py": "python",
        ".js": "node",
        ".sh": "sh",
        ".mp3": "play",
        ".wav": "play",
        ".png": "view",
        ".jpg": "view",
        ".html": "open",
    }


class Settings(BaseSettings):
    """Root configuration for termhost.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "TERMHOST_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    display: DisplayConfig = Field(default_factory=DisplayConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    extensions: dict[str, str] = Field(default_factory=_default_extensions)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs and rank below the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply environment variable overrides for non-prefixed vars.

    These replace YAML values but still rank below TERMHOST_ variables.
    """
    # HOSTNAME is exported by most shells; USER is handled by SessionConfig
    hostname = os.environ.get("HOSTNAME", "")

    if "session" not in yaml_data:
        yaml_data["session"] = {}

    if hostname:
        yaml_data["session"]["hostname"] = hostname
