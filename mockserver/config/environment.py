"""
Environment bootstrap settings.

These values decide where the YAML server configuration and the endpoint
settings document are read from. They come from ``MOCKSERVER_*``
environment variables or a ``.env`` file.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentSettings(BaseSettings):
    """Process-level settings read from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="MOCKSERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Name of the environment overlay file (<environment>.yaml)"
    )

    config_dir: Path = Field(
        default=Path("config"),
        description="Directory holding mockserver.yaml and environment overlays"
    )

    settings_file: Optional[Path] = Field(
        default=None,
        description="Overrides the endpoint settings document path from the YAML config"
    )
