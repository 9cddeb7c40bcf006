"""
Server configuration for the mock server.

Process settings (listen address, logging, upstream timeouts, admin
behaviour) are read from YAML files with environment-specific overlays.
The hot-editable endpoint document is handled separately by
:mod:`mockserver.config.settings_file`.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .environment import EnvironmentSettings
from .logging import StructuredLogger, get_logger, setup_logging

logger = get_logger(__name__)


class ServerConfig(BaseModel):
    """Server configuration settings."""
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    log_format: str = "text"
    log_file: Optional[str] = None
    access_log: bool = True

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        if value not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")
        return value


class UpstreamConfig(BaseModel):
    """Timeouts and TLS behaviour for forwarded requests."""
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    write_timeout: float = 5.0
    pool_timeout: float = 5.0
    verify_tls: bool = True


class AdminConfig(BaseModel):
    """Hot-edit admin interface settings."""
    enabled: bool = True
    prefix: str = "/mockserver/admin"
    persist_updates: bool = True

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("admin prefix must start with '/'")
        return value.rstrip("/")


class MockServerConfig(BaseModel):
    """Main mock server configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    settings_file: Path = Path("settings.json")


class ConfigLoader:
    """Configuration loader for YAML files with environment-specific overrides."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to the config directory of the project.
        """
        if config_dir is None:
            current_dir = Path(__file__).parent.parent.parent
            self.config_dir = current_dir / "config"
        else:
            self.config_dir = Path(config_dir)

    def load_config(self, environment: Optional[str] = None) -> MockServerConfig:
        """Load configuration for the specified environment.

        Args:
            environment: Environment name (development, production, etc.).
                        If None, MOCKSERVER_ENVIRONMENT is used.

        Returns:
            Loaded and validated configuration.
        """
        if environment is None:
            environment = os.getenv("MOCKSERVER_ENVIRONMENT", "development")

        config_data = self._load_base_config()

        env_config = self._load_environment_config(environment)
        if env_config:
            config_data = self._merge_configs(config_data, env_config)

        config_data = self._substitute_env_vars(config_data)

        return self._create_config(config_data)

    def _load_base_config(self) -> Dict[str, Any]:
        """Load the base mockserver configuration."""
        base_path = self.config_dir / "mockserver.yaml"
        if base_path.exists():
            return self._load_yaml_file(base_path)
        return {}

    def _load_environment_config(self, environment: str) -> Optional[Dict[str, Any]]:
        """Load environment-specific configuration."""
        env_config_path = self.config_dir / f"{environment}.yaml"
        if env_config_path.exists():
            return self._load_yaml_file(env_config_path)
        return None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load and parse a YAML file."""
        try:
            with open(file_path, 'r') as file:
                data = yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {file_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {file_path}: top level is not a mapping")
            return {}
        return data

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _substitute_env_vars(self, config: Any) -> Any:
        """Substitute environment variables in configuration values."""
        if isinstance(config, dict):
            return {key: self._substitute_env_vars(value) for key, value in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            return self._substitute_string_env_vars(config)
        else:
            return config

    def _substitute_string_env_vars(self, value: str) -> str:
        """Substitute ${VAR_NAME} and ${VAR_NAME:default} in a string value."""
        def replace_env_var(match):
            var_spec = match.group(1)
            if ':' in var_spec:
                var_name, default_value = var_spec.split(':', 1)
                return os.getenv(var_name, default_value)
            else:
                return os.getenv(var_spec, match.group(0))

        return re.sub(r'\$\{([^}]+)\}', replace_env_var, value)

    def _create_config(self, config_data: Dict[str, Any]) -> MockServerConfig:
        """Create a MockServerConfig object from configuration data."""
        settings_file = config_data.get("settings_file", "settings.json")

        return MockServerConfig(
            server=ServerConfig(**config_data.get("server", {})),
            upstream=UpstreamConfig(**config_data.get("upstream", {})),
            admin=AdminConfig(**config_data.get("admin", {})),
            settings_file=Path(settings_file)
        )


def load_config_from_environment(env: Optional[EnvironmentSettings] = None) -> MockServerConfig:
    """Load the server configuration the environment bootstrap points at.

    Args:
        env: Bootstrap settings; read from MOCKSERVER_* variables when None.

    Returns:
        Loaded configuration, with the settings file override applied.
    """
    if env is None:
        env = EnvironmentSettings()

    config = ConfigLoader(env.config_dir).load_config(env.environment)
    if env.settings_file is not None:
        config = config.model_copy(update={"settings_file": env.settings_file})
    return config


__all__ = [
    "AdminConfig",
    "ConfigLoader",
    "EnvironmentSettings",
    "MockServerConfig",
    "ServerConfig",
    "StructuredLogger",
    "UpstreamConfig",
    "get_logger",
    "load_config_from_environment",
    "setup_logging",
]
