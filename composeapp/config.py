import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from composeapp.domain.bundle.model.ignore import DEFAULT_IGNORE_FILE
from composeapp.domain.bundle.service.archive import DEFAULT_DESCRIPTOR_FILE


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by COMPOSEAPP_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("COMPOSEAPP_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from COMPOSEAPP_LOG_FILE env var."""
        return os.environ.get("COMPOSEAPP_LOG_FILE")


class RegistryConfig(BaseModel):
    """Registry access (nested in Config, uses env_nested_delimiter)."""

    username: str = ""
    password: str = ""
    insecure: list[str] = []  # registries reached over plain HTTP, e.g. "localhost:5000"
    timeout_seconds: float = 60.0

    @property
    def credentials(self) -> tuple[str, str] | None:
        if self.username:
            return self.username, self.password
        return None


class PinConfig(BaseModel):
    """Which backend resolves image digests."""

    strategy: Literal["registry", "engine"] = "registry"


class BundleConfig(BaseModel):
    """Bundle layout."""

    root: Path = Path(".")
    ignore_file: str = DEFAULT_IGNORE_FILE
    descriptor_file: str = DEFAULT_DESCRIPTOR_FILE


class Config(BaseSettings):
    logging: LoggingConfig = LoggingConfig()
    registry: RegistryConfig = RegistryConfig()
    pin: PinConfig = PinConfig()
    bundle: BundleConfig = BundleConfig()

    model_config = {
        "env_prefix": "COMPOSEAPP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows COMPOSEAPP_REGISTRY__USERNAME override
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - COMPOSEAPP_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in CLI startup so all loggers pick up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiodocker").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
