import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kilroy.domain.shared.error import ConfigurationError

# W3C recommends not aging more than a year.
ONE_YEAR_SECONDS = 60 * 60 * 24 * 365

# Secrets are read from these exact variable names, without the KILROY_ prefix.
COOKIE_SIGNER = "COOKIE_SIGNER"
TEST_USER_AUTH = "TEST_USER_AUTH"


# =============================================================================
# Secrets
# =============================================================================


def resolve_secret(key: str) -> str:
    """Grab a secret from the process environment, or report that it wasn't set."""
    value = os.environ.get(key)
    if value:
        return value
    raise ConfigurationError(f"Please set environment variable: {key}")


class Secrets(BaseModel):
    """Process-wide secrets, resolved once at startup and read-only afterwards."""

    model_config = {"frozen": True}

    cookie_signer: str
    test_user_auth: str

    @classmethod
    def from_env(cls) -> "Secrets":
        return cls(
            cookie_signer=resolve_secret(COOKIE_SIGNER),
            test_user_auth=resolve_secret(TEST_USER_AUTH),
        )

    def __repr__(self) -> str:
        return "Secrets(cookie_signer=***, test_user_auth=***)"


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by KILROY_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("KILROY_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    model_config = {"frozen": True}

    name: str = "Ki1r0y"
    version: str = "0.1.0"
    description: str = "Scene and media sharing for Ki1r0y"


class StorageConfig(BaseModel):
    """Where resources live on disk."""

    model_config = {"frozen": True}

    db_dir: Path = Path("db")
    chunk_size: int = 64 * 1024


class SessionConfig(BaseModel):
    """Session cookie configuration."""

    model_config = {"frozen": True}

    cookie_name: str = "connect.sid"
    max_age: int = 14 * 24 * 60 * 60
    https_only: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    model_config = {"frozen": True}

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from KILROY_LOG_FILE env var."""
        return os.environ.get("KILROY_LOG_FILE")


class Config(BaseSettings):
    """Immutable application settings, built once at startup."""

    environment: Literal["development", "production"] = "development"
    server: Server = Server()
    storage: StorageConfig = StorageConfig()
    session: SessionConfig = SessionConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = {
        "env_prefix": "KILROY_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows KILROY_STORAGE__DB_DIR override
        "frozen": True,
    }

    @property
    def is_dev(self) -> bool:
        return self.environment == "development"

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
        4. yaml_settings - KILROY_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_config() -> Config:
    """Build Config from the environment, reporting bad settings as ConfigurationError."""
    try:
        return Config()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so that all loggers
    pick up the configuration.
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
    logging.getLogger("multipart").setLevel(logging.WARNING)
    # Our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").disabled = True

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
