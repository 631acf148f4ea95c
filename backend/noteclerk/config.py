"""
Configuration settings using Pydantic Settings.

Settings are read from ``config/config.<environment>.json`` where the
environment name comes from the ``NOTECLERK_ENVIRONMENT`` variable. Any field
may also be supplied as a ``NOTECLERK_<FIELD>`` environment variable; values
in the JSON file take precedence.
"""

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

from noteclerk.errors import (
    ConfigurationError,
    ConfigurationIncompleteError,
    ConfigurationParseError,
    ConfigurationReadError,
)

ENVIRONMENT_VARIABLE = "NOTECLERK_ENVIRONMENT"
DATA_ROOT_VARIABLE = "NOTECLERK_DATA"
DATABASE_DRIVER = "postgresql+asyncpg"

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Application settings. Every field is required to be non-empty."""

    VERSION: str = ""
    LOG_PATH: str = ""

    SERVER_PROTOCOL: str = ""
    SERVER_IP: str = ""
    SERVER_PORT: str = ""

    DB_IP: str = ""
    DB_PORT: str = ""
    DB_USERNAME: str = ""
    DB_PASSWORD: str = ""
    DB_NAME: str = ""
    DB_SSL_MODE: str = ""

    model_config = {
        "env_prefix": "NOTECLERK_",
        "extra": "ignore",
        "coerce_numbers_to_str": True,
    }

    @field_validator("SERVER_PORT", "DB_PORT")
    @classmethod
    def port_is_numeric(cls, value: str) -> str:
        if value and not value.isdigit():
            raise ValueError(f"port must be numeric, got {value!r}")
        return value

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty."""
        return [name for name in type(self).model_fields if not getattr(self, name)]

    def database_url(self) -> URL:
        """
        Build the database connection URL.

        :return: SQLAlchemy URL for the configured database
        :rtype: URL
        """
        return URL.create(
            DATABASE_DRIVER,
            username=self.DB_USERNAME,
            password=self.DB_PASSWORD,
            host=self.DB_IP,
            port=int(self.DB_PORT),
            database=self.DB_NAME,
            query={"ssl": self.DB_SSL_MODE},
        )


def config_path(environment: str, data_root: str | None = None) -> Path:
    """
    Resolve the configuration file for an environment.

    :param environment: Environment name, e.g. ``production``
    :type environment: str
    :param data_root: Directory holding ``config/``; defaults to the backend directory
    :type data_root: str | None
    :return: Path to ``config/config.<environment>.json``
    :rtype: Path
    """
    root = Path(data_root) if data_root else BASE_DIR
    return root / "config" / f"config.{environment.lower()}.json"


def load_configuration(path: str | Path) -> Settings:
    """
    Load and validate settings from a JSON file.

    :param path: Path to the JSON configuration file
    :type path: str | Path
    :return: Fully populated settings
    :rtype: Settings
    :raises ConfigurationReadError: The file cannot be read
    :raises ConfigurationParseError: The file is not a valid settings object
    :raises ConfigurationIncompleteError: A required field is empty
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationReadError(f"Cannot read configuration file {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationParseError(f"Configuration file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationParseError(f"Configuration file {path} must contain a JSON object")

    try:
        settings = Settings(**data)
    except ValidationError as exc:
        raise ConfigurationParseError(f"Configuration file {path} is invalid: {exc}") from exc

    missing = settings.missing_fields()
    if missing:
        raise ConfigurationIncompleteError(missing)
    return settings


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings for the environment named by ``NOTECLERK_ENVIRONMENT``.

    :return: Cached Settings instance
    :rtype: Settings
    """
    environment = os.environ.get(ENVIRONMENT_VARIABLE, "")
    if not environment:
        raise ConfigurationError(f"{ENVIRONMENT_VARIABLE} is not set")
    return load_configuration(config_path(environment, os.environ.get(DATA_ROOT_VARIABLE)))
