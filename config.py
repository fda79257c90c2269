"""Application configuration classes."""

from __future__ import annotations

import os


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


class BaseConfig:
    """Base configuration shared across environments."""

    SCHEDULER_ENABLED = _get_env("SCHEDULER_ENABLED", "true").lower() == "true"
    CLEANUP_CRON = _get_env("CLEANUP_CRON", "0 2 * * *")

    APP_NAME = "cbar-rates"
    SECRET_KEY = _get_env("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = _get_env("DATABASE_URL", "sqlite:///cbar-rates.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SCHEDULER_TIMEZONE = _get_env("SCHEDULER_TIMEZONE", "Asia/Baku")
    REQUEST_TIMEOUT_SECONDS = int(_get_env("REQUEST_TIMEOUT_SECONDS", "10"))
    CBAR_BASE_URL = _get_env("CBAR_BASE_URL", "https://cbar.az/currencies")
    CBAR_MAX_RETRIES = int(_get_env("CBAR_MAX_RETRIES", "3"))
    CBAR_BACKOFF_SECONDS = float(_get_env("CBAR_BACKOFF_SECONDS", "0.5"))
    CACHE_RETENTION_DAYS = int(_get_env("CACHE_RETENTION_DAYS", "30"))
    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the test suite."""

    DEBUG = False
    TESTING = True
    SCHEDULER_ENABLED = False
    CBAR_MAX_RETRIES = 1
    CBAR_BACKOFF_SECONDS = 0.0


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If a numeric setting is out of range.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_limits(config_cls)
    return config_cls


def _validate_limits(config_cls: type[BaseConfig]) -> None:
    if config_cls.CACHE_RETENTION_DAYS < 1:
        raise ValueError(
            f"CACHE_RETENTION_DAYS must be at least 1, got {config_cls.CACHE_RETENTION_DAYS}"
        )
    if config_cls.CBAR_MAX_RETRIES < 1:
        raise ValueError(f"CBAR_MAX_RETRIES must be at least 1, got {config_cls.CBAR_MAX_RETRIES}")
    if config_cls.REQUEST_TIMEOUT_SECONDS <= 0:
        raise ValueError(
            f"REQUEST_TIMEOUT_SECONDS must be positive, got {config_cls.REQUEST_TIMEOUT_SECONDS}"
        )
