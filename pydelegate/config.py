from __future__ import annotations

import enum
import logging
import os

CONFIG_ENV_VAR = "PYDELEGATE_CONFIG"


class Config:
    """Base configuration."""

    LOG_LEVEL = logging.WARNING
    # Schedule awaitables returned to a synchronous invoke() on the running event loop.
    # When disabled (or with no running loop) they are closed and a warning is logged.
    SCHEDULE_DETACHED_AWAITABLES = True


class DevelopmentConfig(Config):
    """Development configuration."""

    LOG_LEVEL = logging.DEBUG


class ProductionConfig(Config):
    """Production configuration."""


class TestingConfig(Config):
    """Testing configuration."""

    LOG_LEVEL = logging.DEBUG


class ConfigType(enum.Enum):
    DEVELOPMENT = DevelopmentConfig
    PRODUCTION = ProductionConfig
    TESTING = TestingConfig


def get_config(name: str | None = None) -> type[Config]:
    """Resolve a configuration class by name.

    Args:
        name (str | None): One of the ConfigType names, case-insensitive. Defaults to the
            PYDELEGATE_CONFIG environment variable, or "production" when that is unset.

    Raises:
        ValueError: If the name does not match any ConfigType.
    """
    if name is None:
        name = os.environ.get(CONFIG_ENV_VAR, "production")

    try:
        return ConfigType[name.strip().upper()].value
    except KeyError:
        valid = ", ".join(member.name.lower() for member in ConfigType)
        raise ValueError(f"Unknown config '{name}', expected one of: {valid}") from None
