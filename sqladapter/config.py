"""Construction-time adapter settings."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional, Union

from sqladapter.exceptions import ImproperConfigurationError
from sqladapter.utils.logging import get_logger

__all__ = ("AdapterConfig",)

logger = get_logger("config")


def _freeze(options: "Optional[Mapping[str, Any]]") -> "Mapping[str, Any]":
    return MappingProxyType(dict(options or {}))


@dataclass(frozen=True)
class AdapterConfig:
    """Connection settings for one adapter.

    The instance is immutable; ``options`` is exposed as a read-only mapping.
    """

    dsn: str
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    options: "Mapping[str, Any]" = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.dsn:
            msg = 'Invalid database config, require "dsn" key.'
            raise ImproperConfigurationError(msg)
        object.__setattr__(self, "options", _freeze(self.options))

    def __reduce__(self) -> "tuple[Any, ...]":
        # mappingproxy does not pickle
        return (type(self), (self.dsn, self.user, self.password, dict(self.options)))

    @classmethod
    def from_mapping(cls, config: "Union[AdapterConfig, Mapping[str, Any]]") -> "AdapterConfig":
        """Build a config from a plain mapping.

        Args:
            config: Mapping with a ``dsn`` key and optional ``user``, ``password`` and ``options``.

        Raises:
            ImproperConfigurationError: ``dsn`` is missing or empty.

        Returns:
            The config.
        """
        if isinstance(config, AdapterConfig):
            return config
        if not config.get("dsn"):
            msg = 'Invalid database config, require "dsn" key.'
            raise ImproperConfigurationError(msg)
        return cls(
            dsn=config["dsn"],
            user=config.get("user") or None,
            password=config.get("password") or None,
            options=config.get("options") or {},
        )

    @classmethod
    def from_env(cls, prefix: str = "SQLADAPTER_") -> "AdapterConfig":
        """Read ``<prefix>DSN``, ``<prefix>USER`` and ``<prefix>PASSWORD`` from the environment."""
        logger.debug("loading database config from environment", extra={"extra_fields": {"prefix": prefix}})
        return cls.from_mapping(
            {
                "dsn": os.getenv(f"{prefix}DSN", ""),
                "user": os.getenv(f"{prefix}USER"),
                "password": os.getenv(f"{prefix}PASSWORD"),
            }
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Look up one setting by name, falling back to ``default`` when unset."""
        value = getattr(self, key, None)
        return default if value is None else value
