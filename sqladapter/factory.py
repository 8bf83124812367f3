"""Explicit adapter construction.

Callers build an adapter here and pass it to whatever needs it; nothing is
looked up from global state at query time.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

from sqladapter.exceptions import ImproperConfigurationError, MissingDependencyError
from sqladapter.utils.logging import get_logger
from sqladapter.utils.module_loader import import_string

if TYPE_CHECKING:
    from sqladapter.adapter import Adapter
    from sqladapter.config import AdapterConfig

__all__ = ("create_adapter", "get_adapter_class", "register_adapter")

logger = get_logger("factory")

# name -> (dotted path, driver package, install extra)
_ADAPTERS: "dict[str, tuple[Union[str, type[Adapter]], Optional[str], Optional[str]]]" = {
    "sqlite": ("sqladapter.adapters.sqlite.SqliteAdapter", None, None),
    "postgres": ("sqladapter.adapters.psycopg.PsycopgAdapter", "psycopg", "psycopg"),
    "postgresql": ("sqladapter.adapters.psycopg.PsycopgAdapter", "psycopg", "psycopg"),
    "psycopg": ("sqladapter.adapters.psycopg.PsycopgAdapter", "psycopg", "psycopg"),
    "mysql": ("sqladapter.adapters.pymysql.PyMySQLAdapter", "pymysql", "pymysql"),
    "pymysql": ("sqladapter.adapters.pymysql.PyMySQLAdapter", "pymysql", "pymysql"),
}


def register_adapter(name: str, adapter: "Union[str, type[Adapter]]") -> None:
    """Make ``adapter`` (a class or its dotted path) available as ``name``."""
    _ADAPTERS[name.lower()] = (adapter, None, None)


def get_adapter_class(name: str) -> "type[Adapter]":
    """Resolve an adapter name to its class, importing it on first use.

    Raises:
        ImproperConfigurationError: No adapter is registered under ``name``.
        MissingDependencyError: The adapter's driver package is not installed.
    """
    try:
        target, package, extra = _ADAPTERS[name.lower()]
    except KeyError:
        msg = f"Unsupported database adapter: {name!r}"
        raise ImproperConfigurationError(msg) from None

    if not isinstance(target, str):
        return target

    try:
        return import_string(target)  # type: ignore[no-any-return]
    except ModuleNotFoundError as e:
        if package is not None and e.name == package:
            raise MissingDependencyError(package, extra) from e
        raise


def create_adapter(
    name: str, config: "Optional[Union[AdapterConfig, Mapping[str, Any]]]" = None, **kwargs: Any
) -> "Adapter":
    """Build a disconnected adapter.

    Example:
        >>> db = create_adapter("sqlite", dsn="app.db")
        >>> db = create_adapter("postgres", {"dsn": "dbname=app", "user": "app"})
    """
    adapter_class = get_adapter_class(name)
    logger.debug("creating database adapter", extra={"extra_fields": {"adapter": adapter_class.__name__}})
    return adapter_class(config, **kwargs)
