import datetime
import sqlite3
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Optional, TypedDict

from typing_extensions import NotRequired

from sqladapter.adapter import Adapter
from sqladapter.utils.logging import get_logger

if TYPE_CHECKING:
    from sqladapter.config import AdapterConfig

__all__ = ("SqliteAdapter", "SqliteConnectionOptions")

logger = get_logger("adapters.sqlite")

_type_coercion_map: "dict[type, Callable[[Any], Any]]" = {
    bool: int,
    datetime.datetime: lambda v: v.isoformat(),
    datetime.date: lambda v: v.isoformat(),
    Decimal: str,
}


class SqliteConnectionOptions(TypedDict, total=False):
    """SQLite connection options, passed to :func:`sqlite3.connect`."""

    timeout: NotRequired[float]
    detect_types: NotRequired[int]
    check_same_thread: NotRequired[bool]
    cached_statements: NotRequired[int]
    uri: NotRequired[bool]


class SqliteAdapter(Adapter):
    """Adapter over the standard library :mod:`sqlite3` module.

    ``dsn`` is a database path, ``:memory:`` or a ``file:`` URI. The
    connection runs with ``isolation_level=None`` so that transactions are
    driven only by :meth:`begin`, :meth:`commit` and :meth:`rollback`.
    """

    __slots__ = ()

    identifier_symbol: "ClassVar[str]" = '"'
    dialect: "ClassVar[str]" = "sqlite"
    driver_errors: "ClassVar[tuple[type[Exception], ...]]" = (sqlite3.Error,)

    def _open_connection(self, config: "AdapterConfig") -> sqlite3.Connection:
        options: dict[str, Any] = dict(config.options)
        database = config.dsn
        if database.startswith("file:") and not options.get("uri"):
            logger.debug(
                "Database URI detected (%s) but uri=True not set. Auto-enabling URI mode.",
                database,
            )
            options["uri"] = True
        options["isolation_level"] = None
        return sqlite3.connect(database, **options)

    def _quote_value(self, connection: sqlite3.Connection, value: Any) -> str:
        coerce = _type_coercion_map.get(type(value))
        if coerce is not None:
            value = coerce(value)
        return str(connection.execute("SELECT quote(?)", (value,)).fetchone()[0])

    def last_insert_id(self, table: "Optional[str]" = None, column: "Optional[str]" = None) -> int:
        with self.execute("SELECT last_insert_rowid()") as statement:
            return int(statement.get_col())

    def list_tables(self) -> "list[str]":
        with self.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ) as statement:
            return statement.get_cols()
