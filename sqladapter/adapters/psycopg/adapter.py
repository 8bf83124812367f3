from typing import TYPE_CHECKING, Any, ClassVar, Optional, TypedDict

import psycopg
from psycopg import sql as pg_sql
from typing_extensions import NotRequired

from sqladapter.adapter import Adapter

if TYPE_CHECKING:
    from sqladapter.config import AdapterConfig

__all__ = ("PsycopgAdapter", "PsycopgConnectionOptions")


class PsycopgConnectionOptions(TypedDict, total=False):
    """Psycopg connection options.

    Merged into the conninfo given as ``dsn``.
    """

    host: NotRequired[str]
    port: NotRequired[int]
    dbname: NotRequired[str]
    connect_timeout: NotRequired[float]
    application_name: NotRequired[str]
    sslmode: NotRequired[str]
    """SSL mode (disable, prefer, require, etc.)."""
    options: NotRequired[str]
    """Command-line options to send to the server."""


class PsycopgAdapter(Adapter):
    """PostgreSQL adapter over psycopg 3.

    ``dsn`` is a libpq conninfo string or a ``postgresql://`` URL. The
    connection runs in autocommit mode so that explicit ``BEGIN``/``COMMIT``
    statements control transactions.
    """

    __slots__ = ()

    identifier_symbol: "ClassVar[str]" = '"'
    placeholder: "ClassVar[str]" = "%s"
    dialect: "ClassVar[str]" = "postgres"
    driver_errors: "ClassVar[tuple[type[Exception], ...]]" = (psycopg.Error,)

    def _open_connection(self, config: "AdapterConfig") -> psycopg.Connection:
        kwargs: dict[str, Any] = dict(config.options)
        if config.user:
            kwargs["user"] = config.user
        if config.password:
            kwargs["password"] = config.password
        kwargs["autocommit"] = True
        return psycopg.connect(config.dsn, **kwargs)

    def _quote_value(self, connection: psycopg.Connection, value: Any) -> str:
        return pg_sql.Literal(value).as_string(connection)

    def last_insert_id(self, table: "Optional[str]" = None, column: "Optional[str]" = None) -> Any:
        """Return the current value of the sequence behind ``table.column``, or ``lastval()``."""
        if table and column:
            statement = self.execute("SELECT currval(pg_get_serial_sequence(%s, %s))", table, column)
        else:
            statement = self.execute("SELECT lastval()")
        with statement:
            return statement.get_col()

    def list_tables(self) -> "list[str]":
        with self.execute(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_type = 'BASE TABLE' AND table_schema = ANY(current_schemas(false)) "
            "ORDER BY table_name"
        ) as statement:
            return statement.get_cols()
