"""Connection-owning adapter base class.

An :class:`Adapter` owns exactly one DB-API connection. It opens the
connection lazily, tracks transaction state (nesting through savepoints),
quotes identifiers and values, and builds parameterized INSERT, UPDATE and
DELETE statements. Concrete adapters supply the driver specific pieces.
"""

import contextlib
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

from sqlglot import exp
from typing_extensions import Self

from sqladapter.config import AdapterConfig
from sqladapter.exceptions import DatabaseConnectionError, QueryError, UnsupportedOperationError
from sqladapter.expressions import RawExpression, bound_parameters, to_sql_value
from sqladapter.statement import Statement
from sqladapter.utils.logging import get_logger
from sqladapter.utils.type_guards import (
    is_column_list,
    is_mapping_row,
    is_raw_expression,
    is_sequence_parameters,
)

if TYPE_CHECKING:
    from types import TracebackType

    from sqladapter.expressions import SqlValue
    from sqladapter.protocols import Connection
    from sqladapter.typing import ColumnList, Row, StatementParameters

__all__ = ("Adapter",)

logger = get_logger("adapter")

_UNSAFE_IDENTIFIER_CHARS = "\"';"


class Adapter(ABC):
    """Base class for all database adapters.

    Subclasses set the class level dialect attributes and implement
    :meth:`_open_connection`, :meth:`_quote_value`, :meth:`last_insert_id`
    and :meth:`list_tables`.

    Example:
        >>> with SqliteAdapter(dsn=":memory:") as db:
        ...     with db.transaction():
        ...         db.insert("users", {"name": "alice", "created": RawExpression("CURRENT_TIMESTAMP")})
    """

    __slots__ = ("__weakref__", "_config", "_handler", "_in_transaction", "_savepoint_seq", "_savepoints")

    identifier_symbol: "ClassVar[str]" = "`"
    """Character used to delimit identifiers."""
    supports_savepoint: "ClassVar[bool]" = True
    placeholder: "ClassVar[str]" = "?"
    """Bind marker the driver expects in generated statements."""
    dialect: "ClassVar[str]" = "mysql"
    """sqlglot dialect used to render quoted identifiers."""
    max_rollback_depth: "ClassVar[int]" = 9
    driver_errors: "ClassVar[tuple[type[Exception], ...]]" = (Exception,)
    """Driver exception types wrapped as :class:`QueryError` by :meth:`execute`."""

    def __init__(self, config: "Optional[Union[AdapterConfig, Mapping[str, Any]]]" = None, **kwargs: Any) -> None:
        """Initialize the adapter without connecting.

        Args:
            config: An :class:`AdapterConfig` or a mapping with ``dsn``, ``user``, ``password`` and ``options``.
            **kwargs: Settings used when ``config`` is not given.

        Raises:
            ImproperConfigurationError: No ``dsn`` was supplied.
        """
        self._config = AdapterConfig.from_mapping(config if config is not None else kwargs)
        self._handler: "Optional[Connection]" = None
        self._savepoints: list[str] = []
        self._in_transaction = False
        self._savepoint_seq = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dsn={self._config.dsn!r}, connected={self.is_connected()})"

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.disconnect()

    def __del__(self) -> None:
        if getattr(self, "_handler", None) is not None:
            with contextlib.suppress(Exception):
                self.disconnect()

    def __getstate__(self) -> "dict[str, Any]":
        self.disconnect()
        return {"config": self._config, "savepoint_seq": self._savepoint_seq}

    def __setstate__(self, state: "dict[str, Any]") -> None:
        self._config = state["config"]
        self._handler = None
        self._savepoints = []
        self._in_transaction = False
        self._savepoint_seq = state["savepoint_seq"]

    @abstractmethod
    def _open_connection(self, config: AdapterConfig) -> "Connection":
        """Open a new driver connection for ``config``."""

    @abstractmethod
    def _quote_value(self, connection: "Connection", value: Any) -> str:
        """Render ``value`` as a SQL literal using the driver's own escaping."""

    @abstractmethod
    def last_insert_id(self, table: "Optional[str]" = None, column: "Optional[str]" = None) -> Any:
        """Return the id generated by the most recent insert."""

    @abstractmethod
    def list_tables(self) -> "list[str]":
        """Return the names of the tables visible to this connection."""

    @property
    def config(self) -> AdapterConfig:
        return self._config

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    @property
    def connection(self) -> "Connection":
        """The live driver connection, connecting first when necessary."""
        return self.connect()

    def is_connected(self) -> bool:
        return self._handler is not None

    def connect(self) -> "Connection":
        """Open the connection, or return the one already open.

        Raises:
            DatabaseConnectionError: The driver could not connect.

        Returns:
            The driver connection.
        """
        if self._handler is not None:
            return self._handler

        dsn = self._config.dsn
        try:
            handler = self._open_connection(self._config)
        except Exception as exc:
            logger.error(
                "database connect failed",
                extra={"extra_fields": {"error": str(exc), "dsn": dsn}},
            )
            raise DatabaseConnectionError(dsn=dsn) from exc

        logger.debug("database connected", extra={"extra_fields": {"dsn": dsn}})
        self._handler = handler
        return handler

    def disconnect(self) -> Self:
        """Roll back any open transaction and release the connection."""
        if self._handler is None:
            return self

        try:
            self.rollback_all()
        finally:
            handler, self._handler = self._handler, None
            # the rollback loop is capped, so force the state back to idle
            self._savepoints.clear()
            self._in_transaction = False
            handler.close()

        logger.debug("database disconnected", extra={"extra_fields": {"dsn": self._config.dsn}})
        return self

    def _next_savepoint_name(self) -> str:
        self._savepoint_seq += 1
        return f"savepoint_{self._savepoint_seq}"

    def _run(self, sql: str) -> None:
        self.execute(sql).close()

    def begin(self) -> bool:
        """Start a transaction, or a savepoint when one is already open.

        Raises:
            UnsupportedOperationError: Nested begin on an adapter without savepoints.
        """
        if self._in_transaction:
            if not self.supports_savepoint:
                msg = f"{type(self).__name__} does not support savepoints"
                raise UnsupportedOperationError(msg)

            savepoint = str(self.quote_identifier(self._next_savepoint_name()))
            self._run(f"SAVEPOINT {savepoint}")
            self._savepoints.append(savepoint)
        else:
            self._run("BEGIN")
            self._in_transaction = True

        return True

    def commit(self) -> bool:
        """Release the innermost savepoint, or commit the transaction."""
        if self._in_transaction:
            if self._savepoints:
                self._run(f"RELEASE SAVEPOINT {self._savepoints[-1]}")
                self._savepoints.pop()
            else:
                self._run("COMMIT")
                self._in_transaction = False

        return True

    def rollback(self) -> bool:
        """Roll back to the innermost savepoint, or roll back the transaction."""
        if self._in_transaction:
            if self._savepoints:
                self._run(f"ROLLBACK TO SAVEPOINT {self._savepoints[-1]}")
                self._savepoints.pop()
            else:
                self._run("ROLLBACK")
                self._in_transaction = False

        return True

    def rollback_all(self) -> None:
        """Unwind every open savepoint and the transaction, at most ``max_rollback_depth`` levels."""
        remaining = self.max_rollback_depth
        while self._in_transaction and remaining > 0:
            self.rollback()
            remaining -= 1

    def in_transaction(self) -> bool:
        return self._in_transaction

    @property
    def savepoint_depth(self) -> int:
        return len(self._savepoints)

    @contextmanager
    def transaction(self) -> "Iterator[Self]":
        """Run a block in a transaction (or a savepoint when nested).

        Commits when the block finishes and rolls back when the block or the
        commit raises.
        """
        self.begin()
        try:
            yield self
            self.commit()
        except BaseException:
            self.rollback()
            raise

    @staticmethod
    def _normalize_parameters(parameters: "Sequence[Any]") -> "StatementParameters":
        if not parameters:
            return []
        if len(parameters) > 1:
            return list(parameters)

        value = parameters[0]
        if value is None:
            return []
        if is_sequence_parameters(value):
            return list(value)
        if isinstance(value, Mapping):
            return dict(value)
        return [value]

    def prepare(self, sql: str) -> Statement:
        """Open a cursor for ``sql`` without running it."""
        return Statement(self.connect().cursor(), sql)

    def execute(self, sql: "Union[str, Statement, Any]", *parameters: Any) -> Statement:
        """Run SQL text, a prepared :class:`Statement` or a raw driver cursor.

        Parameters may be given as one list/tuple, one mapping (named styles),
        one scalar, or several positional arguments. A single ``None`` means
        no parameters; pass ``[None]`` to bind one NULL.

        Raises:
            QueryError: The driver rejected the statement.

        Returns:
            The executed statement.
        """
        params = self._normalize_parameters(parameters)
        owned = isinstance(sql, str)
        statement = self.prepare(sql) if owned else Statement.factory(sql)

        logger.debug("database execute", extra={"extra_fields": {"sql": statement.sql, "parameters": params}})

        try:
            statement.execute(params)
        except self.driver_errors as exc:
            logger.error(
                "database execute failed",
                extra={
                    "extra_fields": {
                        "error": str(exc),
                        "dsn": self._config.dsn,
                        "sql": statement.sql,
                        "parameters": params,
                    }
                },
            )
            if owned:
                statement.close()
            raise QueryError(str(exc), sql=statement.sql) from exc

        return statement

    def quote_identifier(self, identifier: Any) -> "Union[RawExpression, list[Any], dict[Any, Any]]":
        """Quote a (possibly ``schema.table.column`` qualified) identifier.

        Quote characters, semicolons and the adapter's identifier symbol are
        removed before each dotted segment is quoted. Lists are quoted
        element-wise and mappings value-wise, keeping their keys.
        """
        if isinstance(identifier, Mapping):
            return {key: self.quote_identifier(item) for key, item in identifier.items()}
        if is_column_list(identifier):
            return [self.quote_identifier(item) for item in identifier]
        if is_raw_expression(identifier):
            return identifier

        cleaned = str(identifier).translate(str.maketrans("", "", _UNSAFE_IDENTIFIER_CHARS + self.identifier_symbol))
        return RawExpression(".".join(self._quote_segment(segment) for segment in cleaned.split(".")))

    def _quote_segment(self, segment: str) -> str:
        return exp.to_identifier(segment, quoted=True).sql(dialect=self.dialect)

    def quote(self, value: Any) -> Any:
        """Render a value as a SQL literal.

        RawExpressions are returned unchanged, ``None`` becomes ``NULL``,
        lists/tuples are quoted element-wise and mappings value-wise.
        """
        if isinstance(value, Mapping):
            return {key: self.quote(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.quote(item) for item in value]
        if is_raw_expression(value):
            return value
        if value is None:
            return "NULL"
        return self._quote_value(self.connect(), value)

    def _join_identifiers(self, columns: "Iterable[Any]") -> str:
        return ", ".join(str(column) for column in self.quote_identifier(list(columns)))

    @staticmethod
    def _row_values(row: "Row") -> "list[SqlValue]":
        if not is_mapping_row(row):
            msg = "row must be a mapping of column names to values"
            raise TypeError(msg)
        return [to_sql_value(value) for value in row.values()]

    def _render_values(self, values: "list[SqlValue]", where: "Optional[str]" = None) -> "list[str]":
        """Render row values as placeholders or embedded raw SQL.

        Drivers with ``%s`` markers interpolate the whole statement whenever
        parameters are bound, so ``%`` inside raw fragments is doubled then.
        """
        rendered = [value.render(self.placeholder) for value in values]
        binds = any(not value.is_literal for value in values) or bool(where and self.placeholder in where)
        if "%" not in self.placeholder or not binds:
            return rendered
        return [text.replace("%", "%%") if value.is_literal else text for value, text in zip(values, rendered)]

    def prepare_insert(self, table: str, row: "Row") -> Statement:
        """Build an INSERT statement.

        Args:
            table: Table name.
            row: A mapping of column to value, where RawExpression values are
                embedded literally, or a list of column names, each bound to a
                placeholder so the statement can be executed once per row.

        Returns:
            The prepared, unexecuted statement.
        """
        if is_mapping_row(row):
            columns: list[Any] = list(row.keys())
            values = self._render_values(self._row_values(row))
        elif is_column_list(row):
            columns = list(row)
            values = [self.placeholder] * len(columns)
        else:
            msg = "row must be a mapping or a list of column names"
            raise TypeError(msg)

        sql = "INSERT INTO {} ({}) VALUES ({})".format(
            self.quote_identifier(table), self._join_identifiers(columns), ", ".join(values)
        )
        return self.prepare(sql)

    def prepare_update(self, table: str, row: "Row", where: "Optional[str]" = None) -> Statement:
        """Build an UPDATE statement.

        Args:
            table: Table name.
            row: A mapping of column to value, or a list of column names each set to a placeholder.
            where: Raw SQL condition appended as ``WHERE <where>``.

        Returns:
            The prepared, unexecuted statement.
        """
        if is_mapping_row(row):
            assignments = [
                f"{self.quote_identifier(column)} = {value}"
                for column, value in zip(row.keys(), self._render_values(self._row_values(row), where))
            ]
        elif is_column_list(row):
            assignments = [f"{self.quote_identifier(column)} = {self.placeholder}" for column in row]
        else:
            msg = "row must be a mapping or a list of column names"
            raise TypeError(msg)

        sql = f"UPDATE {self.quote_identifier(table)} SET {', '.join(assignments)}"
        if where:
            sql += f" WHERE {where}"
        return self.prepare(sql)

    def prepare_delete(self, table: str, where: "Optional[str]" = None) -> Statement:
        sql = f"DELETE FROM {self.quote_identifier(table)}"
        if where:
            sql += f" WHERE {where}"
        return self.prepare(sql)

    def _where_parameters(self, where: "Optional[str]", parameters: "Sequence[Any]") -> "list[Any]":
        if not where:
            return []
        params = self._normalize_parameters(parameters)
        if isinstance(params, dict):
            msg = "where parameters must be positional"
            raise TypeError(msg)
        return params

    def _affected_rows(self, statement: Statement, params: "list[Any]") -> int:
        with self.execute(statement, params) as executed:
            return executed.row_count

    def insert(self, table: str, row: "Mapping[str, Any]") -> int:
        """Insert one row and return the affected row count."""
        params = bound_parameters(self._row_values(row))
        return self._affected_rows(self.prepare_insert(table, row), params)

    def insert_many(self, table: str, columns: "ColumnList", rows: "Iterable[Sequence[Any]]") -> int:
        """Insert each of ``rows`` through one prepared statement.

        Returns:
            The total affected row count.
        """
        total = 0
        with self.prepare_insert(table, list(columns)) as statement:
            for row in rows:
                total += self.execute(statement, list(row)).row_count
        return total

    def update(self, table: str, row: "Mapping[str, Any]", where: "Optional[str]" = None, *parameters: Any) -> int:
        """Update rows and return the affected row count.

        Where parameters are bound after the row values and only when ``where`` is given.
        """
        params = bound_parameters(self._row_values(row))
        params.extend(self._where_parameters(where, parameters))
        return self._affected_rows(self.prepare_update(table, row, where), params)

    def delete(self, table: str, where: "Optional[str]" = None, *parameters: Any) -> int:
        """Delete rows and return the affected row count."""
        params = self._where_parameters(where, parameters)
        return self._affected_rows(self.prepare_delete(table, where), params)

    def has_table(self, table_name: str) -> bool:
        return table_name.replace(self.identifier_symbol, "") in self.list_tables()
