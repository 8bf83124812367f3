"""Result wrapper around one DB-API cursor."""

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

from sqladapter.exceptions import InvalidStatementError
from sqladapter.utils.type_guards import is_cursor, is_statement

if TYPE_CHECKING:
    from types import TracebackType

    from sqladapter.protocols import Cursor
    from sqladapter.typing import DictRow, StatementParameters

__all__ = ("Statement",)


class Statement:
    """One prepared or executed SQL statement and the cursor that runs it.

    Rows are always returned as dicts keyed by column name, whatever row type
    the driver produces.
    """

    __slots__ = ("_cursor", "_sql")

    def __init__(self, cursor: "Cursor", sql: str = "") -> None:
        self._cursor = cursor
        self._sql = sql

    def __str__(self) -> str:
        """Return the SQL text this statement runs."""
        return self._sql

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sql={self._sql!r})"

    def __iter__(self) -> "Iterator[DictRow]":
        while (row := self.get_row()) is not None:
            yield row

    def __enter__(self) -> "Statement":
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.close()

    @classmethod
    def factory(cls, statement: Any, sql: str = "") -> "Statement":
        """Wrap a native cursor, or pass an existing Statement through.

        Args:
            statement: A :class:`Statement` or a DB-API cursor.
            sql: SQL text associated with a raw cursor.

        Raises:
            InvalidStatementError: ``statement`` is neither.

        Returns:
            The Statement.
        """
        if is_statement(statement):
            return statement
        if is_cursor(statement):
            return cls(statement, sql)
        raise InvalidStatementError

    @property
    def cursor(self) -> "Cursor":
        return self._cursor

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def row_count(self) -> int:
        """Rows affected by the last execution, ``-1`` when the driver cannot tell."""
        rowcount = getattr(self._cursor, "rowcount", -1)
        return -1 if rowcount is None else int(rowcount)

    @property
    def column_names(self) -> "list[str]":
        return [column[0] for column in getattr(self._cursor, "description", None) or ()]

    def execute(self, parameters: "Optional[StatementParameters]" = None) -> "Statement":
        """Run the SQL on the owned cursor, binding ``parameters`` when given."""
        if parameters:
            self._cursor.execute(self._sql, parameters)
        else:
            self._cursor.execute(self._sql)
        return self

    def close(self) -> None:
        self._cursor.close()

    def _to_dict(self, row: Any) -> "DictRow":
        if isinstance(row, Mapping):
            return dict(row)
        return dict(zip(self.column_names, row))

    @staticmethod
    def _column(row: Any, col_number: int) -> Any:
        if isinstance(row, Mapping):
            return list(row.values())[col_number]
        return row[col_number]

    def get_row(self) -> "Optional[DictRow]":
        """Fetch the next row, or ``None`` at the end of the result."""
        row = self._cursor.fetchone()
        if row is None:
            return None
        return self._to_dict(row)

    def get_col(self, col_number: int = 0) -> Any:
        """Fetch the next row and return only column ``col_number``.

        Returns:
            The column value, or ``None`` at the end of the result.
        """
        row = self._cursor.fetchone()
        if row is None:
            return None
        return self._column(row, col_number)

    def get_cols(self, col_number: int = 0) -> "list[Any]":
        """Return column ``col_number`` of every remaining row."""
        return [self._column(row, col_number) for row in self._cursor.fetchall()]

    def get_all(self, column: "Optional[str]" = None) -> "Union[list[DictRow], dict[Any, DictRow]]":
        """Return every remaining row.

        Args:
            column: When given, key the result by this column's value. Later
                rows overwrite earlier rows with the same key.

        Returns:
            A list of rows, or a dict of rows keyed by ``column``.
        """
        rows = [self._to_dict(row) for row in self._cursor.fetchall()]
        if not column:
            return rows
        return {row[column]: row for row in rows}
