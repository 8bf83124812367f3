"""Shared fixtures for unit tests.

``RecordingAdapter`` runs against a mocked DB-API connection and records
every SQL string it sends, so transaction and builder behavior can be
asserted without a database.
"""

from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

from sqladapter.adapter import Adapter
from sqladapter.config import AdapterConfig


class RecordingAdapter(Adapter):
    """Adapter over a mock connection that records executed SQL."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.executed: list[str] = []
        self.parameters: list[Any] = []
        self.connections: list[MagicMock] = []
        self.rowcount = 1
        self.fail_on: Optional[str] = None

    def _make_cursor(self) -> MagicMock:
        cursor = MagicMock(name="cursor")
        cursor.description = None
        cursor.fetchone.return_value = None
        cursor.fetchall.return_value = []

        def execute(sql: str, *args: Any) -> MagicMock:
            self.executed.append(sql)
            self.parameters.append(args[0] if args else None)
            if sql == self.fail_on:
                msg = f"{sql} failed"
                raise RuntimeError(msg)
            cursor.rowcount = self.rowcount
            return cursor

        cursor.execute.side_effect = execute
        return cursor

    def _open_connection(self, config: AdapterConfig) -> MagicMock:
        connection = MagicMock(name="connection")
        connection.cursor.side_effect = self._make_cursor
        self.connections.append(connection)
        return connection

    def _quote_value(self, connection: Any, value: Any) -> str:
        return "'" + str(value).replace("'", "''") + "'"

    def last_insert_id(self, table: Optional[str] = None, column: Optional[str] = None) -> int:
        return 42

    def list_tables(self) -> list[str]:
        return ["posts", "users"]


class NoSavepointAdapter(RecordingAdapter):
    supports_savepoint = False


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter(dsn="mock://db")


@pytest.fixture
def no_savepoint_adapter() -> NoSavepointAdapter:
    return NoSavepointAdapter(dsn="mock://db")
