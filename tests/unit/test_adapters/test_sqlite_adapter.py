"""Unit tests for SqliteAdapter against in-memory and temporary databases."""

import datetime
import gc
import pickle
from collections.abc import Iterator
from decimal import Decimal
from pathlib import Path

import pytest

from sqladapter.adapters.sqlite import SqliteAdapter
from sqladapter.exceptions import DatabaseConnectionError, QueryError
from sqladapter.expressions import RawExpression


@pytest.fixture
def db() -> Iterator[SqliteAdapter]:
    adapter = SqliteAdapter(dsn=":memory:")
    adapter.execute(
        "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, visits INTEGER DEFAULT 0)"
    ).close()
    yield adapter
    adapter.disconnect()


def _count(db: SqliteAdapter, table: str = "users") -> int:
    with db.execute(f"SELECT COUNT(*) FROM {table}") as statement:
        return statement.get_col()


def _names(db: SqliteAdapter) -> "list[str]":
    with db.execute("SELECT name FROM users ORDER BY id") as statement:
        return statement.get_cols()


def test_connection_runs_in_autocommit_mode(db: SqliteAdapter) -> None:
    assert db.connection.isolation_level is None


def test_connect_failure_is_wrapped(tmp_path: Path) -> None:
    adapter = SqliteAdapter(dsn=str(tmp_path / "missing" / "app.db"))

    with pytest.raises(DatabaseConnectionError) as exc_info:
        adapter.connect()

    assert exc_info.value.dsn == str(tmp_path / "missing" / "app.db")
    assert adapter.is_connected() is False


def test_file_uri_enables_uri_mode() -> None:
    with SqliteAdapter(dsn="file:sqladapter_uri_test?mode=memory") as adapter:
        with adapter.execute("SELECT 1") as statement:
            assert statement.get_col() == 1


def test_quote_identifier_uses_double_quotes(db: SqliteAdapter) -> None:
    assert str(db.quote_identifier("main.users")) == '"main"."users"'
    assert str(db.quote_identifier('us"ers')) == '"users"'


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("it's", "'it''s'"),
        (42, "42"),
        (1.5, "1.5"),
        (True, "1"),
        (None, "NULL"),
        (Decimal("9.99"), "'9.99'"),
        (datetime.date(2024, 1, 2), "'2024-01-02'"),
        (datetime.datetime(2024, 1, 2, 3, 4, 5), "'2024-01-02T03:04:05'"),
        (b"\x01\xff", "X'01FF'"),
    ],
)
def test_quote(db: SqliteAdapter, value: object, expected: str) -> None:
    assert db.quote(value) == expected


def test_insert_and_last_insert_id(db: SqliteAdapter) -> None:
    assert db.insert("users", {"name": "alice"}) == 1
    assert db.last_insert_id() == 1
    assert db.insert("users", {"name": "bob", "visits": RawExpression("10 + 5")}) == 1
    assert db.last_insert_id() == 2

    with db.execute("SELECT name, visits FROM users WHERE id = ?", 2) as statement:
        assert statement.get_row() == {"name": "bob", "visits": 15}


def test_insert_many(db: SqliteAdapter) -> None:
    inserted = db.insert_many("users", ["name", "visits"], [("alice", 1), ("bob", 2), ("carol", 3)])

    assert inserted == 3
    assert _names(db) == ["alice", "bob", "carol"]


def test_prepared_insert_can_run_repeatedly(db: SqliteAdapter) -> None:
    statement = db.prepare_insert("users", ["name"])

    db.execute(statement, ["alice"])
    db.execute(statement, ["bob"])
    statement.close()

    assert _names(db) == ["alice", "bob"]


def test_update(db: SqliteAdapter) -> None:
    db.insert_many("users", ["name"], [["alice"], ["bob"]])

    updated = db.update("users", {"name": "robert", "visits": RawExpression("visits + 1")}, "name = ?", "bob")

    assert updated == 1
    with db.execute("SELECT name, visits FROM users WHERE id = 2") as statement:
        assert statement.get_row() == {"name": "robert", "visits": 1}


def test_update_without_where_touches_every_row(db: SqliteAdapter) -> None:
    db.insert_many("users", ["name"], [["alice"], ["bob"]])

    assert db.update("users", {"visits": 7}) == 2


def test_delete(db: SqliteAdapter) -> None:
    db.insert_many("users", ["name"], [["alice"], ["bob"], ["carol"]])

    assert db.delete("users", "name IN (?, ?)", "alice", "carol") == 2
    assert _names(db) == ["bob"]
    assert db.delete("users") == 1
    assert _count(db) == 0


def test_named_parameters(db: SqliteAdapter) -> None:
    db.insert("users", {"name": "alice"})

    with db.execute("SELECT id FROM users WHERE name = :name", {"name": "alice"}) as statement:
        assert statement.get_col() == 1


def test_get_all_keyed(db: SqliteAdapter) -> None:
    db.insert_many("users", ["name"], [["alice"], ["bob"]])

    with db.execute("SELECT id, name FROM users") as statement:
        rows = statement.get_all("name")

    assert rows == {"alice": {"id": 1, "name": "alice"}, "bob": {"id": 2, "name": "bob"}}


def test_query_error_carries_sql(db: SqliteAdapter) -> None:
    with pytest.raises(QueryError) as exc_info:
        db.execute("SELECT * FROM missing")

    assert exc_info.value.sql == "SELECT * FROM missing"
    assert "no such table" in str(exc_info.value)


def test_list_tables_and_has_table(db: SqliteAdapter) -> None:
    db.execute("CREATE TABLE posts (id INTEGER PRIMARY KEY)").close()

    assert db.list_tables() == ["posts", "users"]
    assert db.has_table("users") is True
    assert db.has_table('"posts"') is True
    assert db.has_table("comments") is False


def test_rollback_discards_changes(db: SqliteAdapter) -> None:
    db.begin()
    db.insert("users", {"name": "alice"})
    db.rollback()

    assert db.in_transaction() is False
    assert _count(db) == 0


def test_commit_keeps_changes(db: SqliteAdapter) -> None:
    db.begin()
    db.insert("users", {"name": "alice"})
    db.commit()

    assert _count(db) == 1


def test_savepoint_rollback_keeps_outer_work(db: SqliteAdapter) -> None:
    db.begin()
    db.insert("users", {"name": "alice"})
    db.begin()
    db.insert("users", {"name": "bob"})
    assert db.savepoint_depth == 1
    db.rollback()
    db.insert("users", {"name": "carol"})
    db.commit()

    assert db.in_transaction() is False
    assert _names(db) == ["alice", "carol"]


def test_transaction_context_manager(db: SqliteAdapter) -> None:
    with db.transaction():
        db.insert("users", {"name": "alice"})
        with pytest.raises(RuntimeError), db.transaction():
            db.insert("users", {"name": "bob"})
            raise RuntimeError("undo bob")

    assert _names(db) == ["alice"]


def test_disconnect_rolls_back_open_transaction(tmp_path: Path) -> None:
    dsn = str(tmp_path / "app.db")
    with SqliteAdapter(dsn=dsn) as db:
        db.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)").close()
        db.begin()
        db.begin()
        db.insert("users", {"name": "alice"})

    assert db.is_connected() is False
    assert db.in_transaction() is False
    assert db.savepoint_depth == 0
    with SqliteAdapter(dsn=dsn) as reopened:
        assert _count(reopened) == 0


def test_pickle_disconnects_and_restores(tmp_path: Path) -> None:
    db = SqliteAdapter(dsn=str(tmp_path / "app.db"), options={"timeout": 2.0})
    db.connect()

    restored = pickle.loads(pickle.dumps(db))

    assert db.is_connected() is False
    assert restored.is_connected() is False
    assert restored.config == db.config
    with restored.execute("SELECT 1") as statement:
        assert statement.get_col() == 1
    restored.disconnect()


def test_quote_mapping_keeps_keys(db: SqliteAdapter) -> None:
    assert db.quote({"a": 1, "b": None, "c": "it's"}) == {"a": "1", "b": "NULL", "c": "'it''s'"}


def test_garbage_collected_adapter_rolls_back(tmp_path: Path) -> None:
    dsn = str(tmp_path / "app.db")
    with SqliteAdapter(dsn=dsn) as setup:
        setup.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)").close()

    db = SqliteAdapter(dsn=dsn)
    db.begin()
    db.insert("users", {"name": "alice"})
    del db
    gc.collect()

    # a lingering write lock would make this insert time out
    with SqliteAdapter(dsn=dsn, options={"timeout": 0.1}) as reopened:
        reopened.insert("users", {"name": "bob"})
        assert _names(reopened) == ["bob"]
