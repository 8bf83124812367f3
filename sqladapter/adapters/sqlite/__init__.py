"""SQLite adapter for sqladapter."""

from sqladapter.adapters.sqlite.adapter import SqliteAdapter, SqliteConnectionOptions

__all__ = ("SqliteAdapter", "SqliteConnectionOptions")
