"""PostgreSQL (psycopg) adapter for sqladapter."""

from sqladapter.adapters.psycopg.adapter import PsycopgAdapter, PsycopgConnectionOptions

__all__ = ("PsycopgAdapter", "PsycopgConnectionOptions")
