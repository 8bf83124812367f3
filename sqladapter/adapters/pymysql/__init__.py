"""MySQL (PyMySQL) adapter for sqladapter."""

from sqladapter.adapters.pymysql.adapter import PyMySQLAdapter, PyMySQLConnectionOptions, parse_mysql_dsn

__all__ = ("PyMySQLAdapter", "PyMySQLConnectionOptions", "parse_mysql_dsn")
