"""sqladapter: a small DB-API access layer with nested transactions and CRUD statement builders."""

from sqladapter import exceptions, utils
from sqladapter.__metadata__ import __version__
from sqladapter.adapter import Adapter
from sqladapter.config import AdapterConfig
from sqladapter.exceptions import (
    DatabaseConnectionError,
    ImproperConfigurationError,
    InvalidStatementError,
    MissingDependencyError,
    QueryError,
    SQLAdapterError,
    UnsupportedOperationError,
)
from sqladapter.expressions import BoundValue, RawExpression, SqlValue
from sqladapter.factory import create_adapter, register_adapter
from sqladapter.statement import Statement
from sqladapter.utils.logging import configure_logging, get_logger

__all__ = (
    "Adapter",
    "AdapterConfig",
    "BoundValue",
    "DatabaseConnectionError",
    "ImproperConfigurationError",
    "InvalidStatementError",
    "MissingDependencyError",
    "QueryError",
    "RawExpression",
    "SQLAdapterError",
    "SqlValue",
    "Statement",
    "UnsupportedOperationError",
    "__version__",
    "configure_logging",
    "create_adapter",
    "exceptions",
    "get_logger",
    "register_adapter",
    "utils",
)
