from typing import Any, Optional

__all__ = (
    "DatabaseConnectionError",
    "ImproperConfigurationError",
    "InvalidStatementError",
    "MissingDependencyError",
    "QueryError",
    "SQLAdapterError",
    "UnsupportedOperationError",
)


class SQLAdapterError(Exception):
    """Base exception class from which all sqladapter exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLAdapterError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class MissingDependencyError(SQLAdapterError, ImportError):
    """Missing optional dependency.

    This exception is raised only when an adapter depends on a driver package that has not been installed.
    """

    def __init__(self, package: str, install_package: Optional[str] = None) -> None:
        super().__init__(
            f"Package {package!r} is not installed but required. You can install it by running "
            f"'pip install sqladapter[{install_package or package}]' to install sqladapter with the required extra "
            f"or 'pip install {install_package or package}' to install the package separately",
        )


class ImproperConfigurationError(SQLAdapterError, ValueError):
    """Improper Configuration error.

    Raised when an adapter is constructed without a required setting, such as ``dsn``.
    """


class DatabaseConnectionError(SQLAdapterError):
    """The database connection could not be opened."""

    def __init__(self, message: Optional[str] = None, dsn: Optional[str] = None) -> None:
        if message is None:
            message = "Database connect failed!"
        super().__init__(message)
        self.dsn = dsn


class UnsupportedOperationError(SQLAdapterError, NotImplementedError):
    """The adapter does not support the requested operation (e.g. savepoints)."""


class InvalidStatementError(SQLAdapterError, TypeError):
    """An object that is neither a Statement nor a DB-API cursor was given where one was expected."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Invalid statement"
        super().__init__(message)


class QueryError(SQLAdapterError):
    """The driver failed while executing a statement."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql

