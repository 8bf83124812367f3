"""Structural protocols for DB-API 2.0 (PEP 249) objects."""

from typing import Any, Optional, Protocol

__all__ = ("Connection", "Cursor")


class Cursor(Protocol):
    """Protocol for PEP 249 cursors."""

    def execute(self, operation: Any, *args: Any, **kwargs: Any) -> Any:
        """Prepare and execute an operation."""
        ...

    def fetchone(self) -> Optional[Any]:
        """Fetch the next row."""
        ...

    def fetchall(self) -> Any:
        """Fetch all remaining rows."""
        ...

    def close(self) -> Any:
        """Close the cursor."""
        ...


class Connection(Protocol):
    """Protocol for PEP 249 connections."""

    def cursor(self, *args: Any, **kwargs: Any) -> Any:
        """Return a new cursor."""
        ...

    def close(self) -> Any:
        """Close the connection."""
        ...
