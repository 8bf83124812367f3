"""General utility functions."""

import importlib
from typing import Any

__all__ = ("import_string",)


def import_string(dotted_path: str) -> "Any":
    """Dotted Path Import.

    Import a dotted module path and return the attribute/class designated by the
    last name in the path. Raise ImportError if the import failed.

    Args:
        dotted_path: The path of the module to import.

    Raises:
        ImportError: Could not import the module.

    Returns:
        object: The imported object.
    """
    module_path, _, attribute = dotted_path.rpartition(".")
    if not module_path:
        msg = f"{dotted_path} doesn't look like a module path"
        raise ImportError(msg)

    module = importlib.import_module(module_path)
    try:
        return getattr(module, attribute)
    except AttributeError as e:
        msg = f"Module '{module_path}' does not define a '{attribute}' attribute/class"
        raise ImportError(msg) from e
