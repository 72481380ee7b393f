"""File formats that use a datanest container as an auxiliary payload channel."""

from datanest.formats.arrayjson import ArrayDocument, ArrayJsonFormat
from datanest.formats.base import FileFormat
from datanest.formats.registry import FormatRegistry


def default_registry() -> FormatRegistry:
    """Registry with every built-in format."""
    registry = FormatRegistry()
    registry.register(ArrayJsonFormat)
    return registry


__all__ = [
    "ArrayDocument",
    "ArrayJsonFormat",
    "FileFormat",
    "FormatRegistry",
    "default_registry",
]
