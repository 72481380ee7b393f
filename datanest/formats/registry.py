"""Name-keyed registry of file formats."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from datanest.formats.base import FileFormat

logger = logging.getLogger(__name__)

FormatFactory = Callable[[], FileFormat]


class FormatRegistry:
    """Maps format identifiers to factories producing fresh instances."""

    def __init__(self) -> None:
        self._factories: dict[str, FormatFactory] = {}

    def register(self, factory: FormatFactory) -> bool:
        """Register a format factory under its identifier.

        Returns:
            False if the identifier is already taken; the first
            registration wins.
        """
        identifier = factory().identifier()
        if identifier in self._factories:
            logger.warning("Format identifier '%s' already registered, ignoring", identifier)
            return False
        self._factories[identifier] = factory
        return True

    def get(self, identifier: str) -> FileFormat | None:
        """New instance of the format with this identifier, or None."""
        factory = self._factories.get(identifier)
        return factory() if factory is not None else None

    def for_extension(self, extension: str) -> FileFormat | None:
        """New instance of the first format handling this extension."""
        ext = extension.lower().lstrip(".")
        for factory in self._factories.values():
            fmt = factory()
            if ext in fmt.file_extensions():
                return fmt
        return None

    def for_file(self, path: str | Path) -> FileFormat | None:
        return self.for_extension(Path(path).suffix)

    @property
    def identifiers(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._factories

    def __len__(self) -> int:
        return len(self._factories)
