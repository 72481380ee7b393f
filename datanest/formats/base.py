"""Common interface for text file formats that may offload arrays.

A FileFormat reads a stream into a target object and writes a source
object to a stream. Failures return False and leave details in error().
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any

logger = logging.getLogger(__name__)


class FileFormat(ABC):
    """Base class for concrete file formats.

    Subclasses implement read/write on text streams plus the identity
    methods used by the registry.
    """

    def __init__(self) -> None:
        self._error = ""
        self._file_name: Path | None = None

    # --- Stream I/O ---

    @abstractmethod
    def read(self, stream: IO[str], target: Any) -> bool:
        """Read stream into target. Returns False on failure."""

    @abstractmethod
    def write(self, stream: IO[str], source: Any) -> bool:
        """Write source to stream. Returns False on failure."""

    def read_file(self, path: str | Path, target: Any) -> bool:
        path = Path(path)
        self._file_name = path
        try:
            with open(path, encoding="utf-8") as f:
                return self.read(f, target)
        except OSError as e:
            self._append_error(f"Error opening file for reading: {path} ({e})")
            return False

    def write_file(self, path: str | Path, source: Any) -> bool:
        """Write source to path. The file is left untouched on failure."""
        path = Path(path)
        self._file_name = path
        text = self.write_string(source)
        if text is None:
            return False
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            return True
        except OSError as e:
            self._append_error(f"Error opening file for writing: {path} ({e})")
            return False

    def read_string(self, text: str, target: Any) -> bool:
        return self.read(io.StringIO(text), target)

    def write_string(self, source: Any) -> str | None:
        """Write source to a string. Returns None on failure."""
        buf = io.StringIO()
        if not self.write(buf, source):
            return None
        return buf.getvalue()

    # --- State ---

    def error(self) -> str:
        """Errors and warnings accumulated since the last clear()."""
        return self._error

    @property
    def file_name(self) -> Path | None:
        """Path given to the last read_file/write_file call, if any."""
        return self._file_name

    def clear(self) -> None:
        self._error = ""
        self._file_name = None

    def _append_error(self, message: str, newline: bool = True) -> None:
        logger.warning("%s: %s", self.identifier(), message)
        self._error += message + ("\n" if newline else "")

    # --- Identity ---

    @abstractmethod
    def new_instance(self) -> FileFormat:
        """Fresh instance of the same format with default settings."""

    @abstractmethod
    def identifier(self) -> str:
        """Unique short key used by the registry, e.g. "ajson"."""

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    def specification_url(self) -> str: ...

    @abstractmethod
    def file_extensions(self) -> list[str]:
        """Lower-case extensions without the leading dot."""

    @abstractmethod
    def mime_types(self) -> list[str]: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier='{self.identifier()}')"
