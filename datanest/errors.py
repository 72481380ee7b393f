"""datanest error kinds and exception hierarchy.

Storage modules raise these; DatasetStore catches them at its public
boundary, records them in ``last_error`` and returns a failure value.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a store failure."""

    NOT_OPEN = "not_open"
    ALREADY_OPEN = "already_open"
    READ_ONLY = "read_only"
    IO_FAILURE = "io_failure"
    PATH_INVALID = "path_invalid"
    NOT_FOUND = "not_found"
    DATASET_EXISTS = "dataset_exists"
    DIMENSION_MISMATCH = "dimension_mismatch"
    RANK_MISMATCH = "rank_mismatch"


class StoreError(Exception):
    """Base exception for all datanest store failures."""

    kind: ErrorKind = ErrorKind.IO_FAILURE


class NotOpenError(StoreError):
    """Raised when an operation needs an open container and there is none."""

    kind = ErrorKind.NOT_OPEN


class AlreadyOpenError(StoreError):
    """Raised when opening a store that already holds a container."""

    kind = ErrorKind.ALREADY_OPEN


class ReadOnlyError(StoreError):
    """Raised for mutations on a container opened read-only."""

    kind = ErrorKind.READ_ONLY


class IOFailureError(StoreError):
    """Raised when the storage layer fails to open, flush, read or write."""

    kind = ErrorKind.IO_FAILURE


class PathInvalidError(StoreError):
    """Raised for empty or malformed dataset paths."""

    kind = ErrorKind.PATH_INVALID


class NotFoundError(StoreError):
    """Raised when a dataset or group is absent."""

    kind = ErrorKind.NOT_FOUND


class DatasetExistsError(StoreError):
    """Raised when a write targets a leaf that is already taken."""

    kind = ErrorKind.DATASET_EXISTS


class DimensionMismatchError(StoreError):
    """Raised when declared dimensions disagree with the payload length."""

    kind = ErrorKind.DIMENSION_MISMATCH


class RankMismatchError(StoreError):
    """Raised when a rank-2 view is requested of non-rank-2 data."""

    kind = ErrorKind.RANK_MISMATCH
