"""DatasetStore — the main interface for reading and writing containers.

Usage:
    from datanest import AccessMode, DatasetStore

    store = DatasetStore()
    store.open("results.h5", AccessMode.READ_WRITE_TRUNCATE)

    store.write_matrix("/Group1/Group2/Data", np.eye(10))
    store.write_dataset("/Volumes/Density", values, dims=[3, 3, 3])

    print(store.datasets())          # ['Group1/Group2/Data', 'Volumes/Density']
    dims, values = store.read_dataset("Volumes/Density")

    store.close()

Or as a context manager:

    with DatasetStore().opened("results.h5", AccessMode.READ_ONLY) as store:
        matrix = store.read_matrix("Group1/Group2/Data")

Store failures never raise. Operations return False or None and leave the
failure in ``store.last_error`` (a StoreError carrying an ErrorKind).
"""

from __future__ import annotations

import contextlib
import functools
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence, TypeVar

import h5py
import numpy as np

from datanest.errors import (
    AlreadyOpenError,
    IOFailureError,
    NotOpenError,
    ReadOnlyError,
    StoreError,
)
from datanest.storage import catalog, codec
from datanest.storage.format import FORMAT_VERSION, FORMAT_VERSION_ATTR
from datanest.storage.paths import resolve_or_create_groups, split_path
from datanest.threshold import ThresholdPolicy
from datanest.utils.schema import DatasetInfo, StoreConfig, StoreSummary

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class AccessMode(str, Enum):
    """How a container is opened. Values are h5py file modes."""

    READ_ONLY = "r"
    READ_WRITE_APPEND = "a"
    READ_WRITE_TRUNCATE = "w"

    @property
    def writable(self) -> bool:
        return self is not AccessMode.READ_ONLY


def _reports_errors(default: Any) -> Callable[[F], F]:
    """Turn StoreError into a failure value recorded on the store."""

    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self: DatasetStore, *args: Any, **kwargs: Any) -> Any:
            self.last_error = None
            try:
                return method(self, *args, **kwargs)
            except StoreError as e:
                self.last_error = e
                logger.warning("%s failed [%s]: %s", method.__name__, e.kind.value, e)
                return default() if callable(default) else default

        return wrapper  # type: ignore[return-value]

    return decorator


class DatasetStore:
    """Hierarchical store of float64 datasets in a single HDF5 container.

    Holds at most one open container at a time. Not thread-safe.

    Args:
        config: Threshold and overwrite settings. Defaults to StoreConfig().
    """

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = config or StoreConfig()
        self.last_error: StoreError | None = None

        self._policy = ThresholdPolicy(self.config.threshold)
        self._file: h5py.File | None = None
        self._path: Path | None = None
        self._mode: AccessMode | None = None

    # --- Lifecycle ---

    @_reports_errors(False)
    def open(self, path: str | Path, mode: AccessMode | str = AccessMode.READ_ONLY) -> bool:
        """Open a container.

        READ_ONLY fails if the file is missing or unreadable.
        READ_WRITE_APPEND opens or creates, keeping existing datasets.
        READ_WRITE_TRUNCATE always starts from an empty container.
        """
        if self._file is not None:
            raise AlreadyOpenError(f"Store already has {self._path} open")

        try:
            mode = AccessMode(mode)
        except ValueError as e:
            raise IOFailureError(f"Unknown access mode {mode!r}") from e

        path = Path(path)
        if not mode.writable and not path.is_file():
            raise IOFailureError(f"Container not found: {path}")

        try:
            if mode.writable:
                path.parent.mkdir(parents=True, exist_ok=True)
            handle = h5py.File(str(path), mode.value)
        except OSError as e:
            raise IOFailureError(f"Cannot open {path} ({mode.name}): {e}") from e

        if mode.writable and FORMAT_VERSION_ATTR not in handle.attrs:
            try:
                handle.attrs[FORMAT_VERSION_ATTR] = FORMAT_VERSION
            except (OSError, KeyError) as e:
                handle.close()
                raise IOFailureError(f"Cannot initialize {path}: {e}") from e

        self._file = handle
        self._path = path
        self._mode = mode
        logger.info("Opened %s (%s)", path, mode.name)
        return True

    @_reports_errors(False)
    def close(self) -> bool:
        """Flush and release the container.

        The store is closed afterwards even if the flush fails.
        """
        if self._file is None:
            raise NotOpenError("No container is open")

        handle, path, mode = self._file, self._path, self._mode
        self._file = None
        self._path = None
        self._mode = None

        try:
            if mode is not None and mode.writable:
                handle.flush()
            handle.close()
        except (OSError, ValueError) as e:
            if handle:
                with contextlib.suppress(OSError, ValueError):
                    handle.close()
            raise IOFailureError(f"Failed to close {path}: {e}") from e

        logger.info("Closed %s", path)
        return True

    def opened(self, path: str | Path, mode: AccessMode | str = AccessMode.READ_ONLY) -> DatasetStore:
        """Open and return self, for use in a with-statement.

        Raises:
            StoreError: If the container cannot be opened.
        """
        if not self.open(path, mode):
            assert self.last_error is not None
            raise self.last_error
        return self

    def __enter__(self) -> DatasetStore:
        return self

    def __exit__(self, *args: Any) -> None:
        if self._file is not None:
            self.close()

    @property
    def is_open(self) -> bool:
        return self._file is not None

    @property
    def path(self) -> Path | None:
        """Path of the open container, None when closed."""
        return self._path

    @property
    def mode(self) -> AccessMode | None:
        return self._mode

    def _require_open(self) -> h5py.File:
        if self._file is None:
            raise NotOpenError("No container is open. Call .open() first.")
        return self._file

    def _require_writable(self) -> h5py.File:
        handle = self._require_open()
        if self._mode is AccessMode.READ_ONLY:
            raise ReadOnlyError(f"{self._path} is open read-only")
        return handle

    # --- Writing ---

    @_reports_errors(False)
    def write_dataset(self, path: str, values: Any, dims: Sequence[int]) -> bool:
        """Write a flat row-major payload with explicit dimensions.

        Intermediate groups are created as needed. Nothing is created if
        len(values) != prod(dims).

        Args:
            path: Dataset path, e.g. "/Group1/Group2/Data".
            values: Flat numeric sequence or array.
            dims: Dimension sizes, outermost first.
        """
        handle = self._require_writable()
        groups, leaf = split_path(path)
        data = codec.encode_dense(dims, values)
        group = resolve_or_create_groups(handle, groups)
        codec.write_array(group, leaf, data, overwrite=self.config.overwrite)
        return True

    @_reports_errors(False)
    def write_matrix(self, path: str, matrix: Any) -> bool:
        """Write a rank-2 array. Stored dims are [rows, cols]."""
        handle = self._require_writable()
        groups, leaf = split_path(path)
        data = codec.encode_matrix(matrix)
        group = resolve_or_create_groups(handle, groups)
        codec.write_array(group, leaf, data, overwrite=self.config.overwrite)
        return True

    # --- Reading ---

    @_reports_errors(None)
    def read_dataset(self, path: str) -> tuple[list[int], np.ndarray] | None:
        """Read (dims, flat values), or None on failure."""
        return codec.read_dense(self._require_open(), path)

    @_reports_errors(None)
    def read_matrix(self, path: str) -> np.ndarray | None:
        """Read a rank-2 dataset as a 2-D array, or None on failure."""
        return codec.read_matrix(self._require_open(), path)

    # --- Catalog ---

    @_reports_errors(list)
    def datasets(self) -> list[str]:
        """Sorted root-relative paths of every dataset in the container."""
        return catalog.datasets(self._require_open())

    @_reports_errors(False)
    def dataset_exists(self, path: str) -> bool:
        return catalog.dataset_exists(self._require_open(), path)

    @_reports_errors(None)
    def dataset_dimensions(self, path: str) -> list[int] | None:
        """Stored dims of a dataset without reading its payload."""
        return catalog.dataset_dimensions(self._require_open(), path)

    @_reports_errors(None)
    def dataset_info(self, path: str) -> DatasetInfo | None:
        return catalog.dataset_info(self._require_open(), path)

    @_reports_errors(False)
    def remove_dataset(self, path: str) -> bool:
        """Remove a dataset. Returns False if it did not exist.

        Parent groups stay in the container even when left empty.
        """
        return catalog.remove_dataset(self._require_writable(), path)

    @_reports_errors(None)
    def describe(self) -> StoreSummary | None:
        """Summary of every dataset in the open container."""
        handle = self._require_open()
        assert self._mode is not None
        return StoreSummary(
            path=str(self._path),
            mode=self._mode.name,
            datasets=[catalog.dataset_info(handle, p) for p in catalog.datasets(handle)],
        )

    # --- Threshold ---

    @property
    def threshold(self) -> int:
        """Offload threshold in bytes."""
        return self._policy.threshold

    def set_threshold(self, nbytes: int) -> None:
        self._policy.set_threshold(nbytes)
        self.config.threshold = self._policy.threshold

    def exceeds_threshold(self, data: Any) -> bool:
        """True if data (byte count, matrix or flat values) is over the threshold."""
        return self._policy.exceeds_threshold(data)

    # --- Display ---

    def __repr__(self) -> str:
        if self._file is None:
            return "DatasetStore(status=closed)"
        assert self._mode is not None
        return f"DatasetStore(path='{self._path}', mode={self._mode.name}, status=open)"
