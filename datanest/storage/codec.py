"""Dense float64 payload encoding for datanest containers.

Payloads are stored as one HDF5 dataset each, shape = dims, row-major.
Validation happens before any mutation so a rejected write leaves the
container untouched.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Sequence

import h5py
import numpy as np

from datanest.errors import (
    DatasetExistsError,
    DimensionMismatchError,
    IOFailureError,
    NotFoundError,
    RankMismatchError,
)
from datanest.storage.format import DTYPE, PREVIOUS_SUFFIX, REPLACE_SUFFIX
from datanest.storage.paths import resolve_group, split_path

logger = logging.getLogger(__name__)


def _validate_dims(dims: Sequence[Any]) -> tuple[int, ...]:
    """Coerce dims to a tuple of non-negative ints."""
    try:
        items = list(dims)
    except TypeError as e:
        raise DimensionMismatchError(f"Dimensions must be a sequence: {e}") from e

    shape = []
    for d in items:
        if isinstance(d, (bool, np.bool_)) or not isinstance(d, (int, np.integer)):
            raise DimensionMismatchError(f"Dimension {d!r} is not an integer")
        if d < 0:
            raise DimensionMismatchError(f"Dimension {d} is negative")
        shape.append(int(d))
    return tuple(shape)


def _as_flat(values: Any) -> np.ndarray:
    try:
        return np.asarray(values, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as e:
        raise DimensionMismatchError(f"Payload is not numeric: {e}") from e


def _free_name(group: h5py.Group, base: str) -> str:
    """First of base, base1, base2, ... not taken in group."""
    name, n = base, 0
    while name in group:
        n += 1
        name = f"{base}{n}"
    return name


def _replace(group: h5py.Group, leaf: str, data: np.ndarray) -> None:
    """Swap a new payload in for an existing dataset.

    The old dataset is moved aside, not deleted, until the new one is in
    place; any failure puts it back.
    """
    staged = _free_name(group, leaf + REPLACE_SUFFIX)
    try:
        group.create_dataset(staged, data=data, dtype=DTYPE)
    except (OSError, ValueError, TypeError) as e:
        if staged in group:
            del group[staged]
        raise IOFailureError(f"Failed to write '{leaf}' in {group.name}: {e}") from e

    previous = _free_name(group, leaf + PREVIOUS_SUFFIX)
    try:
        group.move(leaf, previous)
        group.move(staged, leaf)
    except (OSError, ValueError, KeyError) as e:
        if leaf not in group and previous in group:
            group.move(previous, leaf)
        if staged in group:
            del group[staged]
        raise IOFailureError(f"Failed to replace '{leaf}' in {group.name}: {e}") from e

    del group[previous]


def write_array(group: h5py.Group, leaf: str, data: np.ndarray, overwrite: bool = False) -> None:
    """Create a dataset from an encoded array, replacing only if allowed.

    A failed replacement leaves the previous payload intact.
    """
    existing = group.get(leaf)
    if existing is not None and (not overwrite or not isinstance(existing, h5py.Dataset)):
        kind = "dataset" if isinstance(existing, h5py.Dataset) else "group"
        raise DatasetExistsError(f"'{leaf}' already exists in {group.name} as a {kind}")

    if existing is not None:
        _replace(group, leaf, data)
    else:
        try:
            group.create_dataset(leaf, data=data, dtype=DTYPE)
        except (OSError, ValueError, TypeError) as e:
            raise IOFailureError(f"Failed to write '{leaf}' in {group.name}: {e}") from e

    logger.debug(
        "Wrote %s%s shape=%s", group.name.rstrip("/") + "/", leaf, data.shape
    )


def encode_dense(dims: Sequence[int], values: Any) -> np.ndarray:
    """Shape a flat row-major payload by its declared dimensions.

    Raises:
        DimensionMismatchError: If len(values) != prod(dims) or a
            dimension is negative or not an integer.
    """
    shape = _validate_dims(dims)
    flat = _as_flat(values)
    expected = math.prod(shape)
    if flat.size != expected:
        raise DimensionMismatchError(
            f"Payload has {flat.size} values but dims {list(shape)} need {expected}"
        )
    return flat.reshape(shape)


def encode_matrix(matrix: Any) -> np.ndarray:
    """Validate a rank-2 payload; its dims are [rows, cols].

    Raises:
        RankMismatchError: If matrix is not two-dimensional.
    """
    try:
        arr = np.asarray(matrix, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DimensionMismatchError(f"Matrix is not numeric: {e}") from e
    if arr.ndim != 2:
        raise RankMismatchError(f"Expected a rank-2 matrix, got rank {arr.ndim}")
    return np.ascontiguousarray(arr)


def write_dense(
    group: h5py.Group,
    leaf: str,
    dims: Sequence[int],
    values: Any,
    overwrite: bool = False,
) -> None:
    """Write a flat payload with explicit dimensions.

    Args:
        group: Group the dataset is created in.
        leaf: Dataset name inside the group.
        dims: Dimension sizes, outermost first.
        values: Flat payload in row-major order; len must equal prod(dims).
        overwrite: Replace an existing dataset instead of failing.

    Raises:
        DimensionMismatchError: If len(values) != prod(dims).
        DatasetExistsError: If leaf is taken and overwrite is False,
            or leaf names a group.
        IOFailureError: If h5py rejects the write.
    """
    write_array(group, leaf, encode_dense(dims, values), overwrite)


def write_matrix(
    group: h5py.Group,
    leaf: str,
    matrix: Any,
    overwrite: bool = False,
) -> None:
    """Write a rank-2 array; dims are [rows, cols].

    Raises:
        RankMismatchError: If matrix is not two-dimensional.
    """
    write_array(group, leaf, encode_matrix(matrix), overwrite)


def get_dataset(root: h5py.Group, path: str) -> h5py.Dataset:
    """Look up a dataset without creating anything.

    Raises:
        PathInvalidError: If the path is malformed.
        NotFoundError: If no dataset lives at path.
    """
    groups, leaf = split_path(path)
    group = resolve_group(root, groups)
    obj = group.get(leaf) if group is not None else None
    if not isinstance(obj, h5py.Dataset):
        raise NotFoundError(f"Dataset '{path}' not found")
    return obj


def read_dense(root: h5py.Group, path: str) -> tuple[list[int], np.ndarray]:
    """Read a dataset's dimensions and flat row-major payload.

    Returns:
        (dims, values) with values a 1-D float64 array of prod(dims) items.
    """
    ds = get_dataset(root, path)
    try:
        data = np.asarray(ds[()], dtype=np.float64)
    except (OSError, ValueError) as e:
        raise IOFailureError(f"Failed to read '{path}': {e}") from e
    return [int(d) for d in ds.shape], data.reshape(-1)


def read_matrix(root: h5py.Group, path: str) -> np.ndarray:
    """Read a rank-2 dataset as a 2-D array.

    Raises:
        RankMismatchError: If the stored rank is not 2.
    """
    ds = get_dataset(root, path)
    if ds.ndim != 2:
        raise RankMismatchError(f"Dataset '{path}' has rank {ds.ndim}, expected 2")
    dims, values = read_dense(root, path)
    return values.reshape(dims)
