"""Read-only inspection and removal of stored datasets."""

from __future__ import annotations

import logging

import h5py

from datanest.errors import IOFailureError, PathInvalidError
from datanest.storage.codec import get_dataset
from datanest.storage.paths import normalize_path, resolve_group, split_path
from datanest.utils.schema import DatasetInfo

logger = logging.getLogger(__name__)


def datasets(root: h5py.Group) -> list[str]:
    """All dataset paths below root, root-relative, sorted lexicographically."""
    found: list[str] = []

    def _collect(name: str, obj: h5py.HLObject) -> None:
        if isinstance(obj, h5py.Dataset):
            found.append(name)

    root.visititems(_collect)
    return sorted(found)


def dataset_exists(root: h5py.Group, path: str) -> bool:
    """True only if path names a dataset (not a group)."""
    try:
        groups, leaf = split_path(path)
    except PathInvalidError:
        return False
    group = resolve_group(root, groups)
    if group is None:
        return False
    return isinstance(group.get(leaf), h5py.Dataset)


def dataset_dimensions(root: h5py.Group, path: str) -> list[int]:
    """Stored dims of a dataset, read from metadata only."""
    return [int(d) for d in get_dataset(root, path).shape]


def dataset_info(root: h5py.Group, path: str) -> DatasetInfo:
    ds = get_dataset(root, path)
    return DatasetInfo(
        path=normalize_path(path),
        dims=ds.shape,
        dtype=str(ds.dtype),
        nbytes=int(ds.size) * ds.dtype.itemsize,
    )


def remove_dataset(root: h5py.Group, path: str) -> bool:
    """Unlink a dataset. Parent groups are left in place, even when empty.

    Returns:
        False if no dataset existed at path.
    """
    groups, leaf = split_path(path)
    group = resolve_group(root, groups)
    if group is None or not isinstance(group.get(leaf), h5py.Dataset):
        return False

    try:
        del group[leaf]
    except (OSError, KeyError) as e:
        raise IOFailureError(f"Failed to remove '{path}': {e}") from e

    logger.debug("Removed dataset %s", path)
    return True
