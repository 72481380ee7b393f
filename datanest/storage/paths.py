"""Dataset path parsing and group resolution.

Paths are POSIX-style: ``Group1/Group2/Data`` or ``/Group1/Group2/Data``.
All segments but the last name groups; the last one is the leaf.
"""

from __future__ import annotations

import logging

import h5py

from datanest.errors import IOFailureError, PathInvalidError
from datanest.storage.format import SEPARATOR

logger = logging.getLogger(__name__)


def split_path(path: str) -> tuple[list[str], str]:
    """Split a dataset path into its group segments and leaf name.

    Args:
        path: Slash-separated path. One leading separator is stripped.

    Returns:
        (groups, leaf) where groups is ordered root-first.

    Raises:
        PathInvalidError: If the path has no segments or an empty segment.
    """
    if not isinstance(path, str):
        raise PathInvalidError(f"Dataset path must be a string, got {type(path).__name__}")

    stripped = path[1:] if path.startswith(SEPARATOR) else path
    if not stripped:
        raise PathInvalidError(f"Dataset path '{path}' has no segments")

    segments = stripped.split(SEPARATOR)
    if any(not seg for seg in segments):
        raise PathInvalidError(f"Dataset path '{path}' contains an empty segment")
    if any(seg in (".", "..") for seg in segments):
        raise PathInvalidError(f"Dataset path '{path}' contains a relative segment")

    return segments[:-1], segments[-1]


def normalize_path(path: str) -> str:
    """Return the root-relative form of a dataset path."""
    groups, leaf = split_path(path)
    return SEPARATOR.join([*groups, leaf])


def resolve_or_create_groups(root: h5py.Group, segments: list[str]) -> h5py.Group:
    """Walk from root, creating each missing group along the way.

    Args:
        root: Group to start from (usually the open file).
        segments: Group names, root-first.

    Returns:
        The deepest group.

    Raises:
        PathInvalidError: If a segment names an existing dataset.
        IOFailureError: If a group cannot be created.
    """
    group = root
    for depth, name in enumerate(segments):
        child = group.get(name)
        if child is None:
            try:
                child = group.create_group(name)
            except (OSError, ValueError) as e:
                raise IOFailureError(f"Cannot create group '{name}': {e}") from e
            logger.debug("Created group %s", child.name)
        elif not isinstance(child, h5py.Group):
            taken = SEPARATOR.join(segments[: depth + 1])
            raise PathInvalidError(f"'{taken}' is a dataset, not a group")
        group = child
    return group


def resolve_group(root: h5py.Group, segments: list[str]) -> h5py.Group | None:
    """Read-only variant of resolve_or_create_groups.

    Returns:
        The deepest group, or None if any segment is missing or is
        not a group. Never creates anything.
    """
    group = root
    for name in segments:
        child = group.get(name)
        if not isinstance(child, h5py.Group):
            return None
        group = child
    return group
