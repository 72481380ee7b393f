"""CSV export for datasets in a datanest container.

One dataset per CSV file:
  - rank 0 or 1 — one value per row
  - rank 2      — one matrix row per CSV row
  - rank > 2    — trailing dimensions flattened into columns
"""

from __future__ import annotations

import csv
from pathlib import Path

import numpy as np

from datanest.store import AccessMode, DatasetStore


def export_csv(
    path: str | Path,
    dataset: str,
    output: str | Path | None = None,
    include_header: bool = True,
) -> Path:
    """Export one dataset from a container to CSV.

    Args:
        path: Path to the container file.
        dataset: Dataset path inside the container.
        output: Output CSV file. Defaults to "<container stem>_<dataset>.csv"
                beside the container, with "/" in the dataset path
                replaced by "_".
        include_header: Whether to write a "row,c0,c1,..." header row.

    Returns:
        Path to the created CSV file.

    Raises:
        StoreError: If the container cannot be opened or the dataset read.
    """
    path = Path(path)
    with DatasetStore().opened(path, AccessMode.READ_ONLY) as store:
        result = store.read_dataset(dataset)
        if result is None:
            assert store.last_error is not None
            raise store.last_error
    dims, values = result

    if output is None:
        slug = dataset.strip("/").replace("/", "_")
        out = path.with_name(f"{path.stem}_{slug}.csv")
    else:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)

    _write_rows(out, _as_table(dims, values), include_header)
    return out


def _as_table(dims: list[int], values: np.ndarray) -> np.ndarray:
    """Reshape a flat payload into a 2-D table of rows."""
    if len(dims) <= 1:
        return values.reshape(-1, 1)
    return values.reshape(dims[0], int(np.prod(dims[1:])))


def _write_rows(path: Path, table: np.ndarray, include_header: bool) -> None:
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        if include_header:
            writer.writerow(["row", *(f"c{i}" for i in range(table.shape[1]))])
        for i, row in enumerate(table):
            writer.writerow([str(i), *(repr(float(v)) for v in row)])

