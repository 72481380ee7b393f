"""datanest Example: Offloading Large Arrays from a JSON Document

Builds a document with a handful of small arrays and one large volume,
writes it as .ajson (small arrays inline, the volume offloaded to a
sidecar HDF5 container), then inspects the container directly.

Run:
    python examples/offload_arrays.py

Output:
    - Creates scan.ajson and scan.ajson.h5
    - Prints which arrays were offloaded and the container catalog
"""

import numpy as np

from datanest import AccessMode, DatasetStore, ThresholdPolicy
from datanest.formats import ArrayDocument, ArrayJsonFormat


def build_document(seed: int = 0) -> ArrayDocument:
    rng = np.random.default_rng(seed)
    grid = np.linspace(-1.0, 1.0, 24)
    x, y, z = np.meshgrid(grid, grid, grid, indexing="ij")

    return ArrayDocument(
        name="scan",
        arrays={
            "energies": rng.normal(size=5),
            "dipole": np.array([0.12, -0.03, 0.88]),
            "hessian": rng.normal(size=(9, 9)),
            "density": np.exp(-(x**2 + y**2 + z**2) * 4.0),
        },
    )


def main() -> None:
    doc = build_document()
    threshold = 1024

    policy = ThresholdPolicy(threshold)
    for name, arr in doc.arrays.items():
        where = "offloaded" if policy.exceeds_threshold(arr) else "inline"
        print(f"{name:>10}: shape={arr.shape}, {arr.size * 8:>7} bytes -> {where}")

    fmt = ArrayJsonFormat(threshold=threshold)
    if not fmt.write_file("scan.ajson", doc):
        print(f"Write failed:\n{fmt.error()}")
        return

    print()
    with DatasetStore().opened("scan.ajson.h5", AccessMode.READ_ONLY) as store:
        for path in store.datasets():
            print(f"  {path}: dims={store.dataset_dimensions(path)}")

    restored = ArrayDocument()
    if fmt.new_instance().read_file("scan.ajson", restored):
        same = all(np.array_equal(doc.arrays[k], restored.arrays[k]) for k in doc.arrays)
        print(f"\nRound trip matches: {same}")


if __name__ == "__main__":
    main()
