"""datanest — hierarchical numeric datasets in a single HDF5 container.

Store float64 arrays under slash-separated paths, with groups created on
demand, sorted catalog listing, and a size threshold for deciding which
arrays are worth offloading at all.

Quick start:
    from datanest import AccessMode, DatasetStore

    # Write
    store = DatasetStore()
    store.open("results.h5", AccessMode.READ_WRITE_TRUNCATE)
    store.write_matrix("/Group1/Group2/Data", matrix)
    store.write_dataset("/Volumes/Density", values, dims=[3, 3, 3])
    store.close()

    # Read
    with DatasetStore().opened("results.h5") as store:
        print(store.datasets())
        dims, values = store.read_dataset("Volumes/Density")

    # Decide before writing
    if store.exceeds_threshold(matrix):
        ...

    # Export
    from datanest.export import export_csv
    export_csv("results.h5", "Group1/Group2/Data")
"""

__version__ = "0.1.0"

from datanest.errors import ErrorKind, StoreError
from datanest.store import AccessMode, DatasetStore
from datanest.threshold import ThresholdPolicy
from datanest.utils.schema import DatasetInfo, StoreConfig, StoreSummary

__all__ = [
    "AccessMode",
    "DatasetInfo",
    "DatasetStore",
    "ErrorKind",
    "StoreConfig",
    "StoreError",
    "StoreSummary",
    "ThresholdPolicy",
    "__version__",
]
