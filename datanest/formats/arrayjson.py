"""JSON document of named arrays with large arrays offloaded to HDF5.

Layout of an .ajson file:

    {
      "format": "ajson",
      "version": "1.0.0",
      "name": "water_scan",
      "store": "water_scan.ajson.h5",           — only if something was offloaded
      "arrays": {
        "energies": {"dims": [4], "values": [...]},          — inlined
        "density":  {"dims": [30, 30, 30], "dataset": "arrays/density"}
      }
    }

Arrays whose size exceeds the threshold go into a sidecar datanest
container; everything else is written inline.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any

import numpy as np

from datanest.errors import StoreError
from datanest.formats.base import FileFormat
from datanest.storage import codec
from datanest.storage.format import DEFAULT_THRESHOLD, FILE_EXTENSION, FORMAT_VERSION, SEPARATOR
from datanest.storage.paths import normalize_path
from datanest.store import AccessMode, DatasetStore
from datanest.threshold import ThresholdPolicy
from datanest.utils.schema import StoreConfig

FORMAT_ID = "ajson"
DATASET_ROOT = "arrays"


@dataclass
class ArrayDocument:
    """Named float64 arrays, the in-memory side of an .ajson file."""

    name: str = ""
    arrays: dict[str, np.ndarray] = field(default_factory=dict)

    def clear(self) -> None:
        self.name = ""
        self.arrays.clear()


class ArrayJsonFormat(FileFormat):
    """Reads and writes ArrayDocument as JSON.

    Args:
        threshold: Arrays larger than this many bytes are offloaded.
        store_path: Sidecar container path. When None, write_file and
            read_file derive it from the document path ("<file>.h5").
    """

    def __init__(
        self,
        threshold: int = DEFAULT_THRESHOLD,
        store_path: str | Path | None = None,
    ) -> None:
        super().__init__()
        self.policy = ThresholdPolicy(threshold)
        self.store_path = Path(store_path) if store_path is not None else None

    # --- Writing ---

    def write(self, stream: IO[str], source: Any) -> bool:
        if not isinstance(source, ArrayDocument):
            self._append_error(f"Cannot write {type(source).__name__}, expected ArrayDocument")
            return False

        entries: dict[str, dict[str, Any]] = {}
        offload: dict[str, np.ndarray] = {}
        for key, value in source.arrays.items():
            try:
                arr = np.asarray(value, dtype=np.float64)
            except (TypeError, ValueError) as e:
                self._append_error(f"Array '{key}' is not numeric: {e}")
                return False

            if self.policy.exceeds_threshold(arr):
                try:
                    dataset = normalize_path(f"{DATASET_ROOT}{SEPARATOR}{key}")
                except StoreError as e:
                    self._append_error(f"Array name '{key}' is not a valid dataset path: {e}")
                    return False
                offload[dataset] = arr
                entries[key] = {"dims": list(arr.shape), "dataset": dataset}
            else:
                entries[key] = {"dims": list(arr.shape), "values": arr.reshape(-1).tolist()}

        doc: dict[str, Any] = {
            "format": FORMAT_ID,
            "version": FORMAT_VERSION,
            "name": source.name,
        }
        if offload:
            store_path = self._store_path()
            if store_path is None:
                self._append_error("Arrays exceed the threshold but no store path is set")
                return False
            if not self._offload(store_path, offload):
                return False
            doc["store"] = self._store_reference(store_path)
        doc["arrays"] = entries

        json.dump(doc, stream, indent=2)
        stream.write("\n")
        return True

    def _offload(self, store_path: Path, arrays: dict[str, np.ndarray]) -> bool:
        store = DatasetStore(StoreConfig(threshold=self.policy.threshold, overwrite=True))
        if not store.open(store_path, AccessMode.READ_WRITE_TRUNCATE):
            self._append_error(f"Cannot open store {store_path}: {store.last_error}")
            return False

        with store:
            for dataset, arr in arrays.items():
                if not store.write_dataset(dataset, arr.reshape(-1), arr.shape):
                    self._append_error(f"Cannot offload '{dataset}': {store.last_error}")
                    return False
            if not store.close():
                self._append_error(f"Cannot close store {store_path}: {store.last_error}")
                return False
        return True

    # --- Reading ---

    def read(self, stream: IO[str], target: Any) -> bool:
        if not isinstance(target, ArrayDocument):
            self._append_error(f"Cannot read into {type(target).__name__}, expected ArrayDocument")
            return False

        try:
            doc = json.load(stream)
        except ValueError as e:
            self._append_error(f"Invalid JSON: {e}")
            return False

        if not isinstance(doc, dict) or doc.get("format") != FORMAT_ID:
            self._append_error(f"Not an {FORMAT_ID} document")
            return False
        entries = doc.get("arrays", {})
        if not isinstance(entries, dict):
            self._append_error("'arrays' must be an object")
            return False

        store: DatasetStore | None = None
        arrays: dict[str, np.ndarray] = {}
        try:
            for key, entry in entries.items():
                if not isinstance(entry, dict):
                    self._append_error(f"Array '{key}' must be an object")
                    return False
                if "dataset" in entry:
                    if store is None:
                        store = self._open_store(doc.get("store"))
                        if store is None:
                            return False
                    arr = self._read_offloaded(store, key, entry)
                else:
                    arr = self._read_inline(key, entry)
                if arr is None:
                    return False
                arrays[key] = arr
        finally:
            if store is not None and store.is_open:
                store.close()

        target.clear()
        target.name = str(doc.get("name", ""))
        target.arrays.update(arrays)
        return True

    def _read_inline(self, key: str, entry: dict[str, Any]) -> np.ndarray | None:
        try:
            return codec.encode_dense(entry.get("dims", []), entry.get("values", []))
        except StoreError as e:
            self._append_error(f"Array '{key}': {e}")
            return None

    def _read_offloaded(
        self, store: DatasetStore, key: str, entry: dict[str, Any]
    ) -> np.ndarray | None:
        result = store.read_dataset(entry["dataset"])
        if result is None:
            self._append_error(f"Array '{key}': {store.last_error}")
            return None
        dims, values = result
        declared = entry.get("dims")
        if declared is not None and list(declared) != dims:
            self._append_error(f"Array '{key}': stored dims {dims} differ from declared {declared}")
            return None
        return values.reshape(dims)

    def _open_store(self, reference: str | None) -> DatasetStore | None:
        store_path = self._store_path(reference)
        if store_path is None:
            self._append_error("Document references offloaded arrays but names no store")
            return None
        store = DatasetStore()
        if not store.open(store_path, AccessMode.READ_ONLY):
            self._append_error(f"Cannot open store {store_path}: {store.last_error}")
            return None
        return store

    # --- Store location ---

    def _store_path(self, reference: str | None = None) -> Path | None:
        if self.store_path is not None:
            return self.store_path
        if reference:
            ref = Path(reference)
            if ref.is_absolute() or self.file_name is None:
                return ref
            return self.file_name.parent / ref
        if self.file_name is not None:
            return self.file_name.with_name(self.file_name.name + FILE_EXTENSION)
        return None

    def _store_reference(self, store_path: Path) -> str:
        """Store path as recorded in the document, relative when beside it."""
        if self.file_name is not None and store_path.parent == self.file_name.parent:
            return store_path.name
        return str(store_path)

    # --- Identity ---

    def new_instance(self) -> ArrayJsonFormat:
        return ArrayJsonFormat(threshold=self.policy.threshold)

    def identifier(self) -> str:
        return FORMAT_ID

    def name(self) -> str:
        return "Array JSON"

    def description(self) -> str:
        return (
            "JSON document of named numeric arrays. Arrays over the size "
            "threshold are stored in a sidecar HDF5 container."
        )

    def specification_url(self) -> str:
        return ""

    def file_extensions(self) -> list[str]:
        return ["ajson"]

    def mime_types(self) -> list[str]:
        return ["application/x-datanest-ajson+json"]
