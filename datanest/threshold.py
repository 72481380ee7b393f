"""Size threshold policy for deciding when an array is offloaded.

Callers inline arrays at or below the threshold into their own
representation and write larger ones to a datanest container. The policy
never looks at storage state.
"""

from __future__ import annotations

from typing import Any, Sequence, overload

import numpy as np

from datanest.storage.format import DEFAULT_THRESHOLD, ELEMENT_SIZE


class ThresholdPolicy:
    """Strict byte-count comparison against a mutable threshold.

    Args:
        threshold: Cutoff in bytes. Sizes strictly greater exceed it.
    """

    def __init__(self, threshold: int = DEFAULT_THRESHOLD) -> None:
        self._threshold = 0
        self.set_threshold(threshold)

    def set_threshold(self, nbytes: int) -> None:
        if nbytes < 0:
            raise ValueError(f"Threshold must be non-negative, got {nbytes}")
        self._threshold = int(nbytes)

    @property
    def threshold(self) -> int:
        return self._threshold

    @overload
    def exceeds_threshold(self, data: int) -> bool: ...

    @overload
    def exceeds_threshold(self, data: np.ndarray) -> bool: ...

    @overload
    def exceeds_threshold(self, data: Sequence[float]) -> bool: ...

    def exceeds_threshold(self, data: Any) -> bool:
        """Check whether data is larger than the threshold.

        data may be a byte count, a matrix (rows * cols doubles, as an
        ndarray or nested lists) or a flat sequence of values (len
        doubles). Element size is always that of a double, whatever the
        input dtype.
        """
        if isinstance(data, (int, np.integer)) and not isinstance(data, bool):
            return int(data) > self._threshold
        if isinstance(data, np.ndarray):
            return self.exceeds_threshold(int(data.size) * ELEMENT_SIZE)
        if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
            # Nested sequences count every element, as write_matrix stores them
            try:
                count = np.asarray(data, dtype=np.float64).size
            except (TypeError, ValueError) as e:
                raise TypeError(f"Cannot size sequence: {e}") from e
            return self.exceeds_threshold(int(count) * ELEMENT_SIZE)
        raise TypeError(
            f"Cannot size {type(data).__name__}. Use a byte count, ndarray or sequence."
        )

    def __repr__(self) -> str:
        return f"ThresholdPolicy(threshold={self._threshold})"
