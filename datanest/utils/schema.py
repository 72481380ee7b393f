"""Pydantic models for datanest configuration and catalog data."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from datanest.storage.format import DEFAULT_THRESHOLD

THRESHOLD_ENV = "DATANEST_THRESHOLD"
OVERWRITE_ENV = "DATANEST_OVERWRITE"


class StoreConfig(BaseModel):
    """Runtime configuration for a DatasetStore."""

    threshold: int = Field(default=DEFAULT_THRESHOLD, ge=0)  # bytes
    overwrite: bool = False  # replace existing datasets instead of failing

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Build a config from DATANEST_* environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: dict[str, Any] = {}
        if THRESHOLD_ENV in os.environ:
            values["threshold"] = os.environ[THRESHOLD_ENV]
        if OVERWRITE_ENV in os.environ:
            values["overwrite"] = os.environ[OVERWRITE_ENV]
        values.update(overrides)
        return cls.model_validate(values)


class DatasetInfo(BaseModel):
    """Catalog entry for a single stored dataset."""

    path: str
    dims: list[int]
    dtype: str
    nbytes: int

    @field_validator("dims", mode="before")
    @classmethod
    def coerce_dims(cls, v: Any) -> list[int]:
        if isinstance(v, tuple):
            return [int(d) for d in v]
        return v

    @property
    def rank(self) -> int:
        return len(self.dims)


class StoreSummary(BaseModel):
    """Snapshot of an open container's contents."""

    path: str
    mode: str
    datasets: list[DatasetInfo] = Field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(d.nbytes for d in self.datasets)

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> StoreSummary:
        return cls.model_validate_json(data)
