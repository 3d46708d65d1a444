"""Data Mapping models — element kinds and the persisted mapping record."""

from enum import Enum

import numpy as np
from pydantic import BaseModel

from scenario_kernel.models.index_space import IndexSpace


class ElementKind(str, Enum):
    """Scalar type of the target array a mapping writes into."""
    INTEGER = "int"
    REAL = "double"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(np.int64) if self is ElementKind.INTEGER else np.dtype(np.float64)


class DataMappingRecord(BaseModel):
    """
    Persisted form of one Data Mapping.

    The setter itself is never stored: `operation` plus the element kind and
    the shape of `target` are enough to resolve it again against the
    reference target on load.
    """

    element_kind: ElementKind
    source: IndexSpace
    target: IndexSpace
    operation: str
