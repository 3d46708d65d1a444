"""
Index Space — a set of non-negative positions.

Two shapes share one interface:
- IndexSubset: an explicit ascending list of positions.
- IndexRange: a half-open interval [first, last). A missing `last` means
  "to the end of the array" and is resolved against the array length when
  the positions are enumerated.
"""

from typing import Annotated, Iterator, Literal, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from scenario_kernel.errors import InvalidRange

SUBSET = "subset"
RANGE = "range"


class IndexSubset(BaseModel):
    """Explicit positions. Ascending order is guaranteed by the producer."""

    model_config = ConfigDict(frozen=True)

    shape: Literal["subset"] = SUBSET
    indices: Tuple[Annotated[int, Field(ge=0)], ...] = ()

    @property
    def is_bounded(self) -> bool:
        return True

    def size(self, bound: Optional[int] = None) -> int:
        return len(self.indices)

    def positions(self, bound: Optional[int] = None) -> Iterator[int]:
        return iter(self.indices)

    def to_array(self, bound: Optional[int] = None) -> np.ndarray:
        return np.asarray(self.indices, dtype=np.intp)


class IndexRange(BaseModel):
    """Contiguous positions [first, last). `last=None` is unbounded."""

    model_config = ConfigDict(frozen=True)

    shape: Literal["range"] = RANGE
    first: int = Field(default=0, ge=0)
    last: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "IndexRange":
        if self.last is not None and self.first > self.last:
            raise InvalidRange(
                f"Range [{self.first}, {self.last}) has first > last."
            )
        return self

    @property
    def is_bounded(self) -> bool:
        return self.last is not None

    def resolved_last(self, bound: Optional[int] = None) -> Optional[int]:
        """Upper end clamped to `bound`: min(last, bound)."""
        if bound is None:
            return self.last
        if self.last is None:
            return bound
        return min(self.last, bound)

    def size(self, bound: Optional[int] = None) -> Optional[int]:
        """
        Number of positions. An unbounded range has no size until a bound
        is supplied, so None is returned in that case.
        """
        last = self.resolved_last(bound)
        if last is None:
            return None
        return max(0, last - self.first)

    def positions(self, bound: Optional[int] = None) -> Iterator[int]:
        last = self.resolved_last(bound)
        if last is None:
            raise InvalidRange(
                f"Range [{self.first}, unbounded) needs a bound to be enumerated."
            )
        return iter(range(self.first, max(self.first, last)))

    def to_array(self, bound: Optional[int] = None) -> np.ndarray:
        last = self.resolved_last(bound)
        if last is None:
            raise InvalidRange(
                f"Range [{self.first}, unbounded) needs a bound to be enumerated."
            )
        return np.arange(self.first, max(self.first, last), dtype=np.intp)


IndexSpace = Annotated[Union[IndexSubset, IndexRange], Field(discriminator="shape")]

_index_space_adapter = TypeAdapter(IndexSpace)


def parse_index_space(data: dict) -> Union[IndexSubset, IndexRange]:
    """Build an Index Space from its serialized form."""
    return _index_space_adapter.validate_python(data)


def subset(*indices: int) -> IndexSubset:
    """Shorthand: subset(0, 3, 8)."""
    return IndexSubset(indices=tuple(indices))


def index_range(first: int = 0, last: Optional[int] = None) -> IndexRange:
    """Shorthand: index_range(2, 5) or index_range(2) for [2, end)."""
    return IndexRange(first=first, last=last)
