"""
Data Mapping — moves values from the scenario vector into one target array.

Behavioral Contract:
- The i-th position of the source space feeds the i-th position of the
  target space. Sizes are checked once, at construction.
- Every mapping reads the same full scenario vector by absolute position.
- The setter is resolved once (at construction or load) and kept; apply
  never consults the registry.
- Real scenario values are narrowed into integer targets according to the
  configured IntegerPolicy.
"""

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Union

import numpy as np
from pydantic import ValidationError

from scenario_kernel.errors import (
    MalformedPersistedGroup,
    NonIntegralValue,
    SizeMismatch,
    UnresolvedOperation,
)
from scenario_kernel.models.config import IntegerPolicy
from scenario_kernel.models.events import ModParam
from scenario_kernel.models.index_space import IndexRange, IndexSubset
from scenario_kernel.models.mapping import DataMappingRecord, ElementKind
from scenario_kernel.registry.methods import BoundSetter, MethodRegistry, method_registry

logger = logging.getLogger(__name__)

Space = Union[IndexSubset, IndexRange]


# int64 holds [-2**63, 2**63); both bounds are exact as doubles
_INT64_LIMIT = 2.0 ** 63


def as_scenario(scenario: Union[Sequence[float], Iterable[float]]) -> np.ndarray:
    """The scenario as a float64 array. An iterator is consumed once."""
    if isinstance(scenario, (np.ndarray, list, tuple)):
        return np.asarray(scenario, dtype=np.float64)
    return np.fromiter(scenario, dtype=np.float64)


def narrow(values: np.ndarray, element_kind: ElementKind, policy: IntegerPolicy) -> np.ndarray:
    """Convert real scenario values into the dtype of `element_kind`."""
    if element_kind is ElementKind.REAL:
        return values.astype(np.float64, copy=True)

    if policy is IntegerPolicy.REJECT:
        bad = ~np.isfinite(values) | (values != np.trunc(values))
        if np.any(bad):
            offending = values[bad][0]
            raise NonIntegralValue(
                f"Value {offending!r} cannot be written into an integer array."
            )
        integral = values
    elif policy is IntegerPolicy.TRUNCATE:
        integral = np.trunc(values)
    else:
        integral = np.rint(values)

    outside = ~np.isfinite(integral) | (integral >= _INT64_LIMIT) | (integral < -_INT64_LIMIT)
    if np.any(outside):
        offending = values[outside][0]
        raise NonIntegralValue(
            f"Value {offending!r} does not fit in a 64-bit integer array."
        )
    return integral.astype(np.int64)


def write_positions(array: np.ndarray, values: np.ndarray, space: Space) -> None:
    """
    Write `values` into `array` at the positions of `space`, in order.

    Helper for setter implementations: the space is resolved against the
    array length, so an unbounded range ends where the array ends.
    """
    positions = space.to_array(len(array))
    if len(positions) != len(values):
        raise SizeMismatch(
            f"{len(values)} values for {len(positions)} positions "
            f"of a length-{len(array)} array."
        )
    array[positions] = values


class DataMapping:
    """
    One piece of scenario data: source positions, target positions, and the
    setter that writes into the target.

    Build one with a registry-resolved setter through DataMapping.bind(), or
    pass any callable taking (values, space, issue_pmod, issue_amod).
    """

    def __init__(
        self,
        source: Space,
        target: Space,
        setter: Callable,
        element_kind: ElementKind = ElementKind.REAL,
        operation: Optional[str] = None,
        integer_policy: IntegerPolicy = IntegerPolicy.REJECT,
    ):
        source_size = source.size()
        target_size = target.size()
        if source_size is not None and target_size is not None and source_size != target_size:
            raise SizeMismatch(
                f"Source space has {source_size} positions, "
                f"target space has {target_size}."
            )

        self._source = source
        self._target = target
        self._setter = setter
        self._element_kind = ElementKind(element_kind)
        self._integer_policy = IntegerPolicy(integer_policy)
        if operation is None and isinstance(setter, BoundSetter):
            operation = setter.operation
        self._operation = operation
        # Bounded sources are enumerated once
        self._source_positions = source.to_array() if source.is_bounded else None

    @classmethod
    def bind(
        cls,
        target_instance,
        operation: str,
        source: Space,
        target: Space,
        element_kind: ElementKind = ElementKind.REAL,
        registry: Optional[MethodRegistry] = None,
        integer_policy: IntegerPolicy = IntegerPolicy.REJECT,
    ) -> "DataMapping":
        """Resolve `operation` against `target_instance` and build a mapping."""
        registry = registry or method_registry
        setter = registry.bind(target_instance, operation, element_kind, target.shape)
        return cls(
            source,
            target,
            setter,
            element_kind=element_kind,
            operation=operation,
            integer_policy=integer_policy,
        )

    @property
    def source(self) -> Space:
        return self._source

    @property
    def target(self) -> Space:
        return self._target

    @property
    def setter(self) -> Callable:
        return self._setter

    @property
    def element_kind(self) -> ElementKind:
        return self._element_kind

    @property
    def operation(self) -> Optional[str]:
        return self._operation

    @property
    def integer_policy(self) -> IntegerPolicy:
        return self._integer_policy

    @property
    def bound_target(self):
        """The target instance the setter is bound to, if known."""
        if isinstance(self._setter, BoundSetter):
            return self._setter.target
        return None

    def size(self) -> Optional[int]:
        size = self._source.size()
        return size if size is not None else self._target.size()

    def apply(
        self,
        scenario: Iterable[float],
        issue_pmod: ModParam = ModParam.NO_BLOCK,
        issue_amod: ModParam = ModParam.NO_BLOCK,
    ) -> None:
        """Read the source positions of `scenario` and hand them to the setter."""
        scenario = as_scenario(scenario)
        positions = self._source_positions
        if positions is None:
            positions = self._source.to_array(len(scenario))

        values = narrow(scenario[positions], self._element_kind, self._integer_policy)
        self._setter(values, self._target, issue_pmod, issue_amod)

    def rebound(self, target_instance, registry: Optional[MethodRegistry] = None) -> "DataMapping":
        """A copy of this mapping whose setter is resolved against `target_instance`."""
        if self._operation is None:
            raise UnresolvedOperation(
                "Mapping has no operation identifier and cannot be rebound."
            )
        return DataMapping.bind(
            target_instance,
            self._operation,
            self._source,
            self._target,
            element_kind=self._element_kind,
            registry=registry,
            integer_policy=self._integer_policy,
        )

    def to_record(self) -> DataMappingRecord:
        if self._operation is None:
            raise UnresolvedOperation(
                "Mapping has no operation identifier and cannot be serialized."
            )
        return DataMappingRecord(
            element_kind=self._element_kind,
            source=self._source,
            target=self._target,
            operation=self._operation,
        )

    @classmethod
    def from_record(
        cls,
        record: DataMappingRecord,
        reference_target,
        registry: Optional[MethodRegistry] = None,
        integer_policy: IntegerPolicy = IntegerPolicy.REJECT,
    ) -> "DataMapping":
        return cls.bind(
            reference_target,
            record.operation,
            record.source,
            record.target,
            element_kind=record.element_kind,
            registry=registry,
            integer_policy=integer_policy,
        )

    def __repr__(self) -> str:
        return (
            f"DataMapping({self._source!r} -> {self._target!r}, "
            f"{self._element_kind.value}, operation={self._operation!r})"
        )


def serialize_mappings(
    mappings: Iterable[DataMapping],
    target=None,
    registry: Optional[MethodRegistry] = None,
) -> List[dict]:
    """
    Serialize mappings into JSON-ready records. When a reference `target`
    is given, every operation must be resolvable against it, so that the
    records can be loaded back.
    """
    registry = registry or method_registry
    records = []
    for mapping in mappings:
        record = mapping.to_record()
        if target is not None:
            registry.resolve(
                type(target), record.operation, record.element_kind, record.target.shape
            )
        records.append(record.model_dump(mode="json"))
    return records


def deserialize_mappings(
    records: Iterable[Union[dict, DataMappingRecord]],
    reference_target,
    registry: Optional[MethodRegistry] = None,
    integer_policy: IntegerPolicy = IntegerPolicy.REJECT,
) -> List[DataMapping]:
    """
    Rebuild mappings against `reference_target`. Any record that cannot be
    parsed or resolved aborts the whole batch.
    """
    mappings = []
    for i, raw in enumerate(records):
        if isinstance(raw, DataMappingRecord):
            record = raw
        else:
            try:
                record = DataMappingRecord.model_validate(raw)
            except ValidationError as e:
                raise MalformedPersistedGroup(f"Data mapping record {i} is malformed: {e}") from e
        mappings.append(
            DataMapping.from_record(
                record, reference_target, registry=registry, integer_policy=integer_policy
            )
        )
    logger.debug("Deserialized %d data mappings", len(mappings))
    return mappings
