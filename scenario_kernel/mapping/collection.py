"""
Mapping Collection — the ordered set of Data Mappings owned by a wrapper.

Insertion order is application order. Mappings writing overlapping target
positions are not rejected: the later mapping wins. Overlapping source
positions simply read the same scenario value more than once.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from scenario_kernel.mapping.descriptor import (
    DataMapping,
    as_scenario,
    deserialize_mappings,
    serialize_mappings,
)
from scenario_kernel.models.config import IntegerPolicy
from scenario_kernel.models.events import ModParam
from scenario_kernel.registry.methods import MethodRegistry

logger = logging.getLogger(__name__)


class MappingCollection:
    """
    Ordered collection of DataMapping. Replacement swaps the whole tuple,
    so a reader sees either the old mappings or the new ones.
    """

    def __init__(self, mappings: Optional[Iterable[DataMapping]] = None):
        self._mappings: Tuple[DataMapping, ...] = tuple(mappings or ())

    def __len__(self) -> int:
        return len(self._mappings)

    def __iter__(self) -> Iterator[DataMapping]:
        return iter(self._mappings)

    def __getitem__(self, index: int) -> DataMapping:
        return self._mappings[index]

    @property
    def mappings(self) -> Tuple[DataMapping, ...]:
        return self._mappings

    def add(self, mapping: DataMapping) -> None:
        """Append a mapping. Only later apply calls see it."""
        self._mappings = self._mappings + (mapping,)

    def replace_all(self, mappings: Iterable[DataMapping]) -> None:
        """Replace every mapping at once."""
        new_mappings = tuple(mappings)
        self._mappings = new_mappings
        logger.debug("Replaced mapping collection with %d mappings", len(new_mappings))

    def clear(self) -> None:
        self._mappings = ()

    def apply(
        self,
        scenario: Iterable[float],
        issue_pmod: ModParam = ModParam.NO_BLOCK,
        issue_amod: ModParam = ModParam.NO_BLOCK,
    ) -> int:
        """
        Apply every mapping, in order, to the same scenario vector.
        Returns how many mappings were applied.
        """
        scenario = as_scenario(scenario)
        mappings = self._mappings
        for mapping in mappings:
            mapping.apply(scenario, issue_pmod, issue_amod)
        logger.debug(
            "Applied %d mappings to a scenario of length %d", len(mappings), len(scenario)
        )
        return len(mappings)

    def serialize(self, target=None, registry: Optional[MethodRegistry] = None) -> List[dict]:
        return serialize_mappings(self._mappings, target, registry=registry)

    @classmethod
    def deserialize(
        cls,
        records: Iterable[dict],
        reference_target,
        registry: Optional[MethodRegistry] = None,
        integer_policy: IntegerPolicy = IntegerPolicy.REJECT,
    ) -> "MappingCollection":
        return cls(
            deserialize_mappings(
                records, reference_target, registry=registry, integer_policy=integer_policy
            )
        )
