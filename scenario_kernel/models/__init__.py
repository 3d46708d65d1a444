"""Scenario Kernel data models."""

from scenario_kernel.models.config import IntegerPolicy, MappingConfig
from scenario_kernel.models.events import (
    ModParam,
    Modification,
    ModificationKind,
    ObjectiveSense,
)
from scenario_kernel.models.index_space import (
    RANGE,
    SUBSET,
    IndexRange,
    IndexSpace,
    IndexSubset,
    index_range,
    parse_index_space,
    subset,
)
from scenario_kernel.models.mapping import DataMappingRecord, ElementKind
from scenario_kernel.models.wrapper import WrapperGroup

__all__ = [
    "DataMappingRecord",
    "ElementKind",
    "IndexRange",
    "IndexSpace",
    "IndexSubset",
    "IntegerPolicy",
    "MappingConfig",
    "ModParam",
    "Modification",
    "ModificationKind",
    "ObjectiveSense",
    "RANGE",
    "SUBSET",
    "WrapperGroup",
    "index_range",
    "parse_index_space",
    "subset",
]
