"""Mapping configuration."""

from enum import Enum

from pydantic import BaseModel

from scenario_kernel.models.events import ModParam


class IntegerPolicy(str, Enum):
    """How real scenario values are narrowed into integer arrays."""
    REJECT = "reject"       # Non-integral values raise NonIntegralValue
    TRUNCATE = "truncate"   # Toward zero
    ROUND = "round"         # Half to even


class MappingConfig(BaseModel):
    """Configuration for a StochasticWrapper and the mappings it builds."""

    integer_policy: IntegerPolicy = IntegerPolicy.REJECT
    default_issue_pmod: ModParam = ModParam.NO_BLOCK
    default_issue_amod: ModParam = ModParam.NO_BLOCK
    rebind_on_replace: bool = True
