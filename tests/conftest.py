"""Shared fixtures: an instrumented target with one integer and one real array."""

import numpy as np
import pytest

from scenario_kernel.mapping.descriptor import write_positions
from scenario_kernel.models.events import ModParam, Modification, ObjectiveSense
from scenario_kernel.models.index_space import RANGE, SUBSET
from scenario_kernel.models.mapping import ElementKind
from scenario_kernel.registry.methods import MethodRegistry, method_registry
from scenario_kernel.target.base import Target
from scenario_kernel.target.factory import register_target_type

SET_DATA = "DummyTarget::set_data"


@register_target_type
class DummyTarget(Target):
    """Integer data starts as 0..n-1, real data as 0.0..m-1.0."""

    type_name = "DummyTarget"

    def __init__(
        self,
        int_size: int = 0,
        dbl_size: int = 0,
        parent=None,
        sense: ObjectiveSense = ObjectiveSense.MINIMIZE,
    ):
        super().__init__(parent)
        self.int_data = np.arange(int_size, dtype=np.int64)
        self.dbl_data = np.arange(dbl_size, dtype=np.float64)
        self.sense = sense
        self.destroy_count = 0
        self.writes = []

    def set_int_data(self, values, space, issue_pmod=ModParam.NO_BLOCK, issue_amod=ModParam.NO_BLOCK):
        write_positions(self.int_data, values, space)
        self._written("int_data", issue_pmod)

    def set_dbl_data(self, values, space, issue_pmod=ModParam.NO_BLOCK, issue_amod=ModParam.NO_BLOCK):
        write_positions(self.dbl_data, values, space)
        self._written("dbl_data", issue_pmod)

    def _written(self, array_name: str, issue_pmod: ModParam) -> None:
        self.writes.append(array_name)
        if issue_pmod is not ModParam.NO_MOD and self.anyone_there():
            self.add_modification(Modification(source=self.identifier, detail={"array": array_name}))

    def on_destroy(self) -> None:
        self.destroy_count += 1

    def objective_sense(self) -> ObjectiveSense:
        return self.sense

    def serialize(self) -> dict:
        return {
            "type": self.type_name,
            "sense": self.sense.value,
            "int_data": self.int_data.tolist(),
            "dbl_data": self.dbl_data.tolist(),
        }

    @classmethod
    def from_group(cls, group: dict, parent=None, **context) -> "DummyTarget":
        target = cls(parent=parent, sense=ObjectiveSense(group.get("sense", "minimize")))
        target.int_data = np.asarray(group.get("int_data", []), dtype=np.int64)
        target.dbl_data = np.asarray(group.get("dbl_data", []), dtype=np.float64)
        return target


class SubDummyTarget(DummyTarget):
    type_name = "SubDummyTarget"


def register_dummy_setters(registry: MethodRegistry) -> None:
    for shape in (SUBSET, RANGE):
        registry.register(DummyTarget, SET_DATA, ElementKind.INTEGER, shape, DummyTarget.set_int_data)
        registry.register(DummyTarget, SET_DATA, ElementKind.REAL, shape, DummyTarget.set_dbl_data)


# Targets rebuilt through the factory resolve against the default registry
register_dummy_setters(method_registry)


@pytest.fixture
def registry():
    """A fresh registry holding only the DummyTarget setters."""
    r = MethodRegistry()
    register_dummy_setters(r)
    return r


@pytest.fixture
def make_target():
    def _make(int_size: int = 10, dbl_size: int = 5, **kwargs) -> DummyTarget:
        return DummyTarget(int_size, dbl_size, **kwargs)
    return _make


@pytest.fixture
def make_subtarget():
    def _make(int_size: int = 10, dbl_size: int = 5) -> SubDummyTarget:
        return SubDummyTarget(int_size, dbl_size)
    return _make


@pytest.fixture
def set_data():
    return SET_DATA
