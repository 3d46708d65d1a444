"""
Method Binding Registry — resolves named setter operations on target types.

Each target type registers the operations that update its internal arrays,
keyed by (target type name, operation name, element kind, index space shape).
Mappings query the registry when they are built or loaded and keep the
resolved setter; the registry is never consulted during apply.

A registered method is called as:

    method(target, values, space, issue_pmod, issue_amod)

where `values` is a numpy buffer holding one value per position of `space`.
"""

import logging
from typing import Callable, Dict, List, Tuple, Union

from scenario_kernel.errors import UnresolvedOperation
from scenario_kernel.models.events import ModParam
from scenario_kernel.models.index_space import RANGE, SUBSET
from scenario_kernel.models.mapping import ElementKind

logger = logging.getLogger(__name__)

SetterKey = Tuple[str, str, ElementKind, str]


def _type_name(target_type: Union[type, str]) -> str:
    return target_type if isinstance(target_type, str) else target_type.__name__


class BoundSetter:
    """A registered method bound to one target instance."""

    def __init__(
        self,
        target,
        method: Callable,
        operation: str,
        element_kind: ElementKind,
        shape: str,
    ):
        self.target = target
        self.method = method
        self.operation = operation
        self.element_kind = element_kind
        self.shape = shape

    def __call__(
        self,
        values,
        space,
        issue_pmod: ModParam = ModParam.NO_BLOCK,
        issue_amod: ModParam = ModParam.NO_BLOCK,
    ) -> None:
        self.method(self.target, values, space, issue_pmod, issue_amod)

    def __repr__(self) -> str:
        return (
            f"BoundSetter({self.operation!r}, {self.element_kind.value}, "
            f"{self.shape}, target={type(self.target).__name__})"
        )


class MethodRegistry:
    """
    In-memory registry of setter operations.
    One process-wide instance (`method_registry`) is the default everywhere.
    """

    def __init__(self):
        self._methods: Dict[SetterKey, Callable] = {}

    def register(
        self,
        target_type: Union[type, str],
        operation: str,
        element_kind: ElementKind,
        shape: str,
        method: Callable,
    ) -> None:
        """Register `method` as `operation` for one element kind and shape."""
        if shape not in (SUBSET, RANGE):
            raise ValueError(f"Unknown index space shape: {shape}")
        key = (_type_name(target_type), operation, ElementKind(element_kind), shape)
        if key in self._methods:
            logger.warning("Replacing registered setter %s", key)
        self._methods[key] = method

    def resolve(
        self,
        target_type: Union[type, str],
        operation: str,
        element_kind: ElementKind,
        shape: str,
    ) -> Callable:
        """
        Find the setter for `operation`. When given a class, its MRO is
        searched so subclasses inherit the setters of their bases.
        """
        element_kind = ElementKind(element_kind)
        if isinstance(target_type, str):
            candidates = [target_type]
        else:
            candidates = [klass.__name__ for klass in target_type.__mro__]

        for name in candidates:
            method = self._methods.get((name, operation, element_kind, shape))
            if method is not None:
                return method

        raise UnresolvedOperation(
            f"No setter {operation!r} for {_type_name(target_type)} "
            f"with element kind {element_kind.value} and {shape} index space."
        )

    def bind(
        self,
        target,
        operation: str,
        element_kind: ElementKind,
        shape: str,
    ) -> BoundSetter:
        """Resolve `operation` against the type of `target` and bind it."""
        method = self.resolve(type(target), operation, element_kind, shape)
        return BoundSetter(target, method, operation, ElementKind(element_kind), shape)

    def is_registered(
        self,
        target_type: Union[type, str],
        operation: str,
        element_kind: ElementKind,
        shape: str,
    ) -> bool:
        try:
            self.resolve(target_type, operation, element_kind, shape)
        except UnresolvedOperation:
            return False
        return True

    def registered(self) -> List[SetterKey]:
        """All registered keys."""
        return list(self._methods)


method_registry = MethodRegistry()
