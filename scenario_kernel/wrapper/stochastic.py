"""
Stochastic Wrapper — turns any Target into its stochastic version.

The wrapper owns at most one inner target and an ordered collection of
Data Mappings. apply(scenario) writes one realized scenario vector into the
inner target's arrays; the inner target needs no knowledge of scenarios.

Behavioral Contract:
- States: Empty (no inner target) and Bound. apply() in Empty is a no-op.
- replace_target() destroys the previous inner target by default, or
  releases it to the caller when destroy_previous=False.
- Every externally visible change produces at most one structural
  Modification, and only when someone is subscribed.
- Deserialization fails fast: a missing setter or an unreadable inner
  target aborts the load and nothing partially built is returned.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from scenario_kernel.errors import MalformedPersistedGroup
from scenario_kernel.mapping.collection import MappingCollection
from scenario_kernel.mapping.descriptor import DataMapping, as_scenario, deserialize_mappings
from scenario_kernel.models.config import MappingConfig
from scenario_kernel.models.events import (
    ModParam,
    Modification,
    ModificationKind,
    ObjectiveSense,
)
from scenario_kernel.models.wrapper import WrapperGroup
from scenario_kernel.registry.methods import MethodRegistry, method_registry
from scenario_kernel.target.base import Target
from scenario_kernel.target.factory import new_target, register_target_type

logger = logging.getLogger(__name__)


@register_target_type
class StochasticWrapper(Target):
    """A Target whose inner target receives its data from scenario vectors."""

    type_name = "StochasticWrapper"

    def __init__(
        self,
        parent: Optional[Target] = None,
        inner: Optional[Target] = None,
        mappings: Optional[Iterable[DataMapping]] = None,
        config: Optional[MappingConfig] = None,
        registry: Optional[MethodRegistry] = None,
    ):
        super().__init__(parent)
        self.config = config or MappingConfig()
        self.registry = registry or method_registry
        self._inner: Optional[Target] = None
        # Target the mappings were last resolved against; survives the Empty state
        self._mapping_target: Optional[Target] = inner
        self._mappings = MappingCollection(mappings)
        self._applying = False
        self._pending = False
        if inner is not None:
            self._inner = inner
            inner.set_parent(self)

    # --- Inner target ---

    @property
    def inner(self) -> Optional[Target]:
        return self._inner

    def replace_target(
        self, target: Optional[Target], destroy_previous: bool = True
    ) -> Optional[Target]:
        """
        Install `target` as the inner target (None empties the wrapper).

        The previous inner target is destroyed, or, with
        destroy_previous=False, detached and returned to the caller.
        Re-supplying the current inner target changes nothing.
        """
        previous = self._inner
        if target is not None and target is previous:
            return None

        # Resolve everything that can fail before any state changes
        anchor = previous if previous is not None else self._mapping_target
        mappings = self._rebound_mappings(anchor, target)

        released = None
        if previous is not None:
            if destroy_previous:
                previous.destroy()
            else:
                previous.set_parent(None)
                released = previous

        self._inner = target
        if target is not None:
            target.set_parent(self)
            self._mapping_target = target
        if mappings is not None:
            self._mappings.replace_all(mappings)

        logger.info(
            "%s: inner target %s -> %s", self.identifier, previous, target
        )
        if self.anyone_there():
            self._emit_structure_change({"reason": "inner_target_replaced"})
        return released

    def _rebound_mappings(
        self, anchor: Optional[Target], target: Optional[Target]
    ) -> Optional[List[DataMapping]]:
        """
        Mappings bound to `anchor`, or to any destroyed target, re-resolved
        against `target`.
        """
        if target is None or not self.config.rebind_on_replace:
            return None

        rebound = []
        changed = False
        for mapping in self._mappings:
            bound = mapping.bound_target
            stale = bound is anchor or getattr(bound, "destroyed", False)
            if bound is not None and bound is not target and stale:
                rebound.append(mapping.rebound(target, registry=self.registry))
                changed = True
            else:
                if bound is None:
                    logger.warning(
                        "%s: mapping %r has no bound target and was not rebound",
                        self.identifier, mapping,
                    )
                rebound.append(mapping)
        return rebound if changed else None

    # --- Mappings ---

    @property
    def data_mappings(self) -> Tuple[DataMapping, ...]:
        return self._mappings.mappings

    def set_data_mappings(self, mappings: Iterable[DataMapping]) -> None:
        """Replace every data mapping."""
        self._mappings.replace_all(mappings)
        logger.info("%s: %d data mappings set", self.identifier, len(self._mappings))

    def add_data_mapping(self, mapping: DataMapping) -> None:
        self._mappings.add(mapping)

    # --- Scenario injection ---

    def apply(
        self,
        scenario: Iterable[float],
        issue_pmod: Optional[ModParam] = None,
        issue_amod: Optional[ModParam] = None,
    ) -> int:
        """
        Set the data of the inner target from `scenario`.

        Modifications raised by the inner target while the mappings run are
        collapsed into a single structural Modification of this wrapper.
        If a mapping fails, the mappings before it stay applied, the
        notification still covers them, and the error propagates.
        Returns the number of mappings applied.
        """
        if self._inner is None:
            logger.debug("%s: no inner target, scenario ignored", self.identifier)
            return 0

        issue_pmod = ModParam(issue_pmod or self.config.default_issue_pmod)
        issue_amod = ModParam(issue_amod or self.config.default_issue_amod)
        scenario = as_scenario(scenario)

        self._applying = True
        self._pending = False
        mappings = self._mappings.mappings
        applied = 0
        try:
            for mapping in mappings:
                mapping.apply(scenario, issue_pmod, issue_amod)
                applied += 1
        except Exception:
            logger.warning(
                "%s: scenario stopped after %d of %d mappings",
                self.identifier, applied, len(mappings),
            )
            raise
        finally:
            # Writes made before a failure are still reported
            self._applying = False
            pending, self._pending = self._pending, False
            wants_mod = not (issue_pmod is ModParam.NO_MOD and issue_amod is ModParam.NO_MOD)
            if (applied or pending) and wants_mod and self.anyone_there():
                self._emit_structure_change({"reason": "scenario_applied", "mappings": applied})
        return applied

    # --- Modifications ---

    def add_modification(self, mod: Modification, channel: int = 0) -> None:
        """
        Any modification reaching the wrapper is replaced by one structural
        Modification about the wrapper itself. During apply() they are held
        back and reported once at the end. The replacement always goes out
        on the default channel.
        """
        if self._applying:
            self._pending = True
            return
        if self.anyone_there():
            self._emit_structure_change({"reason": "inner_modification", "from": mod.source})

    def _emit_structure_change(self, detail: dict) -> None:
        mod = Modification(
            source=self.identifier,
            kind=ModificationKind.STRUCTURE,
            detail=detail,
        )
        super().add_modification(mod)

    # --- Queries ---

    def objective_sense(self) -> ObjectiveSense:
        if self._inner is not None:
            return self._inner.objective_sense()
        return ObjectiveSense.UNDEFINED

    # --- Lifetime ---

    def on_destroy(self) -> None:
        if self._inner is not None:
            self._inner.destroy()
            self._inner = None
        self._mappings.clear()

    # --- Persistence ---

    def serialize(self) -> dict:
        """
        Group layout:
        - "type": "StochasticWrapper"
        - "Block": the inner target group, when there is an inner target
        - "NumberDataMappings" and "DataMappings": the mapping records
        """
        group = {"type": self.type_name}
        if self._inner is not None:
            group["Block"] = self._inner.serialize()
        records = self._mappings.serialize(self._inner, registry=self.registry)
        group["NumberDataMappings"] = len(records)
        if records:
            group["DataMappings"] = records
        return group

    @classmethod
    def deserialize(
        cls,
        group: dict,
        parent: Optional[Target] = None,
        inner: Optional[Target] = None,
        registry: Optional[MethodRegistry] = None,
        config: Optional[MappingConfig] = None,
    ) -> "StochasticWrapper":
        """
        Build a wrapper from `group`. When the group has no "Block", `inner`
        (if given) becomes the inner target and the mappings resolve
        against it.
        """
        try:
            layout = WrapperGroup.model_validate(group)
        except ValidationError as e:
            raise MalformedPersistedGroup(f"Invalid StochasticWrapper group: {e}") from e

        if layout.type != cls.type_name:
            raise MalformedPersistedGroup(
                f"Group of type {layout.type!r} is not a {cls.type_name}."
            )
        if layout.number_data_mappings != len(layout.data_mappings):
            raise MalformedPersistedGroup(
                f"NumberDataMappings is {layout.number_data_mappings} but "
                f"{len(layout.data_mappings)} records are present."
            )

        wrapper = cls(parent=parent, config=config, registry=registry)
        built = None
        try:
            if layout.block is not None:
                built = new_target(
                    layout.block, parent=wrapper,
                    registry=wrapper.registry, config=wrapper.config,
                )
                if built is None:
                    raise MalformedPersistedGroup(
                        "The 'Block' group is present but its description is incomplete."
                    )
                inner = built
            if inner is not None:
                wrapper.replace_target(inner)

            if layout.data_mappings:
                if wrapper.inner is None:
                    raise MalformedPersistedGroup(
                        "Data mappings are present but there is no inner target "
                        "to resolve them against."
                    )
                wrapper.set_data_mappings(
                    deserialize_mappings(
                        layout.data_mappings,
                        wrapper.inner,
                        registry=wrapper.registry,
                        integer_policy=wrapper.config.integer_policy,
                    )
                )
        except Exception:
            if built is not None:
                built.destroy()
            elif inner is not None:
                inner.set_parent(None)
            raise

        logger.info(
            "Deserialized %s with %d data mappings", wrapper.identifier, len(wrapper.data_mappings)
        )
        return wrapper

    @classmethod
    def from_group(cls, group: dict, parent: Optional[Target] = None, **context) -> "StochasticWrapper":
        return cls.deserialize(
            group,
            parent=parent,
            registry=context.get("registry"),
            config=context.get("config"),
        )

    def __str__(self) -> str:
        if self._inner is None:
            return "StochasticWrapper with no inner target"
        return f"StochasticWrapper with the inner target {self._inner}"
