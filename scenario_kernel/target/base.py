"""
Target — base class for any model that scenario data can be injected into.

A target knows nothing about scenarios. It only exposes setter operations
(registered in the MethodRegistry) and the plumbing shared by every target:
a parent link, observers, modification forwarding and an explicit lifetime.
"""

import logging
from typing import Callable, List, Optional
from uuid import uuid4

from scenario_kernel.models.events import Modification, ObjectiveSense

logger = logging.getLogger(__name__)

Observer = Callable[[Modification], None]


class Target:
    """Base class for inner models."""

    type_name = "Target"

    def __init__(self, parent: Optional["Target"] = None):
        self.identifier = f"{self.type_name.lower()}_{uuid4().hex[:12]}"
        self._parent = parent
        self._observers: List[Observer] = []
        self._destroyed = False

    # --- Parent link ---

    @property
    def parent(self) -> Optional["Target"]:
        return self._parent

    def set_parent(self, parent: Optional["Target"]) -> None:
        self._parent = parent

    # --- Observers and modifications ---

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> bool:
        if observer in self._observers:
            self._observers.remove(observer)
            return True
        return False

    def anyone_there(self) -> bool:
        """True if some observer would receive a modification from this target."""
        if self._observers:
            return True
        return self._parent is not None and self._parent.anyone_there()

    def add_modification(self, mod: Modification, channel: int = 0) -> None:
        """Deliver `mod` to local observers, then pass it up to the parent."""
        for observer in list(self._observers):
            observer(mod)
        if self._parent is not None:
            self._parent.add_modification(mod, channel)

    # --- Lifetime ---

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        """Release the target. Calling it again does nothing."""
        if self._destroyed:
            return
        self._destroyed = True
        self.on_destroy()
        self._observers.clear()
        self._parent = None

    def on_destroy(self) -> None:
        """Hook for subclasses that hold resources."""
        pass

    # --- Queries ---

    def objective_sense(self) -> ObjectiveSense:
        return ObjectiveSense.UNDEFINED

    # --- Persistence ---

    def serialize(self) -> dict:
        return {"type": self.type_name}

    @classmethod
    def from_group(cls, group: dict, parent: Optional["Target"] = None, **context) -> "Target":
        return cls(parent=parent)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier})"
