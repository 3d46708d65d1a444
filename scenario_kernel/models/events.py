"""Modification events — what observers of a target receive."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ModParam(str, Enum):
    """How a setter should issue modifications for the change it makes."""
    NO_MOD = "no_mod"        # Issue nothing
    MOD_BLOCK = "mod_block"  # Issue, and mark the change as target-local
    NO_BLOCK = "no_block"    # Issue, without target-local marking
    DRY_RUN = "dry_run"      # Issue, but the data was already changed elsewhere


class ModificationKind(str, Enum):
    DATA = "data"
    STRUCTURE = "structure"


class ObjectiveSense(str, Enum):
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"
    UNDEFINED = "undefined"


class Modification(BaseModel):
    """A single change notification."""

    source: str                             # Identifier of the emitting target
    kind: ModificationKind = ModificationKind.DATA
    channel: int = 0
    detail: dict = {}
    issued_at: datetime = Field(default_factory=datetime.utcnow)
