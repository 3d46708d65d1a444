"""
Target factory — rebuilds targets from their serialized groups.

Target classes register under their `type_name`; a group names its type in
its "type" key.
"""

import logging
from typing import Dict, List, Optional, Type

from scenario_kernel.target.base import Target

logger = logging.getLogger(__name__)

_target_types: Dict[str, Type[Target]] = {}


def register_target_type(cls: Type[Target]) -> Type[Target]:
    """Class decorator: make `cls` buildable by new_target()."""
    _target_types[cls.type_name] = cls
    return cls


def registered_target_types() -> List[str]:
    return sorted(_target_types)


def new_target(group: dict, parent: Optional[Target] = None, **context) -> Optional[Target]:
    """
    Build a target from `group`. Returns None when the group does not name a
    registered type, leaving the caller to decide whether that is fatal.
    """
    type_name = group.get("type") if isinstance(group, dict) else None
    cls = _target_types.get(type_name) if type_name else None
    if cls is None:
        logger.warning("No target type registered for group type %r", type_name)
        return None
    return cls.from_group(group, parent=parent, **context)
