"""Scenario Kernel errors.

None of these subclass ValueError, so they pass through pydantic validators
unchanged instead of being folded into a ValidationError.
"""


class ScenarioKernelError(Exception):
    """Base class for every error raised by the kernel."""
    pass


class InvalidRange(ScenarioKernelError):
    """Raised when a range is built with first > last."""
    pass


class SizeMismatch(ScenarioKernelError):
    """Raised when source and target index spaces do not have the same size."""
    pass


class UnresolvedOperation(ScenarioKernelError):
    """Raised when no registered setter matches a requested operation."""
    pass


class MalformedPersistedGroup(ScenarioKernelError):
    """Raised when a persisted group is structurally incomplete."""
    pass


class NonIntegralValue(ScenarioKernelError):
    """Raised when a non-integral scenario value targets an integer array."""
    pass
