"""
Errors Module

Exception taxonomy for the grid world MDP. Every error derives from
``ValueError`` so callers that already guard against bad arguments with
``except ValueError`` keep working.
"""


class GridWorldError(ValueError):
    """Base class for all grid world errors."""


class ConfigurationError(GridWorldError):
    """Raised when a GridWorldConfig violates one of its invariants."""


class PreconditionViolation(GridWorldError):
    """Raised when an operation is called in a context it does not support."""


class InvalidStateError(GridWorldError):
    """Raised when a queried state is malformed or outside the grid."""


class InvalidActionError(GridWorldError):
    """Raised when a value cannot be interpreted as an Action."""
