"""Errors raised by the experimentation engine."""


class ExperimentError(Exception):
    """Base class for experimentation failures."""


class ValidationError(ExperimentError):
    """Experiment definition is invalid."""


class NotFoundError(ExperimentError):
    """Experiment does not exist."""


class InvalidStateError(ExperimentError):
    """Experiment status does not allow the operation."""


class TargetingError(ExperimentError):
    """User context does not satisfy the experiment's targeting rules."""


class NotAssignedError(ExperimentError):
    """User has no assignment for the experiment."""
