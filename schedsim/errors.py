from __future__ import annotations


class SchedulingError(Exception):
    """Base class for every error raised by the simulation engine."""


class ValidationError(SchedulingError, ValueError):
    """
    Malformed or inconsistent input (duplicate id, non-positive burst or
    quantum, missing field required by the chosen algorithm).
    """


class InternalInvariantError(SchedulingError, RuntimeError):
    """
    A simulator invariant was broken. This is a defect, never a recoverable
    condition.
    """
