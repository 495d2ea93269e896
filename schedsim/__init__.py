"""
Scheduling simulation engine.

Computes the execution timeline and per-process metrics of a process set
under FCFS, SJF, Priority and Round Robin scheduling.
"""

from .errors import InternalInvariantError, SchedulingError, ValidationError
from .service import handle_request, result_to_payload, run_simulation, simulate_request

__all__ = [
    "InternalInvariantError",
    "SchedulingError",
    "ValidationError",
    "handle_request",
    "result_to_payload",
    "run_simulation",
    "simulate_request",
]
