from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import List, Tuple

from .errors import ValidationError
from .models import (
    IDLE_ID,
    AlgorithmConfig,
    FCFSConfig,
    PriorityConfig,
    ProcessSpec,
    RoundRobinConfig,
    SJFConfig,
    is_int,
)

logger = logging.getLogger(__name__)

ALGORITHM_NAMES = ("FCFS", "SJF", "RR", "Priority")


def parse_config(raw: Mapping) -> AlgorithmConfig:
    """
    Build the algorithm variant named by ``raw["algorithm"]``, carrying only
    the parameters that variant uses.
    """
    algorithm = raw.get("algorithm")
    if algorithm not in ALGORITHM_NAMES:
        raise ValidationError(
            f"Unknown algorithm {algorithm!r} (expected one of: {', '.join(ALGORITHM_NAMES)})"
        )

    preemptive = raw.get("isPreemptive", False)
    if preemptive is None:
        preemptive = False
    if not isinstance(preemptive, bool):
        raise ValidationError(f"isPreemptive must be a boolean, got {preemptive!r}")

    quantum = raw.get("timeQuantum")
    if quantum is not None and not is_int(quantum):
        raise ValidationError(f"timeQuantum must be an integer, got {quantum!r}")

    if algorithm == "FCFS":
        return FCFSConfig()
    if algorithm == "SJF":
        return SJFConfig(preemptive=preemptive)
    if algorithm == "Priority":
        return PriorityConfig(preemptive=preemptive)

    if quantum is None:
        raise ValidationError("timeQuantum is required for Round Robin")
    return RoundRobinConfig(time_quantum=quantum)


def parse_processes(raw_processes, config: AlgorithmConfig) -> Tuple[ProcessSpec, ...]:
    if not isinstance(raw_processes, list) or not raw_processes:
        raise ValidationError("processes must be a non-empty list")

    needs_priority = isinstance(config, PriorityConfig)
    seen: set[str] = set()
    specs: List[ProcessSpec] = []

    for position, entry in enumerate(raw_processes, start=1):
        if not isinstance(entry, Mapping):
            raise ValidationError(f"Process #{position} must be an object, got {entry!r}")

        for key in ("id", "arrivalTime", "burstTime"):
            if entry.get(key) is None:
                raise ValidationError(f"Process #{position} is missing {key}")

        pid = entry["id"]
        priority = entry.get("priority")
        if needs_priority and priority is None:
            raise ValidationError(f"Process {pid!r}: priority is required for Priority scheduling")

        spec = ProcessSpec(
            id=pid,
            arrival_time=entry["arrivalTime"],
            burst_time=entry["burstTime"],
            priority=priority,
        )

        if spec.id == IDLE_ID:
            raise ValidationError(f"Process id {IDLE_ID!r} is reserved for idle time")
        if spec.id in seen:
            raise ValidationError(f"Duplicate process id {spec.id!r}")
        seen.add(spec.id)
        specs.append(spec)

    return tuple(specs)


def validate_request(raw) -> Tuple[Tuple[ProcessSpec, ...], AlgorithmConfig]:
    """
    Validate a raw request mapping and return its normalized processes and
    algorithm configuration. Raises ValidationError naming the violated rule.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Request must be an object")

    config = parse_config(raw)
    processes = parse_processes(raw.get("processes"), config)

    quantum = raw.get("timeQuantum")
    if quantum is not None and not isinstance(config, RoundRobinConfig):
        logger.debug("Ignoring timeQuantum=%r for %s", quantum, config.algorithm)

    return processes, config

