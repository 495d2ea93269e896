from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import List, Optional, Tuple, Union

from .errors import ValidationError

IDLE_ID = "IDLE"


def is_int(value) -> bool:
    # bool is an int subclass but never a valid time or priority
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class ProcessSpec:
    id: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError(f"Process id must be a non-empty string, got {self.id!r}")
        if not is_int(self.arrival_time) or self.arrival_time < 0:
            raise ValidationError(
                f"Process {self.id}: arrivalTime must be an integer >= 0, got {self.arrival_time!r}"
            )
        if not is_int(self.burst_time) or self.burst_time < 1:
            raise ValidationError(
                f"Process {self.id}: burstTime must be an integer >= 1, got {self.burst_time!r}"
            )
        if self.priority is not None and not is_int(self.priority):
            raise ValidationError(f"Process {self.id}: priority must be an integer, got {self.priority!r}")


@dataclass(frozen=True)
class FCFSConfig:
    algorithm = "FCFS"

    @property
    def label(self) -> str:
        return "FCFS"


@dataclass(frozen=True)
class SJFConfig:
    algorithm = "SJF"

    preemptive: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.preemptive, bool):
            raise ValidationError(f"isPreemptive must be a boolean, got {self.preemptive!r}")

    @property
    def label(self) -> str:
        return "SJF (preemptive)" if self.preemptive else "SJF (non-preemptive)"


@dataclass(frozen=True)
class PriorityConfig:
    algorithm = "Priority"

    preemptive: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.preemptive, bool):
            raise ValidationError(f"isPreemptive must be a boolean, got {self.preemptive!r}")

    @property
    def label(self) -> str:
        return "Priority (preemptive)" if self.preemptive else "Priority (non-preemptive)"


@dataclass(frozen=True)
class RoundRobinConfig:
    algorithm = "RR"

    time_quantum: int

    def __post_init__(self) -> None:
        if not is_int(self.time_quantum) or self.time_quantum < 1:
            raise ValidationError(f"timeQuantum must be an integer >= 1, got {self.time_quantum!r}")

    @property
    def label(self) -> str:
        return f"Round Robin (q={self.time_quantum})"


AlgorithmConfig = Union[FCFSConfig, SJFConfig, PriorityConfig, RoundRobinConfig]


class ProcessStatus(Enum):
    PENDING = "pending"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class ProcessRuntimeState:
    """
    Mutable bookkeeping for one process during a single simulation run.
    """

    spec: ProcessSpec
    index: int
    remaining_time: int
    status: ProcessStatus = ProcessStatus.PENDING
    first_dispatch_time: Optional[int] = None
    completion_time: Optional[int] = None

    @classmethod
    def from_spec(cls, spec: ProcessSpec, index: int) -> "ProcessRuntimeState":
        return cls(spec=spec, index=index, remaining_time=spec.burst_time)

    @property
    def pid(self) -> str:
        return self.spec.id


@dataclass(frozen=True)
class DispatchEvent:
    """
    One interval of CPU time handed out by the simulator. ``pid`` is None
    while the CPU is idle.
    """

    pid: Optional[str]
    start_time: int
    end_time: int


@dataclass(frozen=True)
class TimelineSegment:
    """
    One contiguous slice of the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def is_idle(self) -> bool:
        return self.pid == IDLE_ID

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class ProcessResult:
    pid: str
    arrival_time: int
    burst_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int
    completion_time: int
    priority: Optional[int] = None


@dataclass(frozen=True)
class SystemMetrics:
    makespan: int
    cpu_busy_time: int
    idle_time: int
    throughput: Fraction
    cpu_utilization: Fraction
    context_switches: int = 0


@dataclass
class SimulationRun:
    events: List[DispatchEvent] = field(default_factory=list)
    states: List[ProcessRuntimeState] = field(default_factory=list)


@dataclass(frozen=True)
class SimulationResult:
    config: AlgorithmConfig
    timeline: Tuple[TimelineSegment, ...]
    processes: Tuple[ProcessResult, ...]
    average_waiting_time: Fraction
    average_turnaround_time: Fraction
    average_response_time: Fraction
    system: SystemMetrics
