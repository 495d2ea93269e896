from __future__ import annotations

from fractions import Fraction
from typing import Dict, List, Sequence

from .errors import InternalInvariantError
from .models import ProcessResult, ProcessRuntimeState, SystemMetrics, TimelineSegment


def compute_process_results(states: Sequence[ProcessRuntimeState]) -> List[ProcessResult]:
    """
    Derive waiting, turnaround and response times from the final runtime
    state of each process. Results keep the input order.
    """
    results: List[ProcessResult] = []

    for state in sorted(states, key=lambda s: s.index):
        spec = state.spec
        if state.completion_time is None or state.first_dispatch_time is None:
            raise InternalInvariantError(f"{spec.id} never completed")
        if state.remaining_time != 0:
            raise InternalInvariantError(f"{spec.id} finished with {state.remaining_time} time units left")

        turnaround_time = state.completion_time - spec.arrival_time
        waiting_time = turnaround_time - spec.burst_time
        response_time = state.first_dispatch_time - spec.arrival_time

        if min(turnaround_time, waiting_time, response_time) < 0:
            raise InternalInvariantError(
                f"{spec.id} has negative metrics: turnaround={turnaround_time}, "
                f"waiting={waiting_time}, response={response_time}"
            )

        results.append(
            ProcessResult(
                pid=spec.id,
                arrival_time=spec.arrival_time,
                burst_time=spec.burst_time,
                waiting_time=waiting_time,
                turnaround_time=turnaround_time,
                response_time=response_time,
                completion_time=state.completion_time,
                priority=spec.priority,
            )
        )

    return results


def summarize_process_metrics(processes: Sequence[ProcessResult]) -> Dict[str, Fraction]:
    """
    Return the exact (unrounded) averages of the key per-process metrics.
    """
    if not processes:
        return {"avg_waiting": Fraction(0), "avg_turnaround": Fraction(0), "avg_response": Fraction(0)}

    n = len(processes)
    return {
        "avg_waiting": Fraction(sum(p.waiting_time for p in processes), n),
        "avg_turnaround": Fraction(sum(p.turnaround_time for p in processes), n),
        "avg_response": Fraction(sum(p.response_time for p in processes), n),
    }


def compute_system_metrics(timeline: Sequence[TimelineSegment], processes: Sequence[ProcessResult]) -> SystemMetrics:
    """
    Compute throughput, CPU utilization and context switches for a finished
    timeline.
    """
    if not timeline:
        return SystemMetrics(
            makespan=0,
            cpu_busy_time=0,
            idle_time=0,
            throughput=Fraction(0),
            cpu_utilization=Fraction(0),
        )

    makespan = timeline[-1].end_time
    cpu_busy_time = sum(seg.duration for seg in timeline if not seg.is_idle)

    busy = [seg.pid for seg in timeline if not seg.is_idle]
    context_switches = sum(1 for prev, cur in zip(busy, busy[1:]) if prev != cur)

    return SystemMetrics(
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        idle_time=makespan - cpu_busy_time,
        throughput=Fraction(len(processes), makespan),
        cpu_utilization=Fraction(cpu_busy_time, makespan),
        context_switches=context_switches,
    )
