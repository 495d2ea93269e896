from __future__ import annotations

import logging
from typing import Any, Dict, Sequence

from .algorithms import simulate
from .metrics import compute_process_results, compute_system_metrics, summarize_process_metrics
from .models import AlgorithmConfig, ProcessSpec, SimulationResult
from .timeline import build_timeline, check_timeline
from .validation import validate_request

logger = logging.getLogger(__name__)


def run_simulation(processes: Sequence[ProcessSpec], config: AlgorithmConfig) -> SimulationResult:
    """
    Simulate already-validated processes under ``config`` and assemble the
    timeline, per-process results and averages.
    """
    run = simulate(processes, config)
    timeline = build_timeline(run.events)
    check_timeline(timeline, processes)

    results = compute_process_results(run.states)
    summary = summarize_process_metrics(results)
    system = compute_system_metrics(timeline, results)

    logger.debug(
        "%s: %d processes, %d segments, makespan %d",
        config.label,
        len(results),
        len(timeline),
        system.makespan,
    )

    return SimulationResult(
        config=config,
        timeline=timeline,
        processes=tuple(results),
        average_waiting_time=summary["avg_waiting"],
        average_turnaround_time=summary["avg_turnaround"],
        average_response_time=summary["avg_response"],
        system=system,
    )


def simulate_request(raw: Any) -> SimulationResult:
    """
    Validate a raw request (the wire shape with camelCase keys) and simulate
    it. A ValidationError propagates unchanged.
    """
    processes, config = validate_request(raw)
    return run_simulation(processes, config)


def result_to_payload(result: SimulationResult) -> Dict[str, Any]:
    """
    Render a result in the response shape expected by the presentation layer.
    """
    processes = []
    for p in result.processes:
        entry: Dict[str, Any] = {
            "id": p.pid,
            "arrivalTime": p.arrival_time,
            "burstTime": p.burst_time,
        }
        if p.priority is not None:
            entry["priority"] = p.priority
        entry.update(
            waitingTime=p.waiting_time,
            turnaroundTime=p.turnaround_time,
            responseTime=p.response_time,
            completionTime=p.completion_time,
        )
        processes.append(entry)

    return {
        "timeline": [
            {"processId": seg.pid, "startTime": seg.start_time, "endTime": seg.end_time}
            for seg in result.timeline
        ],
        "processes": processes,
        "averageWaitingTime": float(result.average_waiting_time),
        "averageTurnaroundTime": float(result.average_turnaround_time),
        "averageResponseTime": float(result.average_response_time),
    }


def handle_request(raw: Any) -> Dict[str, Any]:
    return result_to_payload(simulate_request(raw))
