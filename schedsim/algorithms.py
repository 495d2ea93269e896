from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence

from .errors import InternalInvariantError, ValidationError
from .models import (
    AlgorithmConfig,
    DispatchEvent,
    FCFSConfig,
    PriorityConfig,
    ProcessRuntimeState,
    ProcessSpec,
    ProcessStatus,
    RoundRobinConfig,
    SimulationRun,
    SJFConfig,
)

logger = logging.getLogger(__name__)

SelectionKey = Callable[[ProcessRuntimeState], int]


def _init_states(processes: Sequence[ProcessSpec]) -> List[ProcessRuntimeState]:
    return [ProcessRuntimeState.from_spec(spec, index) for index, spec in enumerate(processes)]


def _arrival_order(states: List[ProcessRuntimeState]) -> Deque[ProcessRuntimeState]:
    # Processes that have not arrived yet, earliest first (ties: input order).
    return deque(sorted(states, key=lambda s: (s.spec.arrival_time, s.index)))


def _admit(pending: Deque[ProcessRuntimeState], clock: int, ready) -> None:
    """
    Move every process that has arrived by ``clock`` into ``ready``, in
    arrival order.
    """
    while pending and pending[0].spec.arrival_time <= clock:
        state = pending.popleft()
        state.status = ProcessStatus.READY
        ready.append(state)


def _idle_until_next_arrival(run: SimulationRun, pending: Deque[ProcessRuntimeState], clock: int) -> int:
    if not pending:
        raise InternalInvariantError(f"CPU idle at t={clock} with nothing left to arrive")
    next_arrival = pending[0].spec.arrival_time
    if next_arrival <= clock:
        raise InternalInvariantError(f"Idle jump from t={clock} to non-future arrival t={next_arrival}")
    run.events.append(DispatchEvent(pid=None, start_time=clock, end_time=next_arrival))
    logger.debug("t=%d: idle until t=%d", clock, next_arrival)
    return next_arrival


def _dispatch(state: ProcessRuntimeState, clock: int) -> None:
    if state.first_dispatch_time is None:
        state.first_dispatch_time = clock
    state.status = ProcessStatus.RUNNING
    logger.debug("t=%d: dispatch %s (remaining %d)", clock, state.pid, state.remaining_time)


def _execute(run: SimulationRun, state: ProcessRuntimeState, start: int, end: int) -> None:
    if end <= start:
        raise InternalInvariantError(f"Empty dispatch for {state.pid} at t={start}")
    if start < state.spec.arrival_time:
        raise InternalInvariantError(f"{state.pid} dispatched at t={start} before its arrival")

    run.events.append(DispatchEvent(pid=state.pid, start_time=start, end_time=end))
    state.remaining_time -= end - start

    if state.remaining_time < 0:
        raise InternalInvariantError(f"{state.pid} has negative remaining time {state.remaining_time}")
    if state.remaining_time == 0:
        state.status = ProcessStatus.COMPLETED
        state.completion_time = end
        logger.debug("t=%d: %s completed", end, state.pid)


def _simulate_by_key(
    processes: Sequence[ProcessSpec],
    key: SelectionKey,
    preemptive: bool,
) -> SimulationRun:
    """
    Shared dispatch loop for FCFS, SJF and Priority.

    Among ready processes, pick the one with the smallest ``key`` (ties:
    earlier arrival, then input order). When ``preemptive`` is set the choice
    is re-evaluated at every arrival and completion, and the running process
    is replaced only by a ready process with a strictly smaller key.
    """
    states = _init_states(processes)
    run = SimulationRun(states=states)
    pending = _arrival_order(states)
    ready: List[ProcessRuntimeState] = []
    running: Optional[ProcessRuntimeState] = None
    clock = 0
    completed = 0

    def rank(state: ProcessRuntimeState):
        return (key(state), state.spec.arrival_time, state.index)

    while completed < len(states):
        _admit(pending, clock, ready)

        if running is None:
            if not ready:
                clock = _idle_until_next_arrival(run, pending, clock)
                continue
            running = min(ready, key=rank)
            ready.remove(running)
            _dispatch(running, clock)
        elif preemptive and ready:
            challenger = min(ready, key=rank)
            if key(challenger) < key(running):
                logger.debug("t=%d: %s preempts %s", clock, challenger.pid, running.pid)
                running.status = ProcessStatus.READY
                ready.append(running)
                ready.remove(challenger)
                running = challenger
                _dispatch(running, clock)

        # Run to completion, or only up to the next arrival when preemptive.
        end = clock + running.remaining_time
        if preemptive and pending:
            end = min(end, pending[0].spec.arrival_time)

        _execute(run, running, clock, end)
        clock = end

        if running.status is ProcessStatus.COMPLETED:
            completed += 1
            running = None

    return run


def simulate_fcfs(processes: Sequence[ProcessSpec], config: FCFSConfig) -> SimulationRun:
    """
    First-Come First-Serve (non-preemptive).
    """
    return _simulate_by_key(processes, key=lambda s: s.spec.arrival_time, preemptive=False)


def simulate_sjf(processes: Sequence[ProcessSpec], config: SJFConfig) -> SimulationRun:
    """
    Shortest Job First. The preemptive variant is shortest-remaining-time-first.
    """
    return _simulate_by_key(processes, key=lambda s: s.remaining_time, preemptive=config.preemptive)


def simulate_priority(processes: Sequence[ProcessSpec], config: PriorityConfig) -> SimulationRun:
    """
    Priority scheduling. Lower numeric priority value means higher priority.
    """
    missing = [p.id for p in processes if p.priority is None]
    if missing:
        raise ValidationError(f"Priority scheduling requires a priority for: {', '.join(missing)}")

    return _simulate_by_key(processes, key=lambda s: s.spec.priority, preemptive=config.preemptive)


def simulate_round_robin(processes: Sequence[ProcessSpec], config: RoundRobinConfig) -> SimulationRun:
    """
    Round Robin with a fixed time quantum.

    Processes arriving during (or exactly at the end of) a quantum join the
    queue before the process that just ran is put back at the tail.
    """
    quantum = config.time_quantum
    states = _init_states(processes)
    run = SimulationRun(states=states)
    pending = _arrival_order(states)
    queue: Deque[ProcessRuntimeState] = deque()
    clock = 0
    completed = 0

    _admit(pending, clock, queue)

    while completed < len(states):
        if not queue:
            clock = _idle_until_next_arrival(run, pending, clock)
            _admit(pending, clock, queue)
            continue

        state = queue.popleft()
        _dispatch(state, clock)

        end = clock + min(state.remaining_time, quantum)
        _execute(run, state, clock, end)
        clock = end

        _admit(pending, clock, queue)

        if state.status is ProcessStatus.COMPLETED:
            completed += 1
        else:
            state.status = ProcessStatus.READY
            queue.append(state)

    return run


SIMULATORS: Dict[type, Callable[..., SimulationRun]] = {
    FCFSConfig: simulate_fcfs,
    SJFConfig: simulate_sjf,
    PriorityConfig: simulate_priority,
    RoundRobinConfig: simulate_round_robin,
}


def simulate(processes: Sequence[ProcessSpec], config: AlgorithmConfig) -> SimulationRun:
    """
    Dispatch to the simulator for ``config``'s variant and return the
    chronological dispatch events plus the final runtime state of every
    process.
    """
    try:
        func = SIMULATORS[type(config)]
    except KeyError as exc:
        raise InternalInvariantError(f"No simulator registered for {type(config).__name__}") from exc

    if not processes:
        raise ValidationError("processes must be a non-empty list")

    return func(processes, config)
