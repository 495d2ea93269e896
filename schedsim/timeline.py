from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import InternalInvariantError
from .models import IDLE_ID, DispatchEvent, ProcessSpec, TimelineSegment


def build_timeline(events: Iterable[DispatchEvent]) -> Tuple[TimelineSegment, ...]:
    """
    Turn the simulator's dispatch events into Gantt segments.

    Back-to-back events for the same process (or consecutive idle events) are
    merged into one segment. The result must start at 0 and be contiguous;
    anything else means the simulator is broken.
    """
    segments: List[TimelineSegment] = []
    last_end = 0

    for event in events:
        pid = IDLE_ID if event.pid is None else event.pid
        if event.end_time <= event.start_time:
            raise InternalInvariantError(
                f"Segment {pid} [{event.start_time}, {event.end_time}) has non-positive length"
            )
        if event.start_time != last_end:
            raise InternalInvariantError(
                f"Timeline is not contiguous: segment {pid} starts at {event.start_time}, "
                f"previous segment ended at {last_end}"
            )

        if segments and segments[-1].pid == pid:
            previous = segments.pop()
            segments.append(TimelineSegment(pid=pid, start_time=previous.start_time, end_time=event.end_time))
        else:
            segments.append(TimelineSegment(pid=pid, start_time=event.start_time, end_time=event.end_time))
        last_end = event.end_time

    return tuple(segments)


def check_timeline(timeline: Sequence[TimelineSegment], processes: Sequence[ProcessSpec]) -> None:
    """
    Verify that every process received exactly its burst time and never ran
    before it arrived.
    """
    by_pid: Dict[str, ProcessSpec] = {p.id: p for p in processes}
    executed: Dict[str, int] = defaultdict(int)

    for seg in timeline:
        if seg.is_idle:
            continue
        spec = by_pid.get(seg.pid)
        if spec is None:
            raise InternalInvariantError(f"Timeline contains unknown process {seg.pid!r}")
        if seg.start_time < spec.arrival_time:
            raise InternalInvariantError(
                f"{seg.pid} runs at t={seg.start_time} before its arrival at t={spec.arrival_time}"
            )
        executed[seg.pid] += seg.duration

    for spec in processes:
        if executed[spec.id] != spec.burst_time:
            raise InternalInvariantError(
                f"{spec.id} executed for {executed[spec.id]} time units, burst time is {spec.burst_time}"
            )
