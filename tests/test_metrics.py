from fractions import Fraction

import pytest

from schedsim.errors import InternalInvariantError
from schedsim.gantt import build_rich_gantt, render_gantt
from schedsim.metrics import compute_process_results, compute_system_metrics, summarize_process_metrics
from schedsim.models import ProcessResult, ProcessRuntimeState, ProcessSpec, TimelineSegment


def _timeline():
    return (
        TimelineSegment("IDLE", 0, 2),
        TimelineSegment("P1", 2, 5),
        TimelineSegment("P2", 5, 6),
        TimelineSegment("IDLE", 6, 8),
        TimelineSegment("P2", 8, 10),
    )


def test_system_metrics():
    results = [
        ProcessResult("P1", 2, 3, waiting_time=0, turnaround_time=3, response_time=0, completion_time=5),
        ProcessResult("P2", 4, 3, waiting_time=3, turnaround_time=6, response_time=1, completion_time=10),
    ]
    system = compute_system_metrics(_timeline(), results)
    assert system.makespan == 10
    assert system.cpu_busy_time == 6
    assert system.idle_time == 4
    assert system.throughput == Fraction(1, 5)
    assert system.cpu_utilization == Fraction(3, 5)
    assert system.context_switches == 1


def test_summary_of_no_processes_is_zero():
    assert summarize_process_metrics([]) == {
        "avg_waiting": 0,
        "avg_turnaround": 0,
        "avg_response": 0,
    }


def test_process_results_keep_input_order():
    a = ProcessRuntimeState.from_spec(ProcessSpec("A", arrival_time=0, burst_time=2), index=0)
    b = ProcessRuntimeState.from_spec(ProcessSpec("B", arrival_time=0, burst_time=1), index=1)
    for state, first, done in ((a, 1, 3), (b, 0, 1)):
        state.remaining_time = 0
        state.first_dispatch_time = first
        state.completion_time = done

    results = compute_process_results([b, a])

    assert [r.pid for r in results] == ["A", "B"]
    assert results[0].waiting_time == 1
    assert results[0].response_time == 1


def test_unfinished_process_is_an_invariant_error():
    state = ProcessRuntimeState.from_spec(ProcessSpec("A", arrival_time=0, burst_time=2), index=0)
    with pytest.raises(InternalInvariantError, match="never completed"):
        compute_process_results([state])


def test_render_gantt_draws_idle_as_dots():
    chart = render_gantt(_timeline()[:2])
    assert "|..===|" in chart
    assert render_gantt([]) == "(no execution)"


def test_rich_gantt_time_marks_end_on_segment_boundaries():
    _, marks = build_rich_gantt(_timeline())
    assert marks.split() == ["0", "2", "5", "8", "10"]
    assert marks[2] == "2"
    assert marks[5] == "5"
    assert marks[8] == "8"


def test_time_marks_stay_aligned_after_a_narrow_segment():
    timeline = (
        TimelineSegment("P1", 0, 9),
        TimelineSegment("P2", 9, 10),
        TimelineSegment("P3", 10, 13),
    )
    marks = render_gantt(timeline).splitlines()[-1]
    assert marks == "0" + " " * 8 + "9" + " " * 2 + "13"
    assert marks[9] == "9"
    assert marks[13] == "3"
