import pytest

from schedsim.errors import ValidationError
from schedsim.models import FCFSConfig, PriorityConfig, ProcessSpec, RoundRobinConfig, SJFConfig
from schedsim.validation import validate_request


def _request(**overrides):
    request = {
        "algorithm": "FCFS",
        "isPreemptive": False,
        "processes": [
            {"id": "P1", "arrivalTime": 0, "burstTime": 5, "priority": 2},
            {"id": "P2", "arrivalTime": 1, "burstTime": 3, "priority": 1},
        ],
    }
    request.update(overrides)
    return request


def test_valid_request_is_normalized():
    processes, config = validate_request(_request())
    assert config == FCFSConfig()
    assert processes == (
        ProcessSpec("P1", arrival_time=0, burst_time=5, priority=2),
        ProcessSpec("P2", arrival_time=1, burst_time=3, priority=1),
    )


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"algorithm": "SJF", "isPreemptive": True}, SJFConfig(preemptive=True)),
        ({"algorithm": "Priority"}, PriorityConfig(preemptive=False)),
        ({"algorithm": "RR", "timeQuantum": 3, "isPreemptive": True}, RoundRobinConfig(time_quantum=3)),
        ({"algorithm": "FCFS", "timeQuantum": 0}, FCFSConfig()),
    ],
)
def test_config_variants_carry_only_their_parameters(overrides, expected):
    _, config = validate_request(_request(**overrides))
    assert config == expected


def test_priority_is_optional_outside_priority_scheduling():
    request = _request(processes=[{"id": "P1", "arrivalTime": 0, "burstTime": 1}])
    processes, _ = validate_request(request)
    assert processes[0].priority is None


@pytest.mark.parametrize(
    "request_data, message",
    [
        ([], "Request must be an object"),
        (_request(algorithm="LIFO"), "Unknown algorithm"),
        (_request(algorithm="fcfs"), "Unknown algorithm"),
        (_request(isPreemptive="yes"), "isPreemptive"),
        (_request(algorithm="RR"), "timeQuantum is required"),
        (_request(algorithm="RR", timeQuantum=0), "timeQuantum"),
        (_request(algorithm="RR", timeQuantum=1.5), "timeQuantum"),
        (_request(timeQuantum="abc"), "timeQuantum must be an integer"),
        (_request(algorithm="SJF", timeQuantum=True), "timeQuantum must be an integer"),
        (_request(processes=[]), "non-empty"),
        (_request(processes=None), "non-empty"),
        (_request(processes=["P1"]), "must be an object"),
        (_request(processes=[{"id": "P1", "burstTime": 1}]), "missing arrivalTime"),
        (_request(processes=[{"id": "", "arrivalTime": 0, "burstTime": 1}]), "non-empty string"),
        (_request(processes=[{"id": 3, "arrivalTime": 0, "burstTime": 1}]), "non-empty string"),
        (_request(processes=[{"id": "P1", "arrivalTime": -1, "burstTime": 1}]), "arrivalTime"),
        (_request(processes=[{"id": "P1", "arrivalTime": True, "burstTime": 1}]), "arrivalTime"),
        (_request(processes=[{"id": "P1", "arrivalTime": 0, "burstTime": 0}]), "burstTime"),
        (_request(processes=[{"id": "P1", "arrivalTime": 0, "burstTime": "2"}]), "burstTime"),
        (_request(processes=[{"id": "P1", "arrivalTime": 0, "burstTime": 1, "priority": "high"}]), "priority"),
        (_request(processes=[{"id": "IDLE", "arrivalTime": 0, "burstTime": 1}]), "reserved"),
        (
            _request(
                processes=[
                    {"id": "P1", "arrivalTime": 0, "burstTime": 1},
                    {"id": "P1", "arrivalTime": 2, "burstTime": 1},
                ]
            ),
            "Duplicate process id",
        ),
        (
            _request(algorithm="Priority", processes=[{"id": "P1", "arrivalTime": 0, "burstTime": 1}]),
            "priority is required",
        ),
    ],
)
def test_invalid_requests_are_rejected(request_data, message):
    with pytest.raises(ValidationError, match=message):
        validate_request(request_data)


def test_validation_does_not_mutate_input():
    request = _request(algorithm="RR", timeQuantum=2)
    snapshot = repr(request)
    validate_request(request)
    assert repr(request) == snapshot


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        RoundRobinConfig(time_quantum=0)
