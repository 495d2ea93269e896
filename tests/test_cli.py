import json
from pathlib import Path

import pytest

from schedsim.cli import main


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")


def _write_workload(tmp_path: Path) -> Path:
    p = tmp_path / "w.csv"
    p.write_text("id,arrivalTime,burstTime,priority\nP1,0,5,2\nP2,1,3,1\nP3,2,8,3\n")
    return p


def test_run_workload_writes_payload(tmp_path: Path):
    out = tmp_path / "out.json"
    code = main(["run", "-w", str(_write_workload(tmp_path)), "-a", "fcfs", "-o", str(out)])
    assert code == 0

    payload = json.loads(out.read_text())
    assert [seg["processId"] for seg in payload["timeline"]] == ["P1", "P2", "P3"]
    assert [p["waitingTime"] for p in payload["processes"]] == [0, 4, 6]


def test_run_request_file_prints_tables(tmp_path: Path, capsys):
    req = tmp_path / "req.json"
    req.write_text(
        json.dumps(
            {
                "algorithm": "RR",
                "timeQuantum": 2,
                "processes": [
                    {"id": "P1", "arrivalTime": 0, "burstTime": 5},
                    {"id": "P2", "arrivalTime": 1, "burstTime": 3},
                ],
            }
        )
    )
    assert main(["run", "-r", str(req)]) == 0
    out = capsys.readouterr().out
    assert "Round Robin (q=2)" in out
    assert "Per-process metrics" in out


def test_run_requires_algorithm_for_workload(tmp_path: Path, capsys):
    assert main(["run", "-w", str(_write_workload(tmp_path))]) == 2
    assert "--algorithm is required" in capsys.readouterr().out


def test_run_reports_validation_errors(tmp_path: Path, capsys):
    code = main(["run", "-w", str(_write_workload(tmp_path)), "-a", "rr"])
    assert code == 2
    assert "timeQuantum is required" in capsys.readouterr().out


def test_compare_lists_every_variant(tmp_path: Path, capsys):
    assert main(["compare", "-w", str(_write_workload(tmp_path)), "-q", "3"]) == 0
    out = capsys.readouterr().out
    for label in ("FCFS", "SJF (preemptive)", "Round Robin (q=3)", "Priority (non-preemptive)"):
        assert label in out


def test_run_prints_process_ids_verbatim(tmp_path: Path, capsys):
    req = tmp_path / "req.json"
    req.write_text(
        json.dumps(
            {
                "algorithm": "FCFS",
                "processes": [
                    {"id": "[/x]", "arrivalTime": 0, "burstTime": 2},
                    {"id": "[bold]P2", "arrivalTime": 1, "burstTime": 1},
                ],
            }
        )
    )
    assert main(["run", "-r", str(req)]) == 0
    out = capsys.readouterr().out
    assert "[/x]" in out
    assert "[bold]P2" in out
