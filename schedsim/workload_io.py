from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ValidationError

INT_FIELDS = ("arrivalTime", "burstTime", "priority")


def load_request(path: str | Path) -> Dict[str, Any]:
    """
    Load a full simulation request (algorithm, options and processes) from a
    JSON file.
    """
    raw = _read_json(Path(path))
    if not isinstance(raw, dict):
        raise ValidationError(f"{path}: request file must contain a JSON object")
    return raw


def load_workload(path: str | Path) -> List[Dict[str, Any]]:
    """
    Load a list of process entries from a JSON or CSV file.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValidationError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def build_request(
    processes: List[Dict[str, Any]],
    algorithm: str,
    preemptive: bool = False,
    quantum: Optional[int] = None,
) -> Dict[str, Any]:
    request: Dict[str, Any] = {
        "algorithm": algorithm,
        "isPreemptive": preemptive,
        "processes": processes,
    }
    if quantum is not None:
        request["timeQuantum"] = quantum
    return request


def dump_payload(payload: Dict[str, Any], path: str | Path | None = None) -> str:
    text = json.dumps(payload, indent=2)
    if path is not None:
        Path(path).write_text(text + "\n", encoding="utf-8")
    return text


def _read_json(path: Path):
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path}: invalid JSON ({exc})") from exc
    except OSError as exc:
        raise ValidationError(f"{path}: cannot read file ({exc.strerror})") from exc


def _load_json(path: Path) -> List[Dict[str, Any]]:
    raw = _read_json(path)

    # A full request object is accepted too; only its processes are used.
    if isinstance(raw, dict) and "processes" in raw:
        raw = raw["processes"]
    if not isinstance(raw, list):
        raise ValidationError(f"{path}: JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Dict[str, Any]]:
    processes: List[Dict[str, Any]] = []
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                processes.append(_process_from_mapping(row))
    except OSError as exc:
        raise ValidationError(f"{path}: cannot read file ({exc.strerror})") from exc
    return processes


def _process_from_mapping(mapping) -> Dict[str, Any]:
    if not isinstance(mapping, dict):
        raise ValidationError(f"Invalid process entry: {mapping!r}")

    entry: Dict[str, Any] = {"id": mapping.get("id")}
    for key in INT_FIELDS:
        value = mapping.get(key)
        if value in (None, ""):
            continue
        # CSV cells arrive as strings; JSON values are passed through as-is.
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError as exc:
                raise ValidationError(f"Invalid {key} {value!r} in process entry: {mapping!r}") from exc
        entry[key] = value

    return entry
