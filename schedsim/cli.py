from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .errors import InternalInvariantError, ValidationError
from .gantt import build_rich_gantt
from .models import SimulationResult
from .service import result_to_payload, simulate_request
from .validation import ALGORITHM_NAMES
from .workload_io import build_request, dump_payload, load_request, load_workload

logger = logging.getLogger(__name__)

_ALGORITHM_BY_LOWER = {name.lower(): name for name in ALGORITHM_NAMES}


def _algorithm_name(value: str) -> str:
    try:
        return _ALGORITHM_BY_LOWER[value.lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"unknown algorithm {value!r} (choose from {', '.join(ALGORITHM_NAMES)})"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, Priority, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch, preemption and completion.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate one algorithm on a request or workload file.")
    source = run_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--request",
        "-r",
        help="Path to a JSON request (algorithm, isPreemptive, timeQuantum, processes).",
    )
    source.add_argument(
        "--workload",
        "-w",
        help="Path to a JSON or CSV list of processes (requires --algorithm).",
    )
    run_parser.add_argument(
        "--algorithm",
        "-a",
        type=_algorithm_name,
        help="Algorithm to use with --workload (FCFS, SJF, RR, Priority).",
    )
    run_parser.add_argument(
        "--preemptive",
        "-p",
        action="store_true",
        help="Use the preemptive variant (SJF and Priority only).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for Round Robin.",
    )
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw response payload as JSON instead of tables.",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Also write the response payload as JSON to this path.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run every algorithm on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for Round Robin (default: 2).",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _print_result(result: SimulationResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.config.label}")
    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            escape(p.pid),
            str(p.arrival_time),
            str(p.burst_time),
            "" if p.priority is None else str(p.priority),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    sys = result.system
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{float(result.average_waiting_time):.2f}")
    sys_table.add_row("Avg turnaround", f"{float(result.average_turnaround_time):.2f}")
    sys_table.add_row("Avg response", f"{float(result.average_response_time):.2f}")
    sys_table.add_row("Makespan", str(sys.makespan))
    sys_table.add_row("Idle time", str(sys.idle_time))
    sys_table.add_row("Throughput (proc/time)", f"{float(sys.throughput):.3f}")
    sys_table.add_row("CPU utilization", f"{float(sys.cpu_utilization) * 100:.1f}%")
    sys_table.add_row("Context switches", str(sys.context_switches))

    console.print(sys_table)


def _compare_requests(processes: List[Dict[str, Any]], quantum: int) -> List[Dict[str, Any]]:
    requests = [
        build_request(processes, "FCFS"),
        build_request(processes, "SJF"),
        build_request(processes, "SJF", preemptive=True),
        build_request(processes, "RR", quantum=quantum),
    ]
    if all(p.get("priority") is not None for p in processes):
        requests.append(build_request(processes, "Priority"))
        requests.append(build_request(processes, "Priority", preemptive=True))
    else:
        logger.info("Skipping Priority scheduling: not every process has a priority")
    return requests


def _run_compare(processes: List[Dict[str, Any]], quantum: int, console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Makespan", justify="right")
    summary_table.add_column("Switches", justify="right")

    for request in _compare_requests(processes, quantum):
        result = simulate_request(request)
        summary_table.add_row(
            result.config.label,
            f"{float(result.average_waiting_time):.2f}",
            f"{float(result.average_turnaround_time):.2f}",
            f"{float(result.average_response_time):.2f}",
            str(result.system.makespan),
            str(result.system.context_switches),
        )

    console.print(summary_table)


def _run(args: argparse.Namespace, console: Console) -> None:
    if args.request:
        request = load_request(args.request)
    else:
        if args.algorithm is None:
            raise ValidationError("--algorithm is required with --workload")
        request = build_request(
            load_workload(args.workload),
            args.algorithm,
            preemptive=args.preemptive,
            quantum=args.quantum,
        )

    result = simulate_request(request)
    payload = result_to_payload(result)

    if args.output:
        dump_payload(payload, args.output)
        logger.info("Wrote response to %s", args.output)

    if args.json:
        console.print_json(dump_payload(payload))
    else:
        _print_result(result, console)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            _run(args, console)
            return 0

        if args.command == "compare":
            _run_compare(load_workload(args.workload), args.quantum, console)
            return 0
    except ValidationError as exc:
        console.print(f"[red]Invalid input: {escape(str(exc))}[/red]")
        return 2
    except InternalInvariantError:
        logger.exception("Simulation invariant violated")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
