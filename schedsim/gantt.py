from __future__ import annotations

from typing import Dict, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import TimelineSegment


def _time_mark(end_time: int, width: int, last: bool) -> str:
    # A mark must end on its segment boundary; marks that do not fit are left out.
    mark = str(end_time)
    if len(mark) < width:
        return mark.rjust(width)
    if last:
        return " " + mark
    return " " * width


def render_gantt(segments: Sequence[TimelineSegment]) -> str:
    """
    Plain-text Gantt chart, one character per time unit. Idle time is drawn
    with dots.
    """
    if not segments:
        return "(no execution)"

    line = "|"
    labels = " "
    time_marks = "0"

    for seg in segments:
        width = seg.duration
        if seg.is_idle:
            line += "." * width
            labels += " " * width
        else:
            line += "=" * width
            labels += seg.pid[:width].ljust(width)
        time_marks += _time_mark(seg.end_time, width, last=seg is segments[-1])

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(segments: Sequence[TimelineSegment]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not segments:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    bars = Text()
    labels = Text()
    time_marks = "0"

    for seg in segments:
        width = seg.duration
        if seg.is_idle:
            bars.append("." * width, style="dim")
            labels.append(" " * width)
        else:
            bars.append(" " * width, style=f"on {pid_color(seg.pid)}")
            labels.append(seg.pid[:width].ljust(width), style="bold")
        time_marks += _time_mark(seg.end_time, width, last=seg is segments[-1])

    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
