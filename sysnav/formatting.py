"""Console-friendly formatting utilities."""

from __future__ import annotations

import math
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence

from .system_state import ProcessUsage, SystemSnapshot, disk_usage_percent, top_memory_processes

if TYPE_CHECKING:
    from .explorer import ListingEntry

BAR_LENGTH = 50

MENU_LINES = (
    "",
    "System Health Monitor and File Explorer",
    "1. Show System Health Stats",
    "2. Enter File Explorer",
    "Enter your choice (1 or 2): ",
)

EXPLORER_HELP_LINES = (
    "",
    "Commands: ",
    "  'cd <dir>' to change directory",
    "  'ls' to list files",
    "  'exit' to quit the file explorer",
)


def filled_segments(value: float, length: int = BAR_LENGTH) -> int:
    """Number of ``=`` segments for ``value`` percent, kept within ``[0, length]``."""
    if math.isnan(value) or value <= 0:
        return 0
    if value >= 100:
        return length
    return min(length, math.floor(length * value / 100))


def progress_bar(label: str, value: float, length: int = BAR_LENGTH) -> str:
    filled = filled_segments(value, length)
    bar = "=" * filled + " " * (length - filled)
    return f"{label}: [{bar}] {value:.2f}%"


def format_memory(snapshot: SystemSnapshot) -> str:
    return f"Memory Usage: {snapshot.used_memory_kb}/{snapshot.total_memory_kb} KB"


def format_disk(snapshot: SystemSnapshot) -> str:
    percent = disk_usage_percent(snapshot)
    if percent is None:
        return "Disk Usage: N/A (no volumes reported)"
    return progress_bar("Disk Usage", percent)


def format_process_list(processes: Iterable[ProcessUsage]) -> str:
    lines = ["", "Top 3 Memory Consuming Processes:"]
    lines.extend(f"PID: {proc.pid} | {proc.name} | Memory: {proc.memory_kb} KB" for proc in processes)
    return "\n".join(lines)


def format_snapshot(snapshot: SystemSnapshot, refresh_delay: float = 2.0) -> str:
    lines = [
        "",
        "System Health Monitor",
        "------------------------",
        progress_bar("CPU Usage", snapshot.cpu_usage_percent),
        format_memory(snapshot),
        format_disk(snapshot),
        format_process_list(top_memory_processes(snapshot.processes)),
        "",
        f"Refreshing system stats in {refresh_delay:g} seconds...",
    ]
    return "\n".join(lines)


def format_listing(directory: Path, entries: Sequence[ListingEntry]) -> str:
    """Render ``Current Directory`` and one typed line per listing entry."""
    lines = ["", f"Current Directory: {directory}"]
    for entry in entries:
        marker = "[DIR]  " if entry.is_dir else "[FILE] "
        lines.append(f"{marker}{entry.path}")
    lines.extend(EXPLORER_HELP_LINES)
    return "\n".join(lines)


def format_menu() -> str:
    return "\n".join(MENU_LINES)
