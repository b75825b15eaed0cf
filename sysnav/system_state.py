"""Collect a point-in-time view of CPU, memory, disk and process usage."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import psutil

logger = logging.getLogger(__name__)


@dataclass
class ProcessUsage:
    pid: int
    name: str
    memory_kb: int


@dataclass
class VolumeSpace:
    mount_point: str
    total_bytes: int
    available_bytes: int


@dataclass
class SystemSnapshot:
    cpu_usage_percent: float
    total_memory_kb: int
    used_memory_kb: int
    total_disk_bytes: int
    used_disk_bytes: int
    processes: List[ProcessUsage] = field(default_factory=list)


class SystemProvider:
    """Handle on the OS metrics source.

    psutil reports per-core CPU usage relative to the previous call, so the
    first sample is taken here and every later ``cpu_percent_per_core`` call
    covers the time since the last refresh.
    """

    def __init__(self) -> None:
        psutil.cpu_percent(percpu=True)

    def cpu_percent_per_core(self) -> List[float]:
        return list(psutil.cpu_percent(percpu=True))

    def memory_kb(self) -> Tuple[int, int]:
        memory = psutil.virtual_memory()
        return memory.total // 1024, memory.used // 1024

    def volumes(self) -> List[VolumeSpace]:
        volumes: List[VolumeSpace] = []
        for partition in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError as exc:
                logger.debug("skipping volume %s: %s", partition.mountpoint, exc)
                continue
            volumes.append(
                VolumeSpace(
                    mount_point=partition.mountpoint,
                    total_bytes=usage.total,
                    available_bytes=usage.free,
                )
            )
        return volumes

    def processes(self) -> List[ProcessUsage]:
        usage: List[ProcessUsage] = []
        for proc in psutil.process_iter():
            try:
                with proc.oneshot():
                    usage.append(
                        ProcessUsage(
                            pid=proc.pid,
                            name=proc.name(),
                            memory_kb=proc.memory_info().rss // 1024,
                        )
                    )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return usage


def gather_snapshot(provider: SystemProvider) -> SystemSnapshot:
    """Collect a snapshot of the current system health."""
    cpu_usage = sum(provider.cpu_percent_per_core())
    total_memory, used_memory = provider.memory_kb()
    total_disk, used_disk = aggregate_disk(provider.volumes())

    return SystemSnapshot(
        cpu_usage_percent=cpu_usage,
        total_memory_kb=total_memory,
        used_memory_kb=used_memory,
        total_disk_bytes=total_disk,
        used_disk_bytes=used_disk,
        processes=provider.processes(),
    )


def aggregate_disk(volumes: Iterable[VolumeSpace]) -> Tuple[int, int]:
    """Return ``(total, used)`` bytes summed over all volumes.

    A volume reporting more available space than its total contributes no
    used space.
    """
    total = 0
    used = 0
    for volume in volumes:
        total += volume.total_bytes
        if volume.available_bytes > volume.total_bytes:
            logger.debug(
                "volume %s reports %d available of %d total, counting as unused",
                volume.mount_point,
                volume.available_bytes,
                volume.total_bytes,
            )
            continue
        used += volume.total_bytes - volume.available_bytes
    return total, used


def disk_usage_percent(snapshot: SystemSnapshot) -> Optional[float]:
    """Percentage of disk space in use, or ``None`` when no space is reported."""
    if snapshot.total_disk_bytes == 0:
        return None
    return snapshot.used_disk_bytes / snapshot.total_disk_bytes * 100


def top_memory_processes(processes: Sequence[ProcessUsage], top_n: int = 3) -> List[ProcessUsage]:
    """The ``top_n`` largest processes by memory, smallest of them first."""
    if top_n <= 0:
        return []
    ranked = sorted(processes, key=lambda p: p.memory_kb)
    return ranked[-top_n:]
