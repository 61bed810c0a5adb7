"""Operating system statistics: CPU time percentages, network interfaces, memory."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, fields
from pathlib import Path

import psutil

NET_DEV_PATH = "/proc/net/dev"

# attribute name -> metric name
_METRICS = (
    ("user", "User"),
    ("system", "System"),
    ("idle", "Idle"),
    ("nice", "Nice"),
    ("iowait", "Iowait"),
    ("irq", "Irq"),
    ("softirq", "Softirq"),
    ("steal", "Steal"),
    ("guest", "Guest"),
    ("guest_nice", "GuestNice"),
    ("stolen", "Stolen"),
)


def _time(times, attr: str) -> float:
    return float(getattr(times, attr, 0.0) or 0.0)


@dataclass
class CpuPercent:
    """Share of each kind of CPU time, in percent, for one CPU."""

    user: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    nice: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guest_nice: float = 0.0
    stolen: float = 0.0


@dataclass
class MetricExtreme:
    """The highest (lowest for Idle) value of a metric and the CPU it was seen on."""

    name: str
    value: float
    cpu_idx: int


@dataclass
class OSMemStats:
    swap_total: int = 0
    swap_used: int = 0
    swap_free: int = 0
    swap_used_percent: float = 0.0
    swap_in: int = 0
    swap_out: int = 0
    mem_total: int = 0
    mem_available: int = 0
    mem_used: int = 0
    mem_used_percent: float = 0.0
    mem_buffers: int = 0
    mem_cached: int = 0


def sum_cpu_time(times) -> float:
    """Total of all CPU time kinds; kinds the object lacks count as zero."""
    return sum(_time(times, attr) for attr, _ in _METRICS)


def cpu_percent_per_metric(times1: Sequence, times2: Sequence) -> list[CpuPercent]:
    """Percentages per CPU between two samples.

    Returns an empty list if the samples differ in length or time did not advance.
    """
    if len(times1) != len(times2):
        return []
    result: list[CpuPercent] = []
    for before, after in zip(times1, times2):
        total = sum_cpu_time(after) - sum_cpu_time(before)
        if total <= 0:
            return []
        values = {
            attr: max(_time(after, attr) - _time(before, attr), 0.0) / total * 100
            for attr, _ in _METRICS
        }
        result.append(CpuPercent(**values))
    return result


def max_per_metric(percents: Sequence[CpuPercent]) -> dict[str, MetricExtreme]:
    """For each metric, the CPU with the highest share; for Idle, the lowest."""
    extremes: dict[str, MetricExtreme] = {}
    for idx, percent in enumerate(percents):
        for attr, name in _METRICS:
            value = getattr(percent, attr)
            current = extremes.get(name)
            if current is None:
                extremes[name] = MetricExtreme(name, value, idx)
                continue
            better = value < current.value if name == "Idle" else value > current.value
            if better:
                current.value = value
                current.cpu_idx = idx
    return extremes


def get_net_ifaces(
    prefixes: Iterable[str] = (), path: str | os.PathLike = NET_DEV_PATH
) -> list[str]:
    """Names of the network interfaces in ``/proc/net/dev``, optionally filtered by prefix."""
    wanted = tuple(prefixes)
    names: list[str] = []
    for line in Path(path).read_text().splitlines():
        name, sep, _ = line.partition(":")
        if not sep:
            continue
        name = name.strip()
        if wanted and not name.startswith(wanted):
            continue
        names.append(name)
    return names


def get_os_mem_stats() -> OSMemStats:
    """Current swap and virtual memory statistics."""
    swap = psutil.swap_memory()
    mem = psutil.virtual_memory()
    return OSMemStats(
        swap_total=swap.total,
        swap_used=swap.used,
        swap_free=swap.free,
        swap_used_percent=swap.percent,
        swap_in=swap.sin,
        swap_out=swap.sout,
        mem_total=mem.total,
        mem_available=mem.available,
        mem_used=mem.used,
        mem_used_percent=mem.percent,
        mem_buffers=getattr(mem, "buffers", 0),
        mem_cached=getattr(mem, "cached", 0),
    )


CPU_PERCENT_FIELDS = tuple(f.name for f in fields(CpuPercent))