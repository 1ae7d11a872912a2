"""System and zkVM metrics shown on the dashboard."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from enum import Enum

import psutil

from nexusprover.system import CPU_UPDATE_INTERVAL

_MIB = 1024.0 * 1024.0
_POINTS_PER_PROOF = 300


class Color(Enum):
    """Display colours used by the dashboard."""

    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    GRAY = "gray"
    DARK_GRAY = "dark_gray"
    LIGHT_RED = "light_red"
    LIGHT_GREEN = "light_green"
    LIGHT_YELLOW = "light_yellow"
    LIGHT_BLUE = "light_blue"
    LIGHT_MAGENTA = "light_magenta"
    LIGHT_CYAN = "light_cyan"
    WHITE = "white"


# psutil computes CPU usage between two calls on the same Process object,
# so the objects are kept alive across updates.
_processes: dict[int, psutil.Process] = {}


def _tracked(pid: int) -> psutil.Process:
    process = _processes.get(pid)
    if process is None:
        process = psutil.Process(pid)
        _processes[pid] = process
    return process


def _total_memory() -> int:
    return psutil.virtual_memory().total


def _format_mb(num_bytes: int) -> str:
    mb = num_bytes / _MIB
    if mb >= 1024.0:
        return f"{mb / 1024.0:.1f} GB"
    return f"{mb:.1f} MB"


@dataclass
class SystemMetrics:
    """CPU and memory usage of this process and its proving subprocesses."""

    cpu_percent: float = 0.0
    ram_bytes: int = 0
    peak_ram_bytes: int = 0
    total_ram_bytes: int = field(default_factory=_total_memory)
    last_cpu_update: float | None = None

    @classmethod
    def update(
        cls,
        previous_peak: int,
        previous_metrics: SystemMetrics | None = None,
    ) -> "SystemMetrics":
        """Take a fresh sample, keeping track of the peak memory seen so far.

        CPU usage is only re-sampled once the minimum update interval has
        passed since the previous sample; otherwise the previous value is kept.
        """
        now = time.monotonic()
        last_update = previous_metrics.last_cpu_update if previous_metrics else None
        should_update_cpu = (
            last_update is None or now - last_update >= CPU_UPDATE_INTERVAL
        )

        cpu_total = 0.0
        ram_total = 0
        current = None
        try:
            current = _tracked(os.getpid())
            if should_update_cpu:
                cpu_total = current.cpu_percent(interval=None)
            else:
                cpu_total = previous_metrics.cpu_percent if previous_metrics else 0.0
            ram_total = current.memory_info().rss
        except psutil.Error:
            current = None

        if current is not None:
            live = set()
            try:
                children = current.children()
            except psutil.Error:
                children = []
            for child in children:
                try:
                    if "nexus" not in child.name().lower():
                        continue
                    tracked = _tracked(child.pid)
                    live.add(child.pid)
                    ram_total += tracked.memory_info().rss
                    if should_update_cpu:
                        cpu_total += tracked.cpu_percent(interval=None)
                except psutil.Error:
                    continue
            for pid in list(_processes):
                if pid != current.pid and pid not in live:
                    del _processes[pid]

        return cls(
            cpu_percent=cpu_total,
            ram_bytes=ram_total,
            peak_ram_bytes=max(previous_peak, ram_total),
            total_ram_bytes=_total_memory(),
            last_cpu_update=now if should_update_cpu else last_update,
        )

    def ram_ratio(self) -> float:
        """Process RAM as a fraction of total RAM."""
        if self.total_ram_bytes == 0:
            return 0.0
        return self.ram_bytes / self.total_ram_bytes

    def peak_ram_ratio(self) -> float:
        """Peak process RAM as a fraction of total RAM."""
        if self.total_ram_bytes == 0:
            return 0.0
        return self.peak_ram_bytes / self.total_ram_bytes

    def format_ram(self) -> str:
        return _format_mb(self.ram_bytes)

    def format_peak_ram(self) -> str:
        return _format_mb(self.peak_ram_bytes)

    def cpu_color(self) -> Color:
        if self.cpu_percent >= 80.0:
            return Color.RED
        if self.cpu_percent >= 60.0:
            return Color.YELLOW
        return Color.GREEN

    def ram_color(self) -> Color:
        ratio = self.ram_ratio()
        if ratio >= 0.8:
            return Color.RED
        if ratio >= 0.6:
            return Color.YELLOW
        return Color.GREEN


@dataclass
class ZkVMMetrics:
    """Counters for fetched and submitted tasks."""

    tasks_fetched: int = 0
    tasks_submitted: int = 0
    zkvm_runtime_secs: int = 0
    last_task_status: str = "None"
    total_points: int = 0

    def success_rate(self) -> float:
        """Submitted tasks as a percentage of fetched tasks."""
        if self.tasks_fetched == 0:
            return 0.0
        return self.tasks_submitted / self.tasks_fetched * 100.0

    def format_points(self) -> str:
        points = self.total_points
        if points >= 1_000_000:
            return f"{points / 1_000_000.0:.1f}M"
        if points >= 1_000:
            return f"{points // 1_000},{points % 1_000:03d}"
        return str(points)

    def success_rate_color(self) -> Color:
        rate = self.success_rate()
        if rate >= 75.0:
            return Color.GREEN
        if rate >= 50.0:
            return Color.YELLOW
        return Color.RED

    def format_runtime(self) -> str:
        hours, rest = divmod(self.zkvm_runtime_secs, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours > 0:
            return f"{hours}h {minutes}m {seconds}s"
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"


@dataclass
class TaskFetchInfo:
    """Backoff state of the task fetcher, for the countdown display."""

    backoff_duration_secs: int = 0
    time_since_last_fetch_secs: int = 0
    can_fetch_now: bool = True