"""System information and performance measurements."""

from __future__ import annotations

import functools
import math
import os
import platform
import sys
import time

import psutil

NUM_TESTS = 1_000_000
OPERATIONS_PER_ITERATION = 4  # sin, add, multiply, divide
NUM_REPEATS = 5
CPU_UPDATE_INTERVAL = 0.2

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_GIB = 1024.0**3


def num_cores() -> int:
    """Number of logical cores, at least 1."""
    return os.cpu_count() or 1


def _cpuinfo_mhz() -> int:
    try:
        with open("/proc/cpuinfo", encoding="utf-8") as handle:
            for line in handle:
                key, _, value = line.partition(":")
                if key.strip().lower() == "cpu mhz":
                    return int(float(value.strip()))
    except (OSError, ValueError):
        pass
    return 0


def cpu_stats() -> tuple[int, int]:
    """Return (logical_cores, frequency_MHz); the frequency is 0 if unknown."""
    time.sleep(CPU_UPDATE_INTERVAL)
    mhz = 0
    try:
        freq = psutil.cpu_freq()
    except (OSError, NotImplementedError, AttributeError):
        freq = None
    if freq is not None and freq.current:
        mhz = int(freq.current)
    if mhz <= 0:
        mhz = _cpuinfo_mhz()
    return num_cores(), mhz


def flops_per_cycle_per_core() -> int:
    """Double-precision operations per cycle per core for the baseline vector unit."""
    if platform.machine().lower() in ("x86_64", "amd64"):
        return 4
    return 1


def estimate_peak_gflops(num_provers: int) -> float:
    """Estimated peak GFLOP/s for the given number of prover threads."""
    _cores, mhz = cpu_stats()
    return (num_provers * mhz * flops_per_cycle_per_core()) / 1000.0


@functools.lru_cache(maxsize=None)
def measure_gflops() -> float:
    """Measured GFLOP/s of this machine; computed once and cached."""
    cores = os.cpu_count()
    if cores is None:
        print(
            "Warning: Unable to determine the number of logical cores. Defaulting to 1.",
            file=sys.stderr,
        )
        cores = 1

    total = 0.0
    for _ in range(NUM_REPEATS):
        start = time.perf_counter()
        flops = 0
        for _ in range(cores):
            x = 1.0
            for _ in range(NUM_TESTS):
                x = (math.sin(x) + 1.0) * 0.5 / 1.1
            flops += NUM_TESTS * OPERATIONS_PER_ITERATION
        elapsed = max(time.perf_counter() - start, 1e-9)
        total += flops / elapsed
    return (total / NUM_REPEATS) / 1e9


def get_memory_info() -> tuple[int, int]:
    """(process memory, total memory), each in thousandths of a MB."""
    program = psutil.Process(os.getpid()).memory_info().rss
    total = psutil.virtual_memory().total
    return bytes_to_mb_i32(program), bytes_to_mb_i32(total)


def total_memory_gb() -> float:
    """Total memory of the machine in GiB."""
    return psutil.virtual_memory().total / _GIB


def process_memory_gb() -> float:
    """Memory used by this process in GiB."""
    return psutil.Process(os.getpid()).memory_info().rss / _GIB


def bytes_to_mb_i32(num_bytes: int) -> int:
    """Bytes to MB scaled by 1000, rounded half away from zero, clamped to i32."""
    value = num_bytes * 1000.0 / 1_048_576.0
    rounded = math.floor(value + 0.5) if value >= 0 else -math.floor(-value + 0.5)
    return max(_I32_MIN, min(_I32_MAX, int(rounded)))