"""Periodic samplers that refresh the dynamic parts of the snapshot."""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime

from resmon.models import CpuCore, CpuLoad, SystemMemory, SystemUptime
from resmon.provider import StatsProvider
from resmon.snapshot import SnapshotStore
from resmon.units import select_unit
from resmon.uptime import compute_uptime

CPU_OBSERVATION_WINDOW = 1.0  # Seconds


def sample_cpu_load(
    provider: StatsProvider,
    store: SnapshotStore,
    cancel: threading.Event,
    window: float = CPU_OBSERVATION_WINDOW,
) -> CpuLoad:
    """
    Measure aggregate and per-core CPU usage and publish both together.

    Both measurements observe the same ``window`` on separate threads. If
    either fails its error is raised and the published CPU load is untouched.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="resmon-cpu") as pool:
        total = pool.submit(provider.cpu_percent, cancel, window)
        per_core = pool.submit(provider.per_cpu_percent, cancel, window)
        wait([total, per_core])

    # result() re-raises the provider error of a failed measurement
    cpu_load = CpuLoad(
        total=float(total.result()),
        per_core=tuple(
            CpuCore(core_number=index, load=float(load))
            for index, load in enumerate(per_core.result())
        ),
    )
    store.publish(cpu_load=cpu_load)
    return cpu_load


def sample_memory(
    provider: StatsProvider,
    store: SnapshotStore,
    cancel: threading.Event,
) -> SystemMemory:
    """Publish total and available memory in a unit picked from the total."""
    mem = provider.virtual_memory(cancel)
    divisor, unit = select_unit(mem.total)
    memory = SystemMemory(
        unit=unit,
        total=mem.total / divisor,
        available=mem.available / divisor,
        used=float(mem.percent),
    )
    store.publish(memory=memory)
    return memory


def sample_uptime(
    provider: StatsProvider,
    store: SnapshotStore,
    cancel: threading.Event,
    clock: Callable[[], datetime] = datetime.now,
) -> SystemUptime:
    """Publish the calendar breakdown of the time since boot."""
    boot_seconds = provider.uptime_seconds(cancel)
    uptime = compute_uptime(boot_seconds, clock())
    store.publish(uptime=uptime)
    return uptime
