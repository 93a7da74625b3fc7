"""OS-statistics provider backed by psutil and py-cpuinfo."""

import logging
import platform as platform_info
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NamedTuple, Protocol

import cpuinfo
import psutil

from resmon.errors import ProviderCancelled, ProviderError
from resmon.models import Platform

logger = logging.getLogger(__name__)


class CpuIdentity(NamedTuple):
    vendor_id: str
    mhz: float
    cache_size: int  # KB


class VirtualMemory(NamedTuple):
    total: int  # Bytes
    available: int  # Bytes
    percent: float


class StatsProvider(Protocol):
    """
    Source of raw host facts.

    Every call takes a cancellation event and raises ProviderError on failure,
    or ProviderCancelled once the event is set.
    """

    def platform(self, cancel: threading.Event) -> Platform: ...

    def physical_cores(self, cancel: threading.Event) -> int: ...

    def logical_threads(self, cancel: threading.Event) -> int: ...

    def cpu_identity(self, cancel: threading.Event) -> CpuIdentity: ...

    def cpu_percent(self, cancel: threading.Event, window: float) -> float: ...

    def per_cpu_percent(self, cancel: threading.Event, window: float) -> list[float]: ...

    def virtual_memory(self, cancel: threading.Event) -> VirtualMemory: ...

    def uptime_seconds(self, cancel: threading.Event) -> int: ...


@contextmanager
def _guard(operation: str, cancel: threading.Event) -> Iterator[None]:
    """Reject cancelled calls and wrap library failures in ProviderError."""
    if cancel.is_set():
        raise ProviderCancelled(operation)
    try:
        yield
    except ProviderError:
        raise
    except Exception as exc:
        raise ProviderError(operation, str(exc) or type(exc).__name__) from exc


def _os_release() -> dict[str, str]:
    """Read /etc/os-release style fields, empty where the host has none."""
    try:
        return platform_info.freedesktop_os_release()
    except OSError as exc:
        logger.debug("No os-release data, using platform.system(): %s", exc)
        return {}


class PsutilProvider:
    """
    StatsProvider reading the local host.

    CPU percentages are measured between two non-blocking psutil samples taken
    ``window`` seconds apart, so a cancellation ends the window early. psutil
    keeps the previous sample module-wide: only one caller should measure the
    aggregate (or per-CPU) percentage at a time.
    """

    def platform(self, cancel: threading.Event) -> Platform:
        with _guard("platform", cancel):
            release = _os_release()
            distro = release.get("ID") or platform_info.system().lower()
            family = release.get("ID_LIKE", "").split() or [distro]
            return Platform(
                arch=platform_info.machine(),
                os=distro,
                platform=release.get("VERSION_ID") or platform_info.version(),
                family=family[0],
                kernel=platform_info.release(),
            )

    def physical_cores(self, cancel: threading.Event) -> int:
        return self._cpu_count("physical_cores", cancel, logical=False)

    def logical_threads(self, cancel: threading.Event) -> int:
        return self._cpu_count("logical_threads", cancel, logical=True)

    def _cpu_count(self, operation: str, cancel: threading.Event, logical: bool) -> int:
        with _guard(operation, cancel):
            count = psutil.cpu_count(logical=logical)
            if not count:
                raise ProviderError(operation, "count not available on this platform")
            return count

    def cpu_identity(self, cancel: threading.Event) -> CpuIdentity:
        with _guard("cpu_identity", cancel):
            info = cpuinfo.get_cpu_info()
            cache = info.get("l3_cache_size") or info.get("l2_cache_size") or 0
            freq = psutil.cpu_freq()
            if freq is not None and freq.current:
                mhz = float(freq.current)
            else:
                mhz = info.get("hz_advertised", (0, 0))[0] / 1_000_000
            return CpuIdentity(
                vendor_id=info.get("vendor_id_raw", ""),
                mhz=mhz,
                cache_size=cache // 1024 if isinstance(cache, int) else 0,
            )

    def cpu_percent(self, cancel: threading.Event, window: float) -> float:
        return self._measure_percent("cpu_percent", cancel, window, percpu=False)

    def per_cpu_percent(self, cancel: threading.Event, window: float) -> list[float]:
        return self._measure_percent("per_cpu_percent", cancel, window, percpu=True)

    def _measure_percent(
        self,
        operation: str,
        cancel: threading.Event,
        window: float,
        percpu: bool,
    ) -> float | list[float]:
        with _guard(operation, cancel):
            # First call only records the baseline
            psutil.cpu_percent(interval=None, percpu=percpu)
            if cancel.wait(timeout=window):
                raise ProviderCancelled(operation)
            return psutil.cpu_percent(interval=None, percpu=percpu)

    def virtual_memory(self, cancel: threading.Event) -> VirtualMemory:
        with _guard("virtual_memory", cancel):
            mem = psutil.virtual_memory()
            return VirtualMemory(total=mem.total, available=mem.available, percent=mem.percent)

    def uptime_seconds(self, cancel: threading.Event) -> int:
        with _guard("uptime_seconds", cancel):
            uptime = int(time.time() - psutil.boot_time())
            if uptime < 0:
                raise ProviderError("uptime_seconds", f"boot time is in the future ({uptime}s)")
            return uptime
