"""Data models for resmon."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class Platform:
    """Identity of the host operating system."""

    arch: str = ""
    os: str = ""
    platform: str = ""
    family: str = ""
    kernel: str = ""


@dataclass(slots=True, frozen=True)
class CpuInfo:
    """Static CPU facts gathered once at startup."""

    vendor_id: str = ""
    mhz: float = 0.0
    cache_size: int = 0  # KB
    cores: int = 0
    threads: int = 0


@dataclass(slots=True, frozen=True)
class CpuCore:
    """Load on a single logical CPU."""

    core_number: int
    load: float  # 0.0 - 100.0


@dataclass(slots=True, frozen=True)
class CpuLoad:
    """Aggregate and per-core CPU usage."""

    total: float = 0.0  # 0.0 - 100.0
    per_core: tuple[CpuCore, ...] = ()


@dataclass(slots=True, frozen=True)
class SystemMemory:
    """Virtual memory figures, total and available scaled by ``unit``."""

    unit: str = ""  # 'kb', 'mb' or 'gb'
    total: float = 0.0
    available: float = 0.0
    used: float = 0.0  # Percentage, unscaled


@dataclass(slots=True, frozen=True)
class SystemLoad:
    cpu: CpuLoad = field(default_factory=CpuLoad)
    memory: SystemMemory = field(default_factory=SystemMemory)


@dataclass(slots=True, frozen=True)
class SystemUptime:
    """Time since boot broken down into calendar units."""

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Immutable view of the last successfully published host state."""

    platform: Platform = field(default_factory=Platform)
    cpu: CpuInfo = field(default_factory=CpuInfo)
    system_load: SystemLoad = field(default_factory=SystemLoad)
    uptime: SystemUptime = field(default_factory=SystemUptime)

    def as_dict(self) -> dict[str, Any]:
        """
        Convert the snapshot to plain containers keyed for consumers.

        The key names are part of the external interface and must not change.
        """
        load = self.system_load
        return {
            "platform": {
                "arch": self.platform.arch,
                "os": self.platform.os,
                "platform": self.platform.platform,
                "family": self.platform.family,
                "kernel": self.platform.kernel,
            },
            "cpu": {
                "vendorId": self.cpu.vendor_id,
                "mhz": self.cpu.mhz,
                "cacheSize": self.cpu.cache_size,
                "cores": self.cpu.cores,
                "threads": self.cpu.threads,
            },
            "systemLoad": {
                "cpu": {
                    "total": load.cpu.total,
                    "perCore": [
                        {"coreNumber": core.core_number, "load": core.load}
                        for core in load.cpu.per_core
                    ],
                },
                "memory": {
                    "unit": load.memory.unit,
                    "total": load.memory.total,
                    "available": load.memory.available,
                    "used": load.memory.used,
                },
            },
            "uptime": {
                "years": self.uptime.years,
                "months": self.uptime.months,
                "days": self.uptime.days,
                "hours": self.uptime.hours,
                "minutes": self.uptime.minutes,
            },
        }
