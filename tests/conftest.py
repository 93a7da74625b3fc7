"""Shared fixtures for resmon tests."""

import threading
from collections import Counter

import pytest

from resmon.errors import ProviderCancelled
from resmon.models import Platform
from resmon.provider import CpuIdentity, VirtualMemory


class FakeProvider:
    """
    StatsProvider returning scripted values.

    Any value may be replaced by an exception instance, which is raised instead.
    """

    def __init__(self, **overrides) -> None:
        self.values = {
            "platform": Platform(
                arch="x86_64",
                os="ubuntu",
                platform="22.04",
                family="debian",
                kernel="6.5.0-14-generic",
            ),
            "physical_cores": 4,
            "logical_threads": 8,
            "cpu_identity": CpuIdentity(vendor_id="GenuineIntel", mhz=2400.0, cache_size=8192),
            "cpu_percent": 12.5,
            "per_cpu_percent": [10.0, 20.0, 5.0, 15.0],
            "virtual_memory": VirtualMemory(total=8_000_000_000, available=3_000_000_000, percent=62.5),
            "uptime_seconds": 90060,
        }
        self.values.update(overrides)
        self.calls: Counter[str] = Counter()
        self._lock = threading.Lock()

    def _result(self, name: str, cancel: threading.Event, window: float = 0.0):
        with self._lock:
            self.calls[name] += 1
        if cancel.is_set() or (window and cancel.wait(timeout=window)):
            raise ProviderCancelled(name)
        value = self.values[name]
        if isinstance(value, BaseException):
            raise value
        return value

    def platform(self, cancel):
        return self._result("platform", cancel)

    def physical_cores(self, cancel):
        return self._result("physical_cores", cancel)

    def logical_threads(self, cancel):
        return self._result("logical_threads", cancel)

    def cpu_identity(self, cancel):
        return self._result("cpu_identity", cancel)

    def cpu_percent(self, cancel, window):
        return self._result("cpu_percent", cancel, window)

    def per_cpu_percent(self, cancel, window):
        return self._result("per_cpu_percent", cancel, window)

    def virtual_memory(self, cancel):
        return self._result("virtual_memory", cancel)

    def uptime_seconds(self, cancel):
        return self._result("uptime_seconds", cancel)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def cancel() -> threading.Event:
    return threading.Event()
