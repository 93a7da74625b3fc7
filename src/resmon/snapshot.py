"""Shared, lock-protected host snapshot."""

import threading
from dataclasses import replace

from resmon.models import CpuInfo, CpuLoad, Platform, Snapshot, SystemMemory, SystemUptime

_PUBLISHABLE = {
    "platform": Platform,
    "cpu": CpuInfo,
    "cpu_load": CpuLoad,
    "memory": SystemMemory,
    "uptime": SystemUptime,
}


class SnapshotStore:
    """
    Owner of the one Snapshot that samplers publish into and readers observe.

    Snapshots are immutable, so ``read()`` hands out the current one as is and
    ``publish()`` swaps in a new one under the lock. A reader therefore sees
    either all or none of a publish.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = Snapshot()

    def read(self) -> Snapshot:
        """Return the last published snapshot."""
        with self._lock:
            return self._snapshot

    def publish(self, **changes: object) -> Snapshot:
        """
        Atomically replace one or more sub-records of the snapshot.

        Args:
            **changes: Any of ``platform``, ``cpu``, ``cpu_load``, ``memory``
                and ``uptime``, each an instance of the matching model.

        Returns:
            The snapshot now visible to readers.
        """
        for name, value in changes.items():
            expected = _PUBLISHABLE.get(name)
            if expected is None:
                raise TypeError(f"cannot publish unknown field {name!r}")
            if not isinstance(value, expected):
                raise TypeError(f"{name} must be {expected.__name__}, got {type(value).__name__}")

        cpu_load = changes.pop("cpu_load", None)
        memory = changes.pop("memory", None)

        with self._lock:
            current = self._snapshot
            system_load = current.system_load
            if cpu_load is not None:
                system_load = replace(system_load, cpu=cpu_load)
            if memory is not None:
                system_load = replace(system_load, memory=memory)
            self._snapshot = replace(current, system_load=system_load, **changes)
            return self._snapshot
