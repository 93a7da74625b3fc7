"""Sampling scheduler for resmon."""

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from queue import Queue

from resmon import samplers
from resmon.config import SamplingIntervals
from resmon.errors import ProviderError, SamplingError
from resmon.initializer import initialize
from resmon.models import Snapshot
from resmon.provider import PsutilProvider, StatsProvider
from resmon.snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class ResourceMonitor:
    """
    Keeps a SnapshotStore up to date by sampling the host on fixed cadences.

    A daemon dispatch thread keeps one deadline per metric and hands each due
    sample to a worker pool, so a slow provider call never delays the other
    metrics. A metric whose previous sample is still running skips that tick.
    Sampling failures go onto a queue drained by a second daemon thread that
    logs them; neither thread stops because a sample failed.
    """

    def __init__(
        self,
        provider: StatsProvider | None = None,
        intervals: SamplingIntervals | None = None,
        store: SnapshotStore | None = None,
        cpu_window: float = samplers.CPU_OBSERVATION_WINDOW,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize the ResourceMonitor.

        Args:
            provider: Source of host facts. Defaults to PsutilProvider.
            intervals: Per-metric sampling cadence. Defaults to 3s/5s/1s.
            store: Snapshot to publish into. A new one is created if omitted.
            cpu_window: Observation window of one CPU load measurement (seconds).
            clock: Current local time, used for the uptime breakdown.
        """
        self._provider = provider if provider is not None else PsutilProvider()
        self._intervals = intervals if intervals is not None else SamplingIntervals()
        self._store = store if store is not None else SnapshotStore()
        self._cpu_window = cpu_window
        self._clock = clock
        self._stop_event = threading.Event()
        self._cancel = threading.Event()
        self._errors: Queue[SamplingError | None] = Queue()
        self._error_count = 0
        self._thread: threading.Thread | None = None
        self._error_thread: threading.Thread | None = None

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def intervals(self) -> SamplingIntervals:
        return self._intervals

    @property
    def error_count(self) -> int:
        """Number of sampling failures logged so far."""
        return self._error_count

    @property
    def is_running(self) -> bool:
        """Check if the dispatch thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def snapshot(self) -> Snapshot:
        """Return the last published snapshot."""
        return self._store.read()

    def initialize(self) -> None:
        """
        Gather the static host facts. Must succeed before ``start()``.

        Raises:
            InitializationError: Any of the startup provider calls failed.
        """
        initialize(self._provider, self._store, self._cancel)

    def start(self) -> None:
        """Start the dispatch and error-monitoring threads."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._cancel.clear()
        self._error_thread = threading.Thread(
            target=self._error_loop,
            daemon=True,
            name="ResourceMonitor-errors",
        )
        self._thread = threading.Thread(
            target=self._dispatch_loop,
            daemon=True,
            name="ResourceMonitor",
        )
        self._error_thread.start()
        self._thread.start()
        logger.info(
            "Sampling every %ss (cpu), %ss (memory), %ss (uptime)",
            self._intervals.cpu_load,
            self._intervals.memory,
            self._intervals.uptime,
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop both threads, cancelling any provider call in flight.

        A thread still alive after ``timeout`` is kept, so ``is_running`` stays
        true and ``start()`` does nothing until it has exited.

        Args:
            timeout: How long to wait for each thread to stop (seconds).
        """
        self._stop_event.set()
        self._cancel.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Dispatch thread still running %ss after stop", timeout)
            else:
                self._thread = None
        if self._error_thread is not None:
            self._errors.put(None)
            self._error_thread.join(timeout=timeout)
            if not self._error_thread.is_alive():
                self._error_thread = None

    def _samplers(self) -> dict[str, tuple[float, Callable[[], object]]]:
        provider, store, cancel = self._provider, self._store, self._cancel
        return {
            "cpu_load": (
                self._intervals.cpu_load,
                lambda: samplers.sample_cpu_load(provider, store, cancel, self._cpu_window),
            ),
            "memory": (
                self._intervals.memory,
                lambda: samplers.sample_memory(provider, store, cancel),
            ),
            "uptime": (
                self._intervals.uptime,
                lambda: samplers.sample_uptime(provider, store, cancel, self._clock),
            ),
        }

    def _dispatch_loop(self) -> None:
        """Hand each sampler to a worker whenever its interval elapses, until stopped."""
        jobs = self._samplers()
        started = time.monotonic()
        deadlines = {metric: started + interval for metric, (interval, _) in jobs.items()}
        in_flight: dict[str, Future] = {}

        with ThreadPoolExecutor(
            max_workers=len(jobs),
            thread_name_prefix="ResourceMonitor-sampler",
        ) as pool:
            while not self._stop_event.is_set():
                metric = min(deadlines, key=deadlines.__getitem__)
                delay = deadlines[metric] - time.monotonic()
                if delay > 0 and self._stop_event.wait(timeout=delay):
                    break

                interval, sample = jobs[metric]
                previous = in_flight.get(metric)
                if previous is not None and not previous.done():
                    logger.debug("Skipping %s tick, previous sample still running", metric)
                else:
                    in_flight[metric] = pool.submit(self._run_sampler, metric, sample)

                now = time.monotonic()
                deadline = deadlines[metric] + interval
                while deadline <= now:
                    deadline += interval
                deadlines[metric] = deadline

    def _run_sampler(self, metric: str, sample: Callable[[], object]) -> None:
        try:
            sample()
        except ProviderError as exc:
            if not self._stop_event.is_set():
                self._errors.put(SamplingError(metric, exc))
        except Exception:
            # Keep the loop alive; the next tick samples again
            logger.exception("Unexpected failure while sampling %s", metric)

    def _error_loop(self) -> None:
        """Log sampling failures as they arrive."""
        while True:
            error = self._errors.get()
            if error is None:
                break
            self._error_count += 1
            logger.warning("%s", error)
