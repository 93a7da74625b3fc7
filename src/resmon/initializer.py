"""One-shot gathering of static host facts."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from resmon.errors import InitializationError, ProviderError
from resmon.models import CpuInfo
from resmon.provider import StatsProvider
from resmon.snapshot import SnapshotStore

logger = logging.getLogger(__name__)


def initialize(provider: StatsProvider, store: SnapshotStore, cancel: threading.Event) -> None:
    """
    Populate the static snapshot fields: platform, core and thread counts, CPU identity.

    The four provider calls run in parallel and are all awaited before
    anything is published. Nothing is published if any of them fails.

    Raises:
        InitializationError: One or more calls failed. Every failure is kept
            in ``errors`` in the order the tasks finished, so the first entry
            is the first failure observed.
    """
    tasks = {
        "platform": provider.platform,
        "cores": provider.physical_cores,
        "threads": provider.logical_threads,
        "identity": provider.cpu_identity,
    }

    results = {}
    errors: list[ProviderError] = []
    with ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="resmon-init") as pool:
        futures = {pool.submit(call, cancel): name for name, call in tasks.items()}
        for future in as_completed(futures):
            name = futures[future]
            try:
                results[name] = future.result()
            except ProviderError as exc:
                logger.debug("Initialization task %s failed: %s", name, exc)
                errors.append(exc)

    if errors:
        raise InitializationError(errors) from errors[0]

    identity = results["identity"]
    store.publish(
        platform=results["platform"],
        cpu=CpuInfo(
            vendor_id=identity.vendor_id,
            mhz=identity.mhz,
            cache_size=identity.cache_size,
            cores=results["cores"],
            threads=results["threads"],
        ),
    )
    logger.info(
        "Initialized: %s %s (%s), %d cores / %d threads",
        results["platform"].os,
        results["platform"].platform,
        results["platform"].arch,
        results["cores"],
        results["threads"],
    )
