"""Sampling configuration."""

from dataclasses import dataclass, fields


@dataclass(slots=True, frozen=True)
class SamplingIntervals:
    """Seconds between two samples of each dynamic metric."""

    cpu_load: float = 3.0
    memory: float = 5.0
    uptime: float = 1.0

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if value <= 0:
                raise ValueError(f"{item.name} interval must be positive, got {value}")
