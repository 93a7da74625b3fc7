"""Exceptions raised by resmon."""


class ProviderError(Exception):
    """A call to the OS-statistics provider failed."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class ProviderCancelled(ProviderError):
    """A provider call was abandoned because cancellation was requested."""

    def __init__(self, operation: str) -> None:
        super().__init__(operation, "cancelled")


class InitializationError(Exception):
    """
    Startup could not gather the static host facts.

    Fatal: the monitor must not be started after this is raised.
    """

    def __init__(self, errors: list[ProviderError]) -> None:
        super().__init__(f"initialization failed: {errors[0]}")
        self.errors = errors


class SamplingError(Exception):
    """A periodic sample failed. The snapshot keeps its previous values."""

    def __init__(self, metric: str, error: ProviderError) -> None:
        super().__init__(f"sampling {metric} failed: {error}")
        self.metric = metric
        self.error = error
