"""Exception hierarchy shared by the pipeline, store and dispatcher."""

from __future__ import annotations


class SubsidyNavigatorError(Exception):
    """Base class for all application errors."""


class ConfigError(SubsidyNavigatorError):
    """Raised when a configuration or candidates file cannot be used."""


class StoreError(SubsidyNavigatorError):
    """Raised when the document store rejects a read or write."""


class SummarizationError(SubsidyNavigatorError):
    """Raised when an AI call fails or returns a payload outside its schema."""

    def __init__(self, task: str, message: str) -> None:
        super().__init__(f"{task}: {message}")
        self.task = task


class FanoutError(SubsidyNavigatorError):
    """Raised when at least one call of the summarization fan-out failed."""

    def __init__(self, failures: dict[str, BaseException]) -> None:
        names = ", ".join(sorted(failures))
        super().__init__(f"summarization failed for: {names}")
        self.failures = failures


class DispatchError(SubsidyNavigatorError):
    """Raised when a pipeline run cannot be handed to its executor."""


__all__ = [
    "ConfigError",
    "DispatchError",
    "FanoutError",
    "StoreError",
    "SubsidyNavigatorError",
    "SummarizationError",
]
