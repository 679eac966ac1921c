"""Named thread pools for the summarization fan-out and pipeline runs."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import Dict

FANOUT_POOL = "fanout"
RUNS_POOL = "runs"


class ThreadPoolManager:
    """Manage the shared pool plus lazily created named pools."""

    def __init__(self, default_workers: int = 4) -> None:
        self.default_workers = default_workers
        self._default_executor = ThreadPoolExecutor(
            max_workers=default_workers, thread_name_prefix="navigator"
        )
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = Lock()

    def get(self, name: str | None = None, max_workers: int | None = None) -> ThreadPoolExecutor:
        if name is None:
            return self._default_executor
        with self._lock:
            if name not in self._executors:
                workers = max_workers or self.default_workers
                self._executors[name] = ThreadPoolExecutor(
                    max_workers=workers, thread_name_prefix=f"navigator-{name}"
                )
            return self._executors[name]

    def shutdown(self, wait: bool = False) -> None:
        self._default_executor.shutdown(wait=wait)
        with self._lock:
            for executor in self._executors.values():
                executor.shutdown(wait=wait)
            self._executors.clear()


__all__ = ["FANOUT_POOL", "RUNS_POOL", "ThreadPoolManager"]
