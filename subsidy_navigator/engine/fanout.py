"""Concurrent summarization fan-out joined before record assembly."""

from __future__ import annotations

from concurrent.futures import Executor, Future, wait
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ..errors import FanoutError
from .records import AccountantSummary, CandidateItem, ClientSummary, IndustryTags
from .summarizer import (
    ACCOUNTANT_SUMMARY_TASK,
    CLIENT_SUMMARY_TASK,
    TAGGING_TASK,
    Summarizer,
)


def join_all(executor: Executor, calls: Mapping[str, Callable[[], Any]]) -> dict[str, Any]:
    """Run every named call concurrently and wait for all of them.

    Returns results by name only when every call succeeded; otherwise raises
    ``FanoutError`` carrying each failure after all calls have returned.
    """

    futures: dict[str, Future] = {name: executor.submit(call) for name, call in calls.items()}
    wait(futures.values())
    failures: dict[str, BaseException] = {}
    results: dict[str, Any] = {}
    for name, future in futures.items():
        exc = future.exception()
        if exc is not None:
            failures[name] = exc
        else:
            results[name] = future.result()
    if failures:
        first = next(iter(failures.values()))
        raise FanoutError(failures) from first
    return results


@dataclass(slots=True)
class FanoutResult:
    client: ClientSummary
    accountant: AccountantSummary
    tags: IndustryTags


class SummarizationFanout:
    """Issue the client, accountant and tagging prompts together."""

    def __init__(self, summarizer: Summarizer, executor: Executor) -> None:
        self.summarizer = summarizer
        self.executor = executor

    def run(self, candidate: CandidateItem) -> FanoutResult:
        results = join_all(
            self.executor,
            {
                CLIENT_SUMMARY_TASK: lambda: self.summarizer.summarize_for_client(
                    candidate.url, candidate.content
                ),
                ACCOUNTANT_SUMMARY_TASK: lambda: self.summarizer.summarize_for_accountant(
                    candidate.url, candidate.content
                ),
                TAGGING_TASK: lambda: self.summarizer.tag_industries(
                    candidate.name, candidate.content
                ),
            },
        )
        return FanoutResult(
            client=results[CLIENT_SUMMARY_TASK],
            accountant=results[ACCOUNTANT_SUMMARY_TASK],
            tags=results[TAGGING_TASK],
        )


__all__ = ["FanoutResult", "SummarizationFanout", "join_all"]
