"""Pipeline wiring record source, dedup, summarization fan-out and persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from uuid import uuid4

from .config import AppConfig
from .engine import (
    FANOUT_POOL,
    DeduplicationCheck,
    RecordAssembler,
    RecordSource,
    SubsidyRecord,
    SummarizationFanout,
    Summarizer,
    ThreadPoolManager,
    build_record_source,
)
from .logging_conf import run_logger
from .store.base import DocumentStore

FLOW_NAME = "fetch_and_process_subsidies"


@dataclass(slots=True)
class CandidateFailure:
    name: str
    url: str
    stage: str
    error: str


@dataclass(slots=True)
class PipelineResult:
    """Outcome of one pass over the record source."""

    records: list[SubsidyRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[CandidateFailure] = field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {
            "processed": len(self.records),
            "skipped": len(self.skipped),
            "failed": len(self.failures),
        }


class SubsidyPipeline:
    """Process candidates one at a time in source order.

    A failing candidate is logged and recorded, and the loop moves on to the
    next one; with ``fail_fast`` the exception propagates instead.
    """

    def __init__(
        self,
        source: RecordSource,
        dedup: DeduplicationCheck,
        fanout: SummarizationFanout,
        assembler: RecordAssembler,
        fail_fast: bool = False,
    ) -> None:
        self.source = source
        self.dedup = dedup
        self.fanout = fanout
        self.assembler = assembler
        self.fail_fast = fail_fast

    def run(self, run_id: str | None = None) -> PipelineResult:
        logger = run_logger(run_id or uuid4().hex)
        result = PipelineResult()
        for item in self.source.candidates():
            logger.info("candidate_processing", name=item.name, url=item.url)
            stage = "dedup"
            try:
                if self.dedup.has_url(item.url):
                    logger.info("duplicate_skipped", url=item.url)
                    result.skipped.append(item.url)
                    continue
                stage = "summarize"
                logger.info("summarization_started", url=item.url)
                summaries = self.fanout.run(item)
                stage = "persist"
                record = self.assembler.assemble(item, summaries)
                self.assembler.persist(record)
                logger.info("record_saved", record_id=record.id, url=item.url)
                result.records.append(record)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "candidate_failed",
                    url=item.url,
                    stage=stage,
                    error=str(exc),
                    exc_info=True,
                )
                if self.fail_fast:
                    raise
                result.failures.append(
                    CandidateFailure(name=item.name, url=item.url, stage=stage, error=str(exc))
                )
        logger.info("pipeline_complete", flow=FLOW_NAME, **result.summary())
        return result


def build_pipeline(
    config: AppConfig,
    store: DocumentStore,
    thread_pool: ThreadPoolManager,
    ai_client: Any,
    base_dir: Path,
) -> SubsidyPipeline:
    collection = config.store.collection
    summarizer = Summarizer(ai_client, config.ai)
    return SubsidyPipeline(
        source=build_record_source(config.source, base_dir),
        dedup=DeduplicationCheck(store, collection),
        fanout=SummarizationFanout(summarizer, thread_pool.get(FANOUT_POOL, max_workers=3)),
        assembler=RecordAssembler(store, collection),
        fail_fast=config.pipeline.fail_fast,
    )


__all__ = [
    "CandidateFailure",
    "FLOW_NAME",
    "PipelineResult",
    "SubsidyPipeline",
    "build_pipeline",
]
