"""Engine components: source → dedup → summarization fan-out → assembly."""

from .assembly import RecordAssembler, parse_deadline
from .dedup import DeduplicationCheck
from .fanout import FanoutResult, SummarizationFanout, join_all
from .records import (
    AccountantSummary,
    CandidateItem,
    ClientSummary,
    IndustryTags,
    SubsidyRecord,
)
from .source import FileRecordSource, RecordSource, StaticRecordSource, build_record_source
from .summarizer import Summarizer, build_ai_client
from .thread_pool import FANOUT_POOL, RUNS_POOL, ThreadPoolManager

__all__ = [
    "AccountantSummary",
    "CandidateItem",
    "ClientSummary",
    "DeduplicationCheck",
    "FANOUT_POOL",
    "FanoutResult",
    "FileRecordSource",
    "IndustryTags",
    "RUNS_POOL",
    "RecordAssembler",
    "RecordSource",
    "StaticRecordSource",
    "SubsidyRecord",
    "SummarizationFanout",
    "Summarizer",
    "ThreadPoolManager",
    "build_ai_client",
    "build_record_source",
    "join_all",
    "parse_deadline",
]
