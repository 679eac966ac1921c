"""Merge fan-out results into a subsidy record and persist it."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from ..store.base import DocumentStore
from .fanout import FanoutResult
from .records import CandidateItem, SubsidyRecord

_JAPANESE_DATE = re.compile(r"^(\d{4})年\s*(\d{1,2})月\s*(\d{1,2})日")
_FALLBACK_FORMATS = ("%Y/%m/%d", "%Y/%m/%d %H:%M", "%Y.%m.%d")


def new_record_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_deadline(value: str | None) -> datetime | None:
    """Parse an AI supplied deadline; ``None`` when empty or unparseable.

    Accepts ISO dates/datetimes, ``YYYY/MM/DD`` and ``YYYY年M月D日``.
    Naive values are taken as UTC.
    """

    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        match = _JAPANESE_DATE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            try:
                parsed = datetime(year, month, day)
            except ValueError:
                return None
        else:
            for fmt in _FALLBACK_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                except ValueError:
                    continue
                break
        if parsed is None:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None


class RecordAssembler:
    """Build subsidy records and write them under freshly generated ids."""

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        id_factory: Callable[[], str] = new_record_id,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.collection = collection
        self.id_factory = id_factory
        self.clock = clock

    def assemble(self, candidate: CandidateItem, result: FanoutResult) -> SubsidyRecord:
        now = self.clock()
        deadline = parse_deadline(result.client.deadline) or now
        return SubsidyRecord(
            id=self.id_factory(),
            name=candidate.name,
            source_url=candidate.url,
            deadline=deadline,
            processed_date=now,
            industry_tags=list(result.tags.industry_tags),
            summary_for_client=result.client,
            summary_for_accountant=result.accountant,
        )

    def persist(self, record: SubsidyRecord) -> None:
        self.store.set_document(self.collection, record.id, record.to_document())


__all__ = ["RecordAssembler", "new_record_id", "parse_deadline", "utcnow"]
