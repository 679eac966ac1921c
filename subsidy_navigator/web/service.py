"""Read access to stored subsidy records for the listing API."""

from __future__ import annotations

from datetime import timezone

from pydantic import ValidationError

from ..engine.records import SubsidyRecord
from ..logging_conf import configure_logging
from ..store.base import DocumentStore


class SubsidyService:
    """Load subsidy documents and present them ordered by deadline."""

    def __init__(self, store: DocumentStore, collection: str) -> None:
        self.store = store
        self.collection = collection
        self.logger = configure_logging().bind(component="subsidy_service")

    def list_subsidies(self) -> list[SubsidyRecord]:
        records: list[SubsidyRecord] = []
        for document in self.store.list_documents(self.collection):
            record = self._parse(document)
            if record is not None:
                records.append(record)
        records.sort(key=lambda record: record.deadline)
        return records

    def get_subsidy(self, subsidy_id: str) -> SubsidyRecord | None:
        document = self.store.get_document(self.collection, subsidy_id)
        if document is None:
            return None
        return self._parse(document)

    def _parse(self, document: dict) -> SubsidyRecord | None:
        try:
            record = SubsidyRecord.model_validate(document)
        except ValidationError as exc:
            self.logger.warning(
                "malformed_subsidy_document", document_id=document.get("id"), error=str(exc)
            )
            return None
        # Other writers may store naive datetimes; those are UTC
        if record.deadline.tzinfo is None:
            record.deadline = record.deadline.replace(tzinfo=timezone.utc)
        if record.processed_date.tzinfo is None:
            record.processed_date = record.processed_date.replace(tzinfo=timezone.utc)
        return record


__all__ = ["SubsidyService"]
