"""Document store contract used by the pipeline and the HTTP API."""

from __future__ import annotations

from abc import ABC, abstractmethod


class DocumentStore(ABC):
    """Collection/identifier addressed JSON document storage."""

    @abstractmethod
    def find_by_field(
        self, collection: str, field: str, value: object, limit: int | None = None
    ) -> list[dict]:
        """Return documents whose ``field`` equals ``value`` exactly."""

    @abstractmethod
    def set_document(self, collection: str, doc_id: str, document: dict) -> None:
        """Write ``document`` under ``doc_id``, replacing any previous content."""

    @abstractmethod
    def get_document(self, collection: str, doc_id: str) -> dict | None:
        """Return a single document or ``None``."""

    @abstractmethod
    def list_documents(self, collection: str) -> list[dict]:
        """Return every document in ``collection``."""

    def exists(self, collection: str, field: str, value: object) -> bool:
        return bool(self.find_by_field(collection, field, value, limit=1))

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["DocumentStore"]
