"""Source-URL deduplication against the document store."""

from __future__ import annotations

from ..store.base import DocumentStore

SOURCE_URL_FIELD = "source_url"


class DeduplicationCheck:
    """Tell whether a subsidy with the same source URL is already stored.

    URLs are compared verbatim: ``https://a/x`` and ``https://a/x/`` are
    different records.
    """

    def __init__(self, store: DocumentStore, collection: str) -> None:
        self.store = store
        self.collection = collection

    def has_url(self, url: str) -> bool:
        if not url:
            raise ValueError("url must be a non-empty string")
        return self.store.exists(self.collection, SOURCE_URL_FIELD, url)


__all__ = ["DeduplicationCheck", "SOURCE_URL_FIELD"]
