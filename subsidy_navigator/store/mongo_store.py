"""MongoDB document store implementation."""

from __future__ import annotations

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from ..errors import StoreError
from .base import DocumentStore


class MongoDocumentStore(DocumentStore):
    """Keep each collection in a MongoDB collection, ``_id`` = document id."""

    def __init__(self, uri: str, database: str, client: MongoClient | None = None) -> None:
        self.uri = uri
        self.client = client if client is not None else MongoClient(uri)
        self.database = self.client[database]

    def find_by_field(
        self, collection: str, field: str, value: object, limit: int | None = None
    ) -> list[dict]:
        try:
            cursor = self.database[collection].find({field: value})
            if limit is not None:
                cursor = cursor.limit(limit)
            return [self._decode(doc) for doc in cursor]
        except PyMongoError as exc:
            raise StoreError(f"Query on {collection}.{field} failed: {exc}") from exc

    def set_document(self, collection: str, doc_id: str, document: dict) -> None:
        payload = dict(document)
        payload["id"] = doc_id
        payload["_id"] = doc_id
        try:
            self.database[collection].replace_one({"_id": doc_id}, payload, upsert=True)
        except PyMongoError as exc:
            raise StoreError(f"Write to {collection}/{doc_id} failed: {exc}") from exc

    def get_document(self, collection: str, doc_id: str) -> dict | None:
        try:
            doc = self.database[collection].find_one({"_id": doc_id})
        except PyMongoError as exc:
            raise StoreError(f"Read of {collection}/{doc_id} failed: {exc}") from exc
        return self._decode(doc) if doc is not None else None

    def list_documents(self, collection: str) -> list[dict]:
        try:
            return [self._decode(doc) for doc in self.database[collection].find({})]
        except PyMongoError as exc:
            raise StoreError(f"Listing {collection} failed: {exc}") from exc

    def close(self) -> None:
        self.client.close()

    @staticmethod
    def _decode(doc: dict) -> dict:
        decoded = dict(doc)
        doc_id = decoded.pop("_id", None)
        decoded.setdefault("id", str(doc_id) if doc_id is not None else None)
        return decoded


__all__ = ["MongoDocumentStore"]
