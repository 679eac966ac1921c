"""Local document store keeping JSON payloads in SQLite."""

from __future__ import annotations

import json
import re
import sqlite3
from pathlib import Path
from threading import Lock

from ..errors import StoreError
from ..infra.storage import SQLiteManager
from .base import DocumentStore

_FIELD_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class SQLiteDocumentStore(DocumentStore):
    """Persist documents as JSON blobs keyed by ``(collection, id)``."""

    def __init__(self, manager: SQLiteManager, path: Path) -> None:
        self.manager = manager
        self.path = path
        self._lock = Lock()
        try:
            self._conn = self.manager.connect(path)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open SQLite store {path}: {exc}") from exc

    def find_by_field(
        self, collection: str, field: str, value: object, limit: int | None = None
    ) -> list[dict]:
        if not _FIELD_PATTERN.match(field):
            raise ValueError(f"Invalid field name: {field!r}")
        sql = (
            "SELECT id, payload FROM documents "
            "WHERE collection = ? AND json_extract(payload, ?) = ? ORDER BY rowid"
        )
        params: list[object] = [collection, f"$.{field}", value]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        try:
            with self._lock:
                rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Query on {collection}.{field} failed: {exc}") from exc
        return [self._decode(row) for row in rows]

    def set_document(self, collection: str, doc_id: str, document: dict) -> None:
        payload = dict(document)
        payload["id"] = doc_id
        try:
            with self._lock:
                self._conn.execute(
                    "INSERT OR REPLACE INTO documents(collection, id, payload, updated_at) "
                    "VALUES (?, ?, ?, datetime('now'))",
                    (collection, doc_id, json.dumps(payload, ensure_ascii=False)),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Write to {collection}/{doc_id} failed: {exc}") from exc

    def get_document(self, collection: str, doc_id: str) -> dict | None:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT id, payload FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Read of {collection}/{doc_id} failed: {exc}") from exc
        return self._decode(row) if row is not None else None

    def list_documents(self, collection: str) -> list[dict]:
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT id, payload FROM documents WHERE collection = ? ORDER BY rowid",
                    (collection,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Listing {collection} failed: {exc}") from exc
        return [self._decode(row) for row in rows]

    def close(self) -> None:
        self.manager.close(self.path)

    @staticmethod
    def _decode(row: sqlite3.Row) -> dict:
        document = json.loads(row["payload"])
        document["id"] = row["id"]
        return document


__all__ = ["SQLiteDocumentStore"]
