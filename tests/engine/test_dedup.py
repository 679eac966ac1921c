from __future__ import annotations

import pytest

from subsidy_navigator.engine import DeduplicationCheck

from tests.conftest import COLLECTION


def test_has_url_matches_stored_source_url(sqlite_store) -> None:
    sqlite_store.set_document(COLLECTION, "r1", {"source_url": "https://example.jp/x"})
    check = DeduplicationCheck(sqlite_store, COLLECTION)

    assert check.has_url("https://example.jp/x") is True
    assert check.has_url("https://example.jp/y") is False


def test_urls_are_compared_verbatim(sqlite_store) -> None:
    sqlite_store.set_document(COLLECTION, "r1", {"source_url": "https://example.jp/x"})
    check = DeduplicationCheck(sqlite_store, COLLECTION)

    assert check.has_url("https://example.jp/x/") is False
    assert check.has_url("HTTPS://EXAMPLE.JP/x") is False


def test_collections_are_separate(sqlite_store) -> None:
    sqlite_store.set_document("archive", "r1", {"source_url": "https://example.jp/x"})
    assert DeduplicationCheck(sqlite_store, COLLECTION).has_url("https://example.jp/x") is False


def test_empty_url_is_rejected(sqlite_store) -> None:
    with pytest.raises(ValueError):
        DeduplicationCheck(sqlite_store, COLLECTION).has_url("")
