"""
Tests for document, metadata and query-option models.
"""

from datetime import timezone

import pytest

from vectordb.errors import InvalidArgument
from vectordb.models import (
    CollectionStats,
    Document,
    DocumentMetadata,
    QueryOptions,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_zulu_suffix(self):
        ts = parse_timestamp("2026-09-01T08:00:00Z")
        assert ts.tzinfo is not None
        assert ts.hour == 8

    def test_naive_is_utc(self):
        assert parse_timestamp("2026-09-01T08:00:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [None, "", "yesterday", 1700000000])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None


class TestMetadata:
    def test_recognized_keys_split_from_extra(self):
        meta = DocumentMetadata.from_dict({
            "source": "docs", "filePath": "a.md", "lastModified": "2026-01-01", "owner": "ops",
        })
        assert meta.source == "docs"
        assert meta.file_path == "a.md"
        assert meta.last_modified == "2026-01-01"
        assert meta.extra == {"owner": "ops"}

    def test_to_dict_uses_stored_keys(self):
        meta = DocumentMetadata(title="T", file_path="x.md", extra={"chunkIndex": 2})
        assert meta.to_dict() == {"title": "T", "filePath": "x.md", "chunkIndex": 2}

    def test_none_values_dropped(self):
        assert DocumentMetadata.from_dict({"category": None}).to_dict() == {}

    def test_nested_values_rejected(self):
        with pytest.raises(InvalidArgument):
            DocumentMetadata.from_dict({"tags": ["a", "b"]})


class TestDocument:
    def test_requires_id_and_content(self):
        with pytest.raises(InvalidArgument):
            Document.from_dict({"id": "", "content": "x"})
        with pytest.raises(InvalidArgument):
            Document.from_dict({"id": "a", "content": ""})

    def test_metadata_optional(self):
        doc = Document.from_dict({"id": "a", "content": "text"})
        assert doc.to_dict() == {"id": "a", "content": "text", "metadata": {}}


class TestQueryOptions:
    @pytest.mark.parametrize("limit", [0, -1, True, 2.5])
    def test_bad_limit(self, limit):
        with pytest.raises(InvalidArgument):
            QueryOptions(limit=limit).validate()

    @pytest.mark.parametrize("threshold", [-0.1, 1.01, "high"])
    def test_bad_threshold(self, threshold):
        with pytest.raises(InvalidArgument):
            QueryOptions(threshold=threshold).validate()

    def test_where_clauses(self):
        assert QueryOptions().where() is None
        assert QueryOptions(category="auth").where() == {"category": "auth"}
        assert QueryOptions(category="auth", source="docs").where() == {
            "$and": [{"category": "auth"}, {"source": "docs"}]
        }


def test_stats_serialized_form():
    stats = CollectionStats(total_documents=2, categories={"a": 2}, sources={"docs": 2},
                            average_chunk_size=10, last_updated="2026-01-01T00:00:00")
    assert stats.to_dict() == {
        "totalDocuments": 2,
        "categories": {"a": 2},
        "sources": {"docs": 2},
        "averageChunkSize": 10,
        "lastUpdated": "2026-01-01T00:00:00",
    }
