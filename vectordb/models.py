"""
Data models for the collection access layer.
These define the shape of data flowing between callers, the access layer
and the backends.

Metadata keeps the recognized keys (source, category, filePath, title,
lastModified) as typed fields and everything else in `extra`. The stored
and serialized form uses the original camelCase keys so backups and the
tool surface stay interchangeable with existing collections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from vectordb.errors import InvalidArgument

SCALAR_TYPES = (str, int, float, bool)

# serialized key -> attribute name
RECOGNIZED_KEYS = {
    "source": "source",
    "category": "category",
    "filePath": "file_path",
    "title": "title",
    "lastModified": "last_modified",
}


def parse_timestamp(value) -> datetime | None:
    """
    Parse an ISO-8601 string into an aware datetime (naive -> UTC).
    Returns None for missing or unparseable values.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass
class DocumentMetadata:
    """Recognized metadata fields plus an open extension map."""
    source: str | None = None
    category: str | None = None
    file_path: str | None = None
    title: str | None = None
    last_modified: str | None = None    # ISO-8601
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict | None) -> DocumentMetadata:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidArgument(f"metadata must be an object, got {type(data).__name__}")
        known: dict = {}
        extra: dict = {}
        for key, value in data.items():
            if value is None:
                continue
            if not isinstance(key, str):
                raise InvalidArgument(f"metadata keys must be strings, got {key!r}")
            if not isinstance(value, SCALAR_TYPES):
                raise InvalidArgument(
                    f"metadata value for '{key}' must be a string, number or boolean"
                )
            if key in RECOGNIZED_KEYS:
                known[RECOGNIZED_KEYS[key]] = value
            else:
                extra[key] = value
        return cls(extra=extra, **known)

    def to_dict(self) -> dict:
        """Flat mapping in stored form; unset fields are omitted."""
        out = dict(self.extra)
        for key, attr in RECOGNIZED_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out

    @property
    def last_modified_at(self) -> datetime | None:
        return parse_timestamp(self.last_modified)


@dataclass
class Document:
    """The unit of storage. Re-using an id overwrites the stored document."""
    id: str
    content: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @classmethod
    def from_dict(cls, data: dict) -> Document:
        if not isinstance(data, dict):
            raise InvalidArgument("document must be an object")
        doc_id = data.get("id")
        content = data.get("content")
        if not isinstance(doc_id, str) or not doc_id:
            raise InvalidArgument("document 'id' must be a non-empty string")
        if not isinstance(content, str) or not content:
            raise InvalidArgument(f"document '{doc_id}' has empty or non-string 'content'")
        metadata = data.get("metadata")
        if isinstance(metadata, DocumentMetadata):
            return cls(id=doc_id, content=content, metadata=metadata)
        return cls(id=doc_id, content=content, metadata=DocumentMetadata.from_dict(metadata))

    def to_dict(self) -> dict:
        return {"id": self.id, "content": self.content, "metadata": self.metadata.to_dict()}


@dataclass
class QueryOptions:
    limit: int = 5
    threshold: float = 0.7
    category: str | None = None
    source: str | None = None

    def validate(self):
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
            raise InvalidArgument(f"limit must be a positive integer, got {self.limit!r}")
        if not isinstance(self.threshold, (int, float)) or not 0.0 <= self.threshold <= 1.0:
            raise InvalidArgument(f"threshold must be within [0, 1], got {self.threshold!r}")

    def where(self) -> dict | None:
        """Backend-side metadata predicate for the category/source filters."""
        clauses = []
        if self.category:
            clauses.append({"category": self.category})
        if self.source:
            clauses.append({"source": self.source})
        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}


@dataclass
class QueryResult:
    id: str
    content: str
    metadata: DocumentMetadata
    score: float          # similarity in [0, 1], higher is closer
    distance: float       # raw backend distance

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "metadata": self.metadata.to_dict(),
            "score": self.score,
        }


@dataclass
class CollectionStats:
    total_documents: int = 0
    categories: dict[str, int] = field(default_factory=dict)
    sources: dict[str, int] = field(default_factory=dict)
    average_chunk_size: int = 0
    last_updated: str = ""

    def to_dict(self) -> dict:
        return {
            "totalDocuments": self.total_documents,
            "categories": dict(self.categories),
            "sources": dict(self.sources),
            "averageChunkSize": self.average_chunk_size,
            "lastUpdated": self.last_updated,
        }
