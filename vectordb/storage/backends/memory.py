"""
InMemoryBackend: pure-Python VectorBackend.

Same result shapes and error kinds as ChromaBackend, with no server and no
persistence. Used by the test suite and for quick local experiments
(store.backend: memory).

Distances are cosine distances (1 - cosine similarity), matching a Chroma
collection created with hnsw:space=cosine.
"""

from __future__ import annotations

import logging
import math

from vectordb.errors import InvalidArgument, ProviderMismatch
from .base import DEFAULT_MAX_BATCH_SIZE, VectorBackend

logger = logging.getLogger(__name__)


def _cosine_distance(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))
    if norm_a == 0 or norm_b == 0:
        return 1.0
    return 1.0 - dot / (norm_a * norm_b)


def _matches(metadata: dict, where: dict | None) -> bool:
    """Evaluate the subset of Chroma's where-syntax the access layer emits."""
    if not where:
        return True
    for key, cond in where.items():
        if key == "$and":
            if not all(_matches(metadata, c) for c in cond):
                return False
        elif key == "$or":
            if not any(_matches(metadata, c) for c in cond):
                return False
        elif isinstance(cond, dict):
            op, value = next(iter(cond.items()))
            if op == "$eq" and metadata.get(key) != value:
                return False
            if op == "$ne" and metadata.get(key) == value:
                return False
            if op == "$in" and metadata.get(key) not in value:
                return False
        elif metadata.get(key) != cond:
            return False
    return True


class _Collection:
    def __init__(self, metadata: dict):
        self.metadata = dict(metadata)
        self.dimension: int | None = None
        # id -> (embedding, document, metadata); dict keeps insertion order
        self.items: dict[str, tuple[list[float], str, dict]] = {}


class InMemoryBackend(VectorBackend):
    """Process-local vector storage."""

    def __init__(self, max_batch_size: int = DEFAULT_MAX_BATCH_SIZE):
        self.max_batch_size = max_batch_size
        self._collections: dict[str, _Collection] = {}
        self._current: _Collection | None = None

    def connect(self, collection: str, metadata: dict) -> dict:
        if collection not in self._collections:
            self._collections[collection] = _Collection(metadata)
            logger.info("Created in-memory collection '%s'", collection)
        self._current = self._collections[collection]
        return dict(self._current.metadata)

    def _require_collection(self) -> _Collection:
        if self._current is None:
            raise RuntimeError("InMemoryBackend.connect() must be called first")
        return self._current

    def _check_dimension(self, coll: _Collection, vector: list[float]):
        if coll.dimension is not None and len(vector) != coll.dimension:
            raise ProviderMismatch(
                f"Collection expecting embedding with dimension of {coll.dimension}, "
                f"got {len(vector)}"
            )

    def upsert(self, ids, embeddings, documents, metadatas) -> None:
        coll = self._require_collection()
        if len(set(ids)) != len(ids):
            raise InvalidArgument("duplicate ids in one upsert")
        if len(ids) > self.max_batch_size:
            raise InvalidArgument(
                f"batch of {len(ids)} exceeds max batch size {self.max_batch_size}"
            )
        for vector in embeddings:
            self._check_dimension(coll, vector)
        if coll.dimension is None and embeddings:
            coll.dimension = len(embeddings[0])
        for doc_id, vector, doc, meta in zip(ids, embeddings, documents, metadatas):
            coll.items.pop(doc_id, None)
            coll.items[doc_id] = (list(vector), doc, dict(meta or {}))

    def query(self, embedding, n_results, where=None) -> dict:
        coll = self._require_collection()
        self._check_dimension(coll, embedding)
        hits = [
            (_cosine_distance(embedding, vector), doc_id, doc, meta)
            for doc_id, (vector, doc, meta) in coll.items.items()
            if _matches(meta, where)
        ]
        hits.sort(key=lambda h: h[0])
        hits = hits[:n_results]
        return {
            "ids": [[h[1] for h in hits]],
            "documents": [[h[2] for h in hits]],
            "metadatas": [[dict(h[3]) for h in hits]],
            "distances": [[h[0] for h in hits]],
        }

    def get(self, limit=None, offset=0, ids=None, include_documents=True) -> dict:
        coll = self._require_collection()
        if ids is not None:
            page = [(doc_id, coll.items[doc_id]) for doc_id in ids if doc_id in coll.items]
        else:
            items = list(coll.items.items())
            page = items[offset:] if limit is None else items[offset:offset + limit]
        return {
            "ids": [doc_id for doc_id, _ in page],
            "documents": [item[1] for _, item in page] if include_documents else [],
            "metadatas": [dict(item[2]) for _, item in page],
        }

    def delete(self, ids: list[str]) -> None:
        coll = self._require_collection()
        for doc_id in ids:
            coll.items.pop(doc_id, None)
        if not coll.items:
            coll.dimension = None

    def count(self) -> int:
        return len(self._require_collection().items)
