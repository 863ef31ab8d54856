"""
VectorStore — the collection access layer.

Turns one named collection of a pluggable VectorBackend into a
document-oriented store: filtered semantic search, aggregate statistics,
recency queries and JSONL backup/restore.

Embedding stays here; the backend only sees raw vectors. The embedding
provider and the collection name are fixed at construction. initialize()
tags a new collection with the provider name and refuses to bind a
collection tagged with a different one, so the read and write paths always
share a vector space.

Nothing in this class retries. Backend and provider failures surface as
vectordb.errors kinds; an empty result only ever means "no matches".
"""

from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

from vectordb.embeddings import EmbeddingProvider
from vectordb.errors import InvalidArgument, ProviderMismatch
from vectordb.models import (
    CollectionStats,
    Document,
    DocumentMetadata,
    QueryOptions,
    QueryResult,
)
from vectordb.storage.backends import VectorBackend
from vectordb.storage.backup import encode_record, read_records

logger = logging.getLogger(__name__)

PROVIDER_TAG = "embedding_provider"
UNKNOWN = "unknown"


class VectorStore:
    """
    Document store over one provider-bound vector collection.

    Not internally concurrent: each call is a short sequence of blocking
    backend/provider requests with no timeout of its own. Batches are
    written sequentially.
    """

    def __init__(
        self,
        collection_name: str,
        embedding_provider: EmbeddingProvider,
        backend: VectorBackend,
        restore_batch_size: int = 100,
        scan_page_size: int = 1000,
    ):
        if not collection_name:
            raise InvalidArgument("collection name must not be empty")
        self._collection_name = collection_name
        self._provider = embedding_provider
        self._backend = backend
        self.restore_batch_size = restore_batch_size
        self.scan_page_size = scan_page_size
        self._ready = False

        logger.info(
            "VectorStore created (collection=%s, backend=%s, provider=%s)",
            collection_name,
            type(backend).__name__,
            embedding_provider.name,
        )

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        return self._provider

    @property
    def max_batch_size(self) -> int:
        """Largest batch add_documents accepts; callers split beyond this."""
        return self._backend.max_batch_size

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(self):
        """Bind to the collection, creating it if absent. Idempotent."""
        if self._ready:
            return
        stored = self._backend.connect(
            self._collection_name, {PROVIDER_TAG: self._provider.name}
        )
        tag = stored.get(PROVIDER_TAG)
        if tag is None:
            logger.warning(
                "Collection '%s' has no %s tag; assuming it matches %s",
                self._collection_name, PROVIDER_TAG, self._provider.name,
            )
        elif tag != self._provider.name:
            raise ProviderMismatch(
                f"collection '{self._collection_name}' was embedded with '{tag}', "
                f"but this store is bound to '{self._provider.name}'"
            )
        self._ready = True
        logger.info("Collection '%s' ready", self._collection_name)

    def _ensure_ready(self):
        if not self._ready:
            self.initialize()

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, text: str, options: QueryOptions | None = None) -> list[QueryResult]:
        """
        Semantic search, highest score first.

        category/source filters are sent to the backend, so they narrow the
        candidate pool before ranking. The backend's native top-k returns
        `limit` candidates and the threshold is applied afterwards; since
        candidates arrive best-first, fetching more could not add results
        that pass it. A collection embedded with a different provider can
        legitimately come back empty here without raising.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidArgument("query text must not be empty")
        options = options or QueryOptions()
        options.validate()
        self._ensure_ready()

        if self._backend.count() == 0:
            return []

        embedding = self._provider.embed([text])[0]
        raw = self._backend.query(embedding, n_results=options.limit, where=options.where())

        results: list[QueryResult] = []
        clamped = 0
        ids = raw["ids"][0]
        for i in range(len(ids)):
            distance = float(raw["distances"][0][i])
            score = 1.0 - distance
            if score < 0.0 or score > 1.0:
                clamped += 1
                score = min(1.0, max(0.0, score))
            if score < options.threshold:
                continue
            results.append(QueryResult(
                id=ids[i],
                content=raw["documents"][0][i] or "",
                metadata=DocumentMetadata.from_dict(raw["metadatas"][0][i]),
                score=score,
                distance=distance,
            ))
        if clamped:
            logger.warning(
                "query: %d distance(s) outside [0, 1] clamped for '%s'",
                clamped, self._collection_name,
            )

        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug(
            "query returned %d/%d candidates (threshold=%.2f)",
            len(results), len(ids), options.threshold,
        )
        return results[:options.limit]

    def search_by_category(
        self,
        category: str,
        text: str,
        options: QueryOptions | None = None,
    ) -> list[QueryResult]:
        """query() with the category filter forced to `category`."""
        if not category:
            raise InvalidArgument("category must not be empty")
        return self.query(text, replace(options or QueryOptions(), category=category))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_documents(self, documents: list[Document | dict]) -> int:
        """
        Embed and upsert a batch in one provider call.

        The batch is all-or-nothing: validation or embedding failure means
        nothing is written. Batches above max_batch_size are rejected, not
        split; callers that need partial success submit smaller batches.
        """
        if not documents:
            raise InvalidArgument("add_documents needs at least one document")
        docs = [
            Document.from_dict(d.to_dict() if isinstance(d, Document) else d)
            for d in documents
        ]
        ids = [d.id for d in docs]
        if len(set(ids)) != len(ids):
            dupes = sorted(i for i, n in Counter(ids).items() if n > 1)
            raise InvalidArgument(f"duplicate ids in batch: {', '.join(dupes)}")
        self._ensure_ready()
        if len(docs) > self.max_batch_size:
            raise InvalidArgument(
                f"batch of {len(docs)} exceeds the backend limit of "
                f"{self.max_batch_size}; split it before calling add_documents"
            )

        embeddings = self._provider.embed([d.content for d in docs])
        self._backend.upsert(
            ids=ids,
            embeddings=embeddings,
            documents=[d.content for d in docs],
            metadatas=[d.metadata.to_dict() for d in docs],
        )
        logger.info("Added %d documents to '%s'", len(docs), self._collection_name)
        return len(docs)

    def delete_documents(self, ids: list[str]) -> int:
        """Delete by id. Unknown ids are ignored."""
        if not ids:
            raise InvalidArgument("delete_documents needs at least one id")
        self._ensure_ready()
        ids = list(ids)
        for start in range(0, len(ids), self.max_batch_size):
            self._backend.delete(ids[start:start + self.max_batch_size])
        logger.info("Deleted %d ids from '%s'", len(ids), self._collection_name)
        return len(ids)

    def clear_collection(self, confirm: bool = False) -> int:
        """
        Delete every document. Requires confirm=True; otherwise raises
        InvalidArgument and leaves the collection untouched.
        """
        if confirm is not True:
            raise InvalidArgument(
                "clear_collection is destructive and requires confirm=True"
            )
        self._ensure_ready()
        # collect first: deleting while paging would shift offsets
        ids = [doc.id for doc in self.iter_documents(include_documents=False)]
        for start in range(0, len(ids), self.max_batch_size):
            self._backend.delete(ids[start:start + self.max_batch_size])
        logger.info("Cleared %d documents from '%s'", len(ids), self._collection_name)
        return len(ids)

    # ------------------------------------------------------------------
    # Scans
    # ------------------------------------------------------------------

    def count(self) -> int:
        self._ensure_ready()
        return self._backend.count()

    def iter_documents(
        self,
        page_size: int | None = None,
        include_documents: bool = True,
    ) -> Iterator[Document]:
        """Full scan in backend order, one page in memory at a time."""
        self._ensure_ready()
        page_size = page_size or self.scan_page_size
        offset = 0
        while True:
            page = self._backend.get(
                limit=page_size, offset=offset, include_documents=include_documents,
            )
            page_ids = page["ids"]
            if not page_ids:
                return
            for i, doc_id in enumerate(page_ids):
                yield Document(
                    id=doc_id,
                    content=(page["documents"][i] or "") if include_documents else "",
                    metadata=DocumentMetadata.from_dict(page["metadatas"][i]),
                )
            if len(page_ids) < page_size:
                return
            offset += len(page_ids)

    def get_document(self, doc_id: str) -> Document | None:
        self._ensure_ready()
        page = self._backend.get(ids=[doc_id])
        if not page["ids"]:
            return None
        return Document(
            id=page["ids"][0],
            content=page["documents"][0] or "",
            metadata=DocumentMetadata.from_dict(page["metadatas"][0]),
        )

    def get_stats(self) -> CollectionStats:
        """
        Aggregate statistics over a full scan. O(collection size); meant
        for diagnostics, never for the query path.
        """
        stats = CollectionStats()
        total_chars = 0
        latest: datetime | None = None
        latest_raw = ""

        for doc in self.iter_documents():
            stats.total_documents += 1
            total_chars += len(doc.content)
            category = str(doc.metadata.category or UNKNOWN)
            source = str(doc.metadata.source or UNKNOWN)
            stats.categories[category] = stats.categories.get(category, 0) + 1
            stats.sources[source] = stats.sources.get(source, 0) + 1
            ts = doc.metadata.last_modified_at
            if ts is not None and (latest is None or ts > latest):
                latest, latest_raw = ts, doc.metadata.last_modified

        if stats.total_documents:
            stats.average_chunk_size = round(total_chars / stats.total_documents)
        stats.last_updated = latest_raw or datetime.now(timezone.utc).isoformat()
        return stats

    def get_recent_docs(self, days: float = 7, now: datetime | None = None) -> list[Document]:
        """
        Documents whose lastModified is within `days` of now, newest first.
        Documents without a parseable lastModified are always excluded.
        """
        if isinstance(days, bool) or not isinstance(days, (int, float)) or days < 0:
            raise InvalidArgument(f"days must be a non-negative number, got {days!r}")
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cutoff = now - timedelta(days=days)

        recent: list[tuple[datetime, Document]] = []
        for doc in self.iter_documents():
            ts = doc.metadata.last_modified_at
            if ts is None:
                continue
            if ts >= cutoff:
                recent.append((ts, doc))
        recent.sort(key=lambda pair: pair[0], reverse=True)
        return [doc for _, doc in recent]

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    def export_backup(self, path: str | Path) -> int:
        """
        Write every document as one JSON line to `path`, replacing it.

        Streams the paginated scan to a temp file next to `path` and renames
        it into place, so a failed scan never leaves a truncated backup.
        Record order is the backend scan order.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        written = 0
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                for doc in self.iter_documents():
                    f.write(encode_record(doc) + "\n")
                    written += 1
            os.replace(tmp_path, path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.info(
            "Exported %d documents from '%s' to %s (provider=%s)",
            written, self._collection_name, path, self._provider.name,
        )
        return written

    def import_backup(self, path: str | Path, clear_existing: bool = False) -> int:
        """
        Restore documents from a backup file.

        Every line is validated before the collection is touched, so a
        malformed record aborts the restore with nothing cleared or added.
        With clear_existing, the clear completes before the first record is
        written. Records are re-embedded with this store's provider and
        added through add_documents in sequential batches.
        """
        total = sum(1 for _ in read_records(path))
        self._ensure_ready()

        if clear_existing:
            self.clear_collection(True)

        batch_size = max(1, min(self.restore_batch_size, self.max_batch_size))
        batch: list[Document] = []
        batch_ids: set[str] = set()
        restored = 0
        for doc in read_records(path):
            # a repeated id starts a new batch so the later record wins
            if len(batch) >= batch_size or doc.id in batch_ids:
                restored += self.add_documents(batch)
                batch, batch_ids = [], set()
            batch.append(doc)
            batch_ids.add(doc.id)
        if batch:
            restored += self.add_documents(batch)

        logger.info(
            "Restored %d/%d records into '%s' from %s (provider=%s)",
            restored, total, self._collection_name, path, self._provider.name,
        )
        return restored
