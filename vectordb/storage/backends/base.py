"""
VectorBackend — abstract base for vector storage backends.

All backends implement the same primitives:
  connect  — bind to a named collection, creating it if absent
  upsert   — store vectors + documents + metadata (overwrite by id)
  query    — nearest-neighbour search by vector, optional metadata predicate
  get      — one page of a full scan (no vectors)
  delete   — remove by id
  count    — total stored vectors

Embedding logic stays in VectorStore (the caller), not here.
Backends are intentionally dumb: they only move vectors around, and
report failures as vectordb.errors kinds.
"""

from abc import ABC, abstractmethod

DEFAULT_MAX_BATCH_SIZE = 5000


class VectorBackend(ABC):
    """Abstract vector storage backend."""

    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE

    @abstractmethod
    def connect(self, collection: str, metadata: dict) -> dict:
        """
        Bind to `collection`, creating it with `metadata` if it does not exist.
        Returns the collection's stored metadata (which, for an existing
        collection, may differ from `metadata`).
        """
        ...

    @abstractmethod
    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Insert or update vectors with associated documents and metadata."""
        ...

    @abstractmethod
    def query(
        self,
        embedding: list[float],
        n_results: int,
        where: dict | None = None,
    ) -> dict:
        """
        Nearest-neighbour search.

        Returns a dict with keys:
          ids        list[list[str]]
          documents  list[list[str]]
          metadatas  list[list[dict]]
          distances  list[list[float]]
        (matches the ChromaDB collection.query() shape so callers are identical)
        """
        ...

    @abstractmethod
    def get(
        self,
        limit: int | None = None,
        offset: int = 0,
        ids: list[str] | None = None,
        include_documents: bool = True,
    ) -> dict:
        """
        One page of a full scan in backend order, or the given `ids`.

        Returns a dict with keys ids, metadatas and (when requested)
        documents, each a flat list.
        """
        ...

    @abstractmethod
    def delete(self, ids: list[str]) -> None:
        """Delete vectors by id; unknown ids are ignored."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Return total number of stored vectors."""
        ...
