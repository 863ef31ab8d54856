"""
ChromaBackend — ChromaDB implementation of VectorBackend.

Wraps chromadb.HttpClient (remote server, the default) or
chromadb.PersistentClient (local directory). All ChromaDB-specific imports
and calls live here; nothing outside this file needs to know about ChromaDB.

Every chromadb exception is translated by vectordb.errors.normalize_error,
so dimension mismatches surface as ProviderMismatch and unreachable servers
as StoreConnectionError.
"""

import logging
import threading
from pathlib import Path
from urllib.parse import urlparse

import chromadb

from vectordb.errors import normalize_error
from .base import DEFAULT_MAX_BATCH_SIZE, VectorBackend

logger = logging.getLogger(__name__)


class ChromaBackend(VectorBackend):
    """ChromaDB-backed vector storage (thread-safe)."""

    def __init__(
        self,
        url: str | None = None,
        path: str | None = None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        if not url and not path:
            raise ValueError("ChromaBackend requires either a 'url' or a 'path'.")
        self.url = url
        self.path = path
        self.max_batch_size = max_batch_size
        self._lock = threading.Lock()
        self._client = None
        self._collection = None

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def _make_client(self):
        if self.path:
            chroma_path = Path(self.path)
            chroma_path.mkdir(parents=True, exist_ok=True)
            return chromadb.PersistentClient(path=str(chroma_path))
        parsed = urlparse(self.url)
        ssl = parsed.scheme == "https"
        return chromadb.HttpClient(
            host=parsed.hostname or "localhost",
            port=parsed.port or (443 if ssl else 8000),
            ssl=ssl,
        )

    def connect(self, collection: str, metadata: dict) -> dict:
        try:
            with self._lock:
                self._client = self._make_client()
                try:
                    self._collection = self._client.get_collection(
                        name=collection, embedding_function=None,
                    )
                except Exception as e:
                    if "does not exist" not in str(e).lower() and "not found" not in str(e).lower():
                        raise
                    self._collection = self._client.create_collection(
                        name=collection,
                        metadata={"hnsw:space": "cosine", **metadata},
                        embedding_function=None,
                    )
                    logger.info("Created collection '%s'", collection)
                server_max = getattr(self._client, "get_max_batch_size", None)
                if callable(server_max):
                    self.max_batch_size = min(self.max_batch_size, server_max())
        except Exception as e:
            raise normalize_error(e, f"connect to {self.path or self.url}") from e
        logger.info(
            "ChromaBackend bound to '%s' (%s)", collection, self.path or self.url,
        )
        return dict(self._collection.metadata or {})

    def _require_collection(self):
        if self._collection is None:
            raise RuntimeError("ChromaBackend.connect() must be called first")
        return self._collection

    # ------------------------------------------------------------------
    # VectorBackend interface
    # ------------------------------------------------------------------

    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        collection = self._require_collection()
        try:
            with self._lock:
                collection.upsert(
                    ids=ids,
                    embeddings=embeddings,
                    documents=documents,
                    # chromadb rejects empty metadata dicts
                    metadatas=[m or None for m in metadatas],
                )
        except Exception as e:
            raise normalize_error(e, "upsert") from e

    def query(
        self,
        embedding: list[float],
        n_results: int,
        where: dict | None = None,
    ) -> dict:
        collection = self._require_collection()
        kwargs: dict = dict(
            query_embeddings=[embedding],
            n_results=n_results,
            include=["documents", "metadatas", "distances"],
        )
        if where:
            kwargs["where"] = where
        try:
            with self._lock:
                return collection.query(**kwargs)
        except Exception as e:
            raise normalize_error(e, "query") from e

    def get(
        self,
        limit: int | None = None,
        offset: int = 0,
        ids: list[str] | None = None,
        include_documents: bool = True,
    ) -> dict:
        collection = self._require_collection()
        include = ["documents", "metadatas"] if include_documents else ["metadatas"]
        kwargs: dict = dict(include=include)
        if ids is not None:
            kwargs["ids"] = ids
        else:
            kwargs["limit"] = limit
            kwargs["offset"] = offset
        try:
            with self._lock:
                page = collection.get(**kwargs)
        except Exception as e:
            raise normalize_error(e, "scan") from e
        return {
            "ids": list(page["ids"]),
            "documents": list(page.get("documents") or []),
            "metadatas": [m or {} for m in (page.get("metadatas") or [])],
        }

    def delete(self, ids: list[str]) -> None:
        if not ids:
            return
        collection = self._require_collection()
        try:
            with self._lock:
                collection.delete(ids=ids)
        except Exception as e:
            raise normalize_error(e, "delete") from e

    def count(self) -> int:
        collection = self._require_collection()
        try:
            with self._lock:
                return collection.count()
        except Exception as e:
            raise normalize_error(e, "count") from e
