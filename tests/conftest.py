"""
Shared fixtures: an in-memory backend and a deterministic embedding
provider, so the access layer is tested without Chroma or a model server.
"""

import hashlib
import math
import re

import pytest

from vectordb.embeddings import EmbeddingProvider
from vectordb.storage.backends.memory import InMemoryBackend
from vectordb.storage.vector_store import VectorStore


class HashEmbeddingProvider(EmbeddingProvider):
    """Bag-of-words hashed into a fixed number of buckets, L2-normalised."""

    def __init__(self, dim: int = 64, label: str = "hash"):
        super().__init__()
        self.dim = dim
        self.label = label
        self.calls: list[list[str]] = []
        self.fail_with: Exception | None = None

    @property
    def name(self) -> str:
        return f"{self.label}:{self.dim}"

    def _embed(self, texts):
        self.calls.append(list(texts))
        if self.fail_with is not None:
            raise self.fail_with
        return [self._vector(t) for t in texts]

    def _vector(self, text: str) -> list[float]:
        vec = [0.0] * self.dim
        for word in re.findall(r"\w+", text.lower()):
            bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % self.dim
            vec[bucket] += 1.0
        norm = math.sqrt(sum(x * x for x in vec)) or 1.0
        return [x / norm for x in vec]


@pytest.fixture
def provider():
    return HashEmbeddingProvider()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(provider, backend):
    s = VectorStore(
        collection_name="test-docs",
        embedding_provider=provider,
        backend=backend,
        restore_batch_size=2,
        scan_page_size=2,
    )
    s.initialize()
    return s


def make_doc(doc_id, content, **metadata):
    return {"id": doc_id, "content": content, "metadata": metadata}


@pytest.fixture
def sample_docs():
    return [
        make_doc("auth-1", "jwt tokens authenticate api requests",
                 source="docs", category="auth", title="JWT",
                 lastModified="2026-10-18T12:00:00+00:00"),
        make_doc("auth-2", "refresh tokens rotate every week",
                 source="memory-bank", category="auth", title="Refresh"),
        make_doc("ui-1", "buttons use the primary palette colour",
                 source="docs", category="design", title="Buttons",
                 lastModified="2026-09-01T08:00:00Z", owner="ui-team"),
    ]
