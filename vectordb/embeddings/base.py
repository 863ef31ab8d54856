"""
EmbeddingProvider — abstract base for text embedding providers.

A provider turns a batch of strings into one fixed-dimension vector per
string in a single call. The same provider (by `name`) must be used for
the write and read paths of a collection; VectorStore enforces this by
tagging the collection with the provider name at initialize().
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from vectordb.errors import BackendFailure, StoreConnectionError

logger = logging.getLogger(__name__)

# Status codes that mean "cannot reach / not allowed", not "bad request".
_CONNECTION_STATUSES = {401, 403, 429}


class EmbeddingProvider(ABC):
    """Abstract embedding provider."""

    def __init__(self):
        self._dimension: int | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier, e.g. 'ollama:nomic-embed-text'."""
        ...

    @abstractmethod
    def _embed(self, texts: list[str]) -> list[list[float]]:
        ...

    def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed a batch in one provider call.

        Raises StoreConnectionError when the provider is unreachable or
        rejects the credential, BackendFailure for anything else. Either way
        no partial result is returned.
        """
        if not texts:
            return []
        vectors = self._embed(texts)
        self._check_shape(texts, vectors)
        if self._dimension is None:
            self._dimension = len(vectors[0])
        return vectors

    @property
    def dimension(self) -> int:
        """Vector size, probed with one embed call the first time it is read."""
        if self._dimension is None:
            self.embed(["dimension probe"])
        return self._dimension

    def _check_shape(self, texts: list[str], vectors: list[list[float]]):
        if len(vectors) != len(texts):
            raise BackendFailure(
                f"{self.name} returned {len(vectors)} embeddings for {len(texts)} inputs"
            )
        dims = {len(v) for v in vectors}
        if len(dims) != 1 or 0 in dims:
            raise BackendFailure(f"{self.name} returned embeddings of inconsistent size {sorted(dims)}")
        if self._dimension is not None and dims != {self._dimension}:
            raise BackendFailure(
                f"{self.name} changed dimension from {self._dimension} to {dims.pop()}"
            )


def post_json(url: str, payload: dict, provider: str, timeout: float, headers: dict | None = None) -> dict:
    """POST JSON and return the decoded body, mapping failures to error kinds."""
    try:
        resp = httpx.post(url, json=payload, headers=headers, timeout=timeout)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        detail = e.response.text[:200]
        if status in _CONNECTION_STATUSES:
            raise StoreConnectionError(
                f"{provider} rejected the request (HTTP {status}): {detail}"
            ) from e
        raise BackendFailure(f"{provider} failed (HTTP {status}): {detail}") from e
    except httpx.TransportError as e:
        raise StoreConnectionError(f"{provider} unreachable at {url}: {e}") from e
    try:
        return resp.json()
    except ValueError as e:
        raise BackendFailure(
            f"{provider} returned non-JSON response: {resp.text[:200]}"
        ) from e
