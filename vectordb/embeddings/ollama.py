"""
OllamaEmbeddingProvider — embeddings from Ollama's /api/embed endpoint.

/api/embed accepts a list input, so a whole batch costs one round trip.
"""

import logging

from vectordb.embeddings.base import EmbeddingProvider, post_json
from vectordb.errors import BackendFailure

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider(EmbeddingProvider):

    def __init__(
        self,
        model: str = "nomic-embed-text",
        url: str = "http://localhost:11434",
        timeout: float = 30.0,
    ):
        super().__init__()
        self.model = model
        self.url = (url or "http://localhost:11434").rstrip("/")
        self.timeout = timeout

    @property
    def name(self) -> str:
        return f"ollama:{self.model}"

    def _embed(self, texts: list[str]) -> list[list[float]]:
        data = post_json(
            f"{self.url}/api/embed",
            {"model": self.model, "input": texts},
            provider=self.name,
            timeout=self.timeout,
        )
        embeddings = data.get("embeddings")
        if not embeddings:
            raise BackendFailure(
                f"Embedding model '{self.model}' returned an empty embeddings array; "
                f"the model may be missing (run: ollama pull {self.model})"
            )
        logger.debug("Embedded %d texts with %s", len(texts), self.name)
        return embeddings
