"""
GoogleEmbeddingProvider: hosted embeddings from the Generative Language API.

Uses batchEmbedContents so one call embeds the whole batch. The API key is
required up front; constructing the provider without one fails immediately
rather than on the first write.
"""

import logging

from vectordb.embeddings.base import EmbeddingProvider, post_json
from vectordb.errors import BackendFailure, StoreConnectionError

logger = logging.getLogger(__name__)

API_URL = "https://generativelanguage.googleapis.com/v1beta"


class GoogleEmbeddingProvider(EmbeddingProvider):

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "text-embedding-004",
        timeout: float = 30.0,
        api_url: str = API_URL,
    ):
        super().__init__()
        if not api_key:
            raise StoreConnectionError(
                "Google embedding provider needs an API key "
                "(set GOOGLE_GENERATIVE_AI_API_KEY)"
            )
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.api_url = api_url.rstrip("/")

    @property
    def name(self) -> str:
        return f"google:{self.model}"

    def _embed(self, texts: list[str]) -> list[list[float]]:
        model_path = f"models/{self.model}"
        data = post_json(
            f"{self.api_url}/{model_path}:batchEmbedContents",
            {
                "requests": [
                    {"model": model_path, "content": {"parts": [{"text": t}]}}
                    for t in texts
                ]
            },
            provider=self.name,
            timeout=self.timeout,
            headers={"x-goog-api-key": self.api_key},
        )
        try:
            vectors = [item["values"] for item in data["embeddings"]]
        except (KeyError, TypeError) as e:
            raise BackendFailure(f"{self.name} returned an unexpected payload: {e}") from e
        logger.debug("Embedded %d texts with %s", len(texts), self.name)
        return vectors
