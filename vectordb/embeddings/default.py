"""
DefaultEmbeddingProvider: chromadb's bundled local embedding function
(ONNX all-MiniLM-L6-v2). No credential and no extra service required.
"""

from vectordb.embeddings.base import EmbeddingProvider
from vectordb.errors import BackendFailure, InvalidArgument

BUNDLED_MODEL = "all-MiniLM-L6-v2"


class DefaultEmbeddingProvider(EmbeddingProvider):

    def __init__(self, model: str = BUNDLED_MODEL):
        super().__init__()
        # DefaultEmbeddingFunction always loads the bundled model
        if model != BUNDLED_MODEL:
            raise InvalidArgument(
                f"the default provider only runs '{BUNDLED_MODEL}', got model '{model}'; "
                "use the ollama or google provider for other models"
            )
        self.model = model
        self._fn = None

    @property
    def name(self) -> str:
        return f"default:{self.model}"

    def _embed(self, texts: list[str]) -> list[list[float]]:
        if self._fn is None:
            from chromadb.utils import embedding_functions
            self._fn = embedding_functions.DefaultEmbeddingFunction()
        try:
            vectors = self._fn(texts)
        except Exception as e:
            raise BackendFailure(f"{self.name} failed: {e}") from e
        return [[float(x) for x in v] for v in vectors]
