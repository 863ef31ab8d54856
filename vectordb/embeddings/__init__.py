"""
Embedding provider factory.

Usage:
    from vectordb.embeddings import make_provider
    provider = make_provider("ollama", model="nomic-embed-text")

Adding a new provider:
    1. Create vectordb/embeddings/<name>.py implementing EmbeddingProvider.
    2. Add an entry to _REGISTRY below.
    3. Set  embedding.provider: <name>  in config.yaml.
"""

from .base import EmbeddingProvider

_REGISTRY: dict[str, type[EmbeddingProvider]] = {}


def _register():
    """Lazy-import providers so chromadb is only loaded when needed."""
    if _REGISTRY:
        return
    from .default import DefaultEmbeddingProvider
    from .google import GoogleEmbeddingProvider
    from .ollama import OllamaEmbeddingProvider
    _REGISTRY["default"] = DefaultEmbeddingProvider
    _REGISTRY["ollama"] = OllamaEmbeddingProvider
    _REGISTRY["google"] = GoogleEmbeddingProvider


def make_provider(provider_type: str, **kwargs) -> EmbeddingProvider:
    """
    Instantiate an embedding provider by name.

    Raises:
        ValueError: If the provider type is not registered.
    """
    _register()
    cls = _REGISTRY.get(provider_type)
    if cls is None:
        available = ", ".join(_REGISTRY.keys())
        raise ValueError(
            f"Unknown embedding provider: '{provider_type}'. "
            f"Available: {available}"
        )
    return cls(**kwargs)


__all__ = ["EmbeddingProvider", "make_provider"]
