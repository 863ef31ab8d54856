"""
Vector backend factory.

Usage:
    from vectordb.storage.backends import make_backend
    backend = make_backend("chromadb", url="http://localhost:8000")

Adding a new backend:
    1. Create vectordb/storage/backends/<name>.py implementing VectorBackend.
    2. Add an entry to _REGISTRY below.
    3. Set  store.backend: <name>  in config.yaml.
    No other changes required.
"""

from .base import VectorBackend

_REGISTRY: dict[str, type[VectorBackend]] = {}


def _register():
    """Lazy-import backends to avoid hard dependencies at import time."""
    if _REGISTRY:
        return
    from .chroma import ChromaBackend
    from .memory import InMemoryBackend
    _REGISTRY["chromadb"] = ChromaBackend
    _REGISTRY["memory"] = InMemoryBackend


def make_backend(backend_type: str, **kwargs) -> VectorBackend:
    """
    Instantiate a vector backend by name.

    Args:
        backend_type: Registry key (e.g. "chromadb").
        **kwargs:     Passed directly to the backend constructor.

    Raises:
        ValueError: If the backend type is not registered.
    """
    _register()
    cls = _REGISTRY.get(backend_type)
    if cls is None:
        available = ", ".join(_REGISTRY.keys())
        raise ValueError(
            f"Unknown vector backend: '{backend_type}'. "
            f"Available: {available}"
        )
    return cls(**kwargs)


__all__ = ["VectorBackend", "make_backend"]
