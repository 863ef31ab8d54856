"""
Config loader for vectordb.
Reads config.yaml once at startup. All other modules import from here.

Environment overrides (CHROMA_URL, COLLECTION_NAME,
GOOGLE_GENERATIVE_AI_API_KEY) are applied once after the file is read;
nothing re-reads the environment per call.
"""

import copy
import logging
import os
import re
from pathlib import Path

import yaml
from dotenv import load_dotenv

load_dotenv()

_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

_config: dict | None = None

DEFAULTS: dict = {
    "store": {
        "backend": "chromadb",
        "url": "http://localhost:8000",
        "path": "",
        "collection": "project-docs",
        "max_batch_size": 5000,
    },
    "embedding": {
        "provider": "default",
        "model": "",
        "url": "http://localhost:11434",
        "api_key": "",
        "timeout": 30.0,
    },
    "query": {
        "limit": 5,
        "threshold": 0.7,
    },
    "backup": {
        "restore_batch_size": 100,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8765,
    },
    "logging": {
        "level": "INFO",
        "file": "",
    },
}

# env var -> (section, key)
ENV_OVERRIDES = {
    "CHROMA_URL": ("store", "url"),
    "COLLECTION_NAME": ("store", "collection"),
    "GOOGLE_GENERATIVE_AI_API_KEY": ("embedding", "api_key"),
}


def _resolve_env_vars(value: str) -> str:
    """Replace ${ENV_VAR} patterns with actual environment variable values."""
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")
    return re.sub(r"\$\{(\w+)\}", replacer, value)


def _walk_and_resolve(obj):
    """Recursively resolve env vars in all string values."""
    if isinstance(obj, dict):
        return {k: _walk_and_resolve(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_walk_and_resolve(v) for v in obj]
    elif isinstance(obj, str):
        return _resolve_env_vars(obj)
    return obj


def _merge(base: dict, override: dict) -> dict:
    """Deep-merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(cfg: dict) -> dict:
    for var, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value:
            cfg.setdefault(section, {})[key] = value
    return cfg


def load_config(path: Path | None = None) -> dict:
    """
    Load and cache config from YAML file.

    A missing file is not an error: the built-in defaults are used so the
    CLI works out of the box against a local Chroma server.
    """
    global _config
    if _config is not None and path is None:
        return _config

    config_path = path or Path(os.environ.get("VECTORDB_CONFIG", _CONFIG_PATH))
    raw: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

    cfg = _merge(DEFAULTS, _walk_and_resolve(raw))
    _config = _apply_env_overrides(cfg)
    return _config


def get_config() -> dict:
    """Return cached base config, loading if necessary."""
    if _config is None:
        return load_config()
    return _config


def reset_config():
    """Drop the cached config (tests and long-running tools use this)."""
    global _config
    _config = None


def setup_logging(cfg: dict):
    log_cfg = cfg.get("logging", {})
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)
    log_file = log_cfg.get("file")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def build_store(cfg: dict | None = None):
    """
    Construct a VectorStore from config.

    Callers still need to call initialize() (or let the first operation
    do it lazily).
    """
    from vectordb.embeddings import make_provider
    from vectordb.storage.backends import make_backend
    from vectordb.storage.vector_store import VectorStore

    cfg = cfg or get_config()
    store_cfg = cfg["store"]
    embed_cfg = cfg["embedding"]

    backend_type = store_cfg.get("backend", "chromadb")
    backend_kwargs: dict = {}
    if backend_type == "chromadb":
        if store_cfg.get("path"):
            backend_kwargs["path"] = store_cfg["path"]
        else:
            backend_kwargs["url"] = store_cfg.get("url")
    if store_cfg.get("max_batch_size"):
        backend_kwargs["max_batch_size"] = int(store_cfg["max_batch_size"])

    provider_name = embed_cfg.get("provider", "default")
    provider_kwargs: dict = {}
    if embed_cfg.get("model"):
        provider_kwargs["model"] = embed_cfg["model"]
    if provider_name == "ollama":
        provider_kwargs["url"] = embed_cfg.get("url")
        provider_kwargs["timeout"] = float(embed_cfg.get("timeout", 30.0))
    elif provider_name == "google":
        provider_kwargs["api_key"] = embed_cfg.get("api_key")
        provider_kwargs["timeout"] = float(embed_cfg.get("timeout", 30.0))

    return VectorStore(
        collection_name=store_cfg["collection"],
        embedding_provider=make_provider(provider_name, **provider_kwargs),
        backend=make_backend(backend_type, **backend_kwargs),
        restore_batch_size=int(cfg.get("backup", {}).get("restore_batch_size", 100)),
    )
