"""
Tests for config loading and store construction.
"""

import pytest

from vectordb import config as cfg_mod
from vectordb.storage.backends.memory import InMemoryBackend


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    for var in ("CHROMA_URL", "COLLECTION_NAME", "GOOGLE_GENERATIVE_AI_API_KEY", "VECTORDB_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    cfg_mod.reset_config()
    yield
    cfg_mod.reset_config()


def test_missing_file_uses_defaults(tmp_path):
    cfg = cfg_mod.load_config(tmp_path / "absent.yaml")
    assert cfg["store"]["url"] == "http://localhost:8000"
    assert cfg["store"]["collection"] == "project-docs"
    assert cfg["query"] == {"limit": 5, "threshold": 0.7}


def test_file_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("store:\n  collection: handbook\nquery:\n  limit: 10\n")
    cfg = cfg_mod.load_config(path)
    assert cfg["store"]["collection"] == "handbook"
    assert cfg["store"]["backend"] == "chromadb"
    assert cfg["query"]["limit"] == 10
    assert cfg["query"]["threshold"] == 0.7


def test_env_var_references_resolved(tmp_path, monkeypatch):
    monkeypatch.setenv("DOCS_KEY", "secret-123")
    path = tmp_path / "config.yaml"
    path.write_text("embedding:\n  api_key: ${DOCS_KEY}\n  model: ${UNSET_VAR_XYZ}\n")
    cfg = cfg_mod.load_config(path)
    assert cfg["embedding"]["api_key"] == "secret-123"
    assert cfg["embedding"]["model"] == ""


def test_env_overrides_win(tmp_path, monkeypatch):
    monkeypatch.setenv("CHROMA_URL", "http://chroma.internal:9000")
    monkeypatch.setenv("COLLECTION_NAME", "from-env")
    monkeypatch.setenv("GOOGLE_GENERATIVE_AI_API_KEY", "g-key")
    path = tmp_path / "config.yaml"
    path.write_text("store:\n  collection: from-file\n")
    cfg = cfg_mod.load_config(path)
    assert cfg["store"]["url"] == "http://chroma.internal:9000"
    assert cfg["store"]["collection"] == "from-env"
    assert cfg["embedding"]["api_key"] == "g-key"


def test_config_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "alt.yaml"
    path.write_text("server:\n  port: 9999\n")
    monkeypatch.setenv("VECTORDB_CONFIG", str(path))
    assert cfg_mod.get_config()["server"]["port"] == 9999


def test_get_config_is_cached(tmp_path, monkeypatch):
    monkeypatch.setenv("VECTORDB_CONFIG", str(tmp_path / "absent.yaml"))
    assert cfg_mod.get_config() is cfg_mod.get_config()


def test_build_store_memory_backend(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "store:\n  backend: memory\n  collection: scratch\n  max_batch_size: 50\n"
        "backup:\n  restore_batch_size: 7\n"
    )
    store = cfg_mod.build_store(cfg_mod.load_config(path))
    assert store.collection_name == "scratch"
    assert store.embedding_provider.name == "default:all-MiniLM-L6-v2"
    assert store.max_batch_size == 50
    assert store.restore_batch_size == 7
    assert isinstance(store._backend, InMemoryBackend)


def test_build_store_ollama_provider(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "store:\n  backend: memory\n"
        "embedding:\n  provider: ollama\n  model: mxbai-embed-large\n  url: http://gpu-box:11434\n"
    )
    store = cfg_mod.build_store(cfg_mod.load_config(path))
    provider = store.embedding_provider
    assert provider.name == "ollama:mxbai-embed-large"
    assert provider.url == "http://gpu-box:11434"


def test_build_store_unknown_provider(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("store:\n  backend: memory\nembedding:\n  provider: word2vec\n")
    with pytest.raises(ValueError, match="Unknown embedding provider"):
        cfg_mod.build_store(cfg_mod.load_config(path))


def test_build_store_default_provider_rejects_model_override(tmp_path):
    from vectordb.errors import InvalidArgument

    path = tmp_path / "config.yaml"
    path.write_text("store:\n  backend: memory\nembedding:\n  provider: default\n  model: bge-large\n")
    with pytest.raises(InvalidArgument):
        cfg_mod.build_store(cfg_mod.load_config(path))
