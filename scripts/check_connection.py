#!/usr/bin/env python3
"""
Check that the configured vector store and embedding provider are reachable.

Usage:
    python scripts/check_connection.py
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from vectordb.config import build_store, get_config
from vectordb.errors import VectorDBError


def main() -> int:
    cfg = get_config()
    print(f"Store:    {cfg['store'].get('path') or cfg['store']['url']}")
    print(f"Provider: {cfg['embedding']['provider']}")
    print("-" * 60)

    try:
        store = build_store(cfg)
        store.initialize()
        print(f"✓ Collection '{store.collection_name}' bound")
        print(f"✓ {store.count()} documents stored")
        print(f"✓ Embedding dimension {store.embedding_provider.dimension}")
    except VectorDBError as e:
        print(f"✗ [{e.kind}] {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
