#!/usr/bin/env python3
"""
Seed an empty collection with a few pattern documents so search works
out of the box.

Usage:
    python scripts/initialize_db.py
    python scripts/initialize_db.py --force   # add even if not empty
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from vectordb.config import build_store, get_config
from vectordb.models import QueryOptions

SEED_DOCUMENTS = [
    {
        "id": "pattern-auth-1",
        "content": (
            "Authentication Pattern: JWT Token Implementation\n\n"
            "Use JWT tokens for stateless authentication. Store refresh tokens securely. "
            "Implement token rotation for enhanced security. Always validate tokens on "
            "the backend. Use short expirations (15 min for access, 7 days for refresh)."
        ),
        "metadata": {
            "source": "patterns",
            "category": "authentication",
            "title": "JWT Authentication Pattern",
            "filePath": "docs/patterns/auth.md",
        },
    },
    {
        "id": "pattern-error-1",
        "content": (
            "Error Handling Pattern: Global Error Boundary\n\n"
            "Catch errors at the component tree level. Log errors to the monitoring "
            "service. Display user-friendly error messages and provide recovery options."
        ),
        "metadata": {
            "source": "patterns",
            "category": "error-handling",
            "title": "Global Error Boundary",
            "filePath": "docs/patterns/errors.md",
        },
    },
    {
        "id": "pattern-api-1",
        "content": (
            "API Design Pattern: Resource-Oriented Endpoints\n\n"
            "Name endpoints after resources, not actions. Use HTTP verbs for intent, "
            "return consistent error envelopes, and paginate every list endpoint."
        ),
        "metadata": {
            "source": "patterns",
            "category": "architecture",
            "title": "Resource-Oriented API Design",
            "filePath": "docs/patterns/api.md",
        },
    },
]


def main():
    parser = argparse.ArgumentParser(description="Seed the vector database")
    parser.add_argument("--force", action="store_true", help="Seed even if the collection has documents")
    args = parser.parse_args()

    store = build_store(get_config())
    store.initialize()
    print(f"Collection '{store.collection_name}' ready ({store.embedding_provider.name})")

    existing = store.count()
    if existing and not args.force:
        print(f"Collection already holds {existing} documents; nothing to do (use --force).")
        return

    now = datetime.now(timezone.utc).isoformat()
    docs = [
        {**d, "metadata": {**d["metadata"], "lastModified": now}}
        for d in SEED_DOCUMENTS
    ]
    store.add_documents(docs)
    print(f"Added {len(docs)} seed documents")

    results = store.query("how should tokens be validated", QueryOptions(limit=1, threshold=0.0))
    if results:
        print(f"Sanity query -> {results[0].metadata.title} (score {results[0].score:.3f})")


if __name__ == "__main__":
    main()
