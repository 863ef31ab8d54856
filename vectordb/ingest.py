"""
Directory ingestion: walk a docs tree, chunk each file and add the chunks.

Chunk ids are "<file>-chunk-<n>", so re-ingesting a file overwrites its
previous chunks (a file that shrank leaves its old tail chunks behind;
delete them with VectorStore.delete_documents).
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from vectordb.errors import InvalidArgument
from vectordb.models import Document, DocumentMetadata

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".md", ".mdx", ".txt"}
SKIP_DIRS = {"node_modules"}
CHUNK_SIZE = 1000  # characters per chunk


def find_document_files(root: Path) -> list[Path]:
    """Supported files under root, skipping hidden dirs and node_modules."""
    files = []
    for path in sorted(root.rglob("*")):
        rel_parts = path.relative_to(root).parts[:-1]
        if any(p.startswith(".") or p in SKIP_DIRS for p in rel_parts):
            continue
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS:
            files.append(path)
    return files


def chunk_text(content: str, chunk_size: int = CHUNK_SIZE) -> list[str]:
    """
    Pack whole lines into chunks of roughly chunk_size characters.
    A single line longer than chunk_size becomes its own chunk.
    """
    chunks = []
    current = ""
    for line in content.split("\n"):
        if current and len(current) + len(line) > chunk_size:
            chunks.append(current.strip())
            current = line
        else:
            current = f"{current}\n{line}" if current else line
    if current.strip():
        chunks.append(current.strip())
    return [c for c in chunks if c]


def build_documents(path: Path, chunk_size: int = CHUNK_SIZE, source: str = "ingested") -> list[Document]:
    content = path.read_text(encoding="utf-8", errors="replace")
    chunks = chunk_text(content, chunk_size)
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc).isoformat()
    return [
        Document(
            id=f"{path}-chunk-{i}",
            content=chunk,
            metadata=DocumentMetadata(
                source=source,
                category=path.parent.name or "general",
                file_path=str(path),
                title=path.name,
                last_modified=modified,
                extra={"chunkIndex": i, "totalChunks": len(chunks)},
            ),
        )
        for i, chunk in enumerate(chunks)
    ]


def ingest_directory(store, root: str | Path, chunk_size: int = CHUNK_SIZE) -> int:
    """Ingest every supported file under root. Returns the chunk count."""
    root = Path(root).resolve()
    if not root.is_dir():
        raise InvalidArgument(f"not a directory: {root}")

    documents: list[Document] = []
    files = find_document_files(root)
    logger.info("Found %d document files under %s", len(files), root)
    for path in files:
        documents.extend(build_documents(path, chunk_size))

    store.initialize()
    batch_size = store.max_batch_size
    for start in range(0, len(documents), batch_size):
        store.add_documents(documents[start:start + batch_size])
    logger.info("Ingested %d chunks from %d files", len(documents), len(files))
    return len(documents)
