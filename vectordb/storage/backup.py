"""
Backup file format: UTF-8 JSON Lines, one Document per line.

    {"id": "...", "content": "...", "metadata": {...}}

No header and no trailer. Blank lines are skipped so hand-edited files
with trailing newlines restore cleanly; anything else that is not a valid
record raises MalformedBackupRecord with its line number.
"""

import json
from pathlib import Path
from typing import Iterator

from vectordb.errors import InvalidArgument, MalformedBackupRecord
from vectordb.models import Document


def encode_record(doc: Document) -> str:
    """One backup line (without the newline)."""
    return json.dumps(doc.to_dict(), ensure_ascii=False)


def decode_record(line: str, line_number: int | None = None) -> Document:
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedBackupRecord(f"invalid JSON ({e.msg})", line_number) from e
    if not isinstance(data, dict):
        raise MalformedBackupRecord("record must be a JSON object", line_number)
    missing = [k for k in ("id", "content", "metadata") if k not in data]
    if missing:
        raise MalformedBackupRecord(f"missing field(s): {', '.join(missing)}", line_number)
    if not isinstance(data["metadata"], dict):
        raise MalformedBackupRecord("'metadata' must be an object", line_number)
    try:
        return Document.from_dict(data)
    except InvalidArgument as e:
        raise MalformedBackupRecord(e.message, line_number) from e


def read_records(path: str | Path) -> Iterator[Document]:
    """Stream Documents from a backup file, line by line."""
    path = Path(path)
    if not path.is_file():
        raise InvalidArgument(f"backup file not found: {path}")
    with open(path, encoding="utf-8") as f:
        for line_number, line in enumerate(f, 1):
            if not line.strip():
                continue
            yield decode_record(line, line_number)
