"""
Error kinds raised by the access layer.

Backends and embedding providers translate their library-specific failures
into these classes; nothing in vectordb retries. Callers at the CLI/tool
boundary render `kind` and `message` and decide on retry themselves.
"""

from __future__ import annotations


class VectorDBError(Exception):
    """Base class for every error the access layer raises."""

    kind = "VectorDBError"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class StoreConnectionError(VectorDBError, ConnectionError):
    """Backend or embedding provider unreachable, or credentials rejected."""

    kind = "ConnectionError"


class InvalidArgument(VectorDBError, ValueError):
    """Caller error: empty query, missing field, unconfirmed destructive op."""

    kind = "InvalidArgument"


class ProviderMismatch(VectorDBError):
    """Collection was embedded with a different provider or dimension."""

    kind = "ProviderMismatch"


class MalformedBackupRecord(VectorDBError, ValueError):
    """A backup line could not be parsed into a Document. Restore aborts."""

    kind = "MalformedBackupRecord"

    def __init__(self, message: str = "", line_number: int | None = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class BackendFailure(VectorDBError):
    """Generic scan/write failure; the backend's message is kept intact."""

    kind = "BackendFailure"


_DIMENSION_MARKERS = ("dimension", "dimensionality")
_CONNECTION_MARKERS = (
    "could not connect",
    "connection refused",
    "failed to connect",
    "unauthorized",
    "forbidden",
    "authentication",
)


def normalize_error(exc: Exception, context: str = "") -> VectorDBError:
    """
    Map a backend/library exception onto one of the error kinds.

    Already-normalized errors pass through unchanged. Classification is by
    exception type first, then by message, since chromadb reports dimension
    mismatches and connection failures as plain ValueError/Exception across
    releases.
    """
    if isinstance(exc, VectorDBError):
        return exc

    import httpx

    prefix = f"{context}: " if context else ""
    text = str(exc) or type(exc).__name__
    lowered = text.lower()

    if isinstance(exc, (httpx.ConnectError, httpx.TimeoutException, ConnectionError)):
        return StoreConnectionError(prefix + text)
    if any(m in lowered for m in _DIMENSION_MARKERS):
        return ProviderMismatch(prefix + text)
    if any(m in lowered for m in _CONNECTION_MARKERS):
        return StoreConnectionError(prefix + text)
    return BackendFailure(prefix + text)
