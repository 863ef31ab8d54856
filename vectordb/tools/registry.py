"""
Tool registry: central dispatch for the protocol-tool surface.

Each tool name maps to one VectorStore operation. call() never raises:
failures come back as structured payloads

    {"ok": False, "error": {"kind": "...", "message": "..."}}

so a tool-calling client sees the error kind instead of a dropped call.
"""

import logging
import time

from vectordb.errors import BackendFailure, InvalidArgument, VectorDBError
from vectordb.models import QueryOptions
from vectordb.tools.definitions import TOOLS

logger = logging.getLogger(__name__)


def match_tools(query: str, tools=TOOLS) -> list[dict]:
    """
    Case-insensitive substring match on tool name or description.
    Returns name and description only; an empty query matches every tool.
    """
    needle = (query or "").lower()
    return [
        {"name": t["name"], "description": t["description"]}
        for t in tools
        if needle in t["name"].lower() or needle in t["description"].lower()
    ]


def _require(args: dict, key: str):
    value = args.get(key)
    if value is None or value == "":
        raise InvalidArgument(f"missing required argument '{key}'")
    return value


def _options(args: dict, **forced) -> QueryOptions:
    options = QueryOptions()
    if args.get("limit") is not None:
        options.limit = args["limit"]
    if args.get("threshold") is not None:
        options.threshold = args["threshold"]
    options.category = args.get("category") or None
    options.source = args.get("source") or None
    for key, value in forced.items():
        setattr(options, key, value)
    return options


class ToolRegistry:
    """Dispatches tool calls onto a VectorStore."""

    def __init__(self, store):
        self.store = store
        self.tools: dict[str, dict] = {t["name"]: t for t in TOOLS}
        self._handlers = {
            "search_tools": self._search_tools,
            "query_vector_db": self._query,
            "search_by_category": self._search_by_category,
            "get_stats": self._get_stats,
            "get_recent_docs": self._get_recent_docs,
            "add_documents": self._add_documents,
            "backup_database": self._backup,
            "restore_database": self._restore,
        }
        logger.info("Tool registry loaded: %s", list(self.tools.keys()))

    def list_tools(self) -> list[dict]:
        """Full tool definitions, including input schemas."""
        return list(self.tools.values())

    def search_tools(self, query: str) -> list[dict]:
        """Keyword match against tool names and descriptions (no schemas)."""
        return match_tools(query, self.tools.values())

    def call(self, name: str, arguments: dict | None = None) -> dict:
        """Run a tool by name and wrap the outcome in a payload."""
        start = time.monotonic()
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise InvalidArgument(f"unknown tool '{name}'")
            if arguments is not None and not isinstance(arguments, dict):
                raise InvalidArgument("tool arguments must be an object")
            result = handler(arguments or {})
        except VectorDBError as e:
            logger.warning("Tool '%s' failed: [%s] %s", name, e.kind, e.message)
            return {"ok": False, "error": e.to_dict()}
        except Exception as e:
            # library errors that escaped normalization
            logger.exception("Tool '%s' crashed", name)
            return {"ok": False, "error": BackendFailure(str(e)).to_dict()}
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug("Tool '%s' finished in %.1fms", name, elapsed_ms)
        return {"ok": True, "result": result}

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _search_tools(self, args: dict) -> dict:
        query = _require(args, "query")
        matches = self.search_tools(str(query))
        return {"query": query, "count": len(matches), "tools": matches}

    def _query(self, args: dict) -> dict:
        query = _require(args, "query")
        results = self.store.query(query, _options(args))
        return {
            "query": query,
            "resultCount": len(results),
            "results": [
                {
                    "score": r.score,
                    "title": r.metadata.title,
                    "category": r.metadata.category,
                    "source": r.metadata.source,
                    "filePath": r.metadata.file_path,
                    "content": r.content,
                }
                for r in results
            ],
        }

    def _search_by_category(self, args: dict) -> dict:
        category = _require(args, "category")
        query = _require(args, "query")
        results = self.store.search_by_category(category, query, _options(args, category=category))
        return {
            "category": category,
            "query": query,
            "resultCount": len(results),
            "results": [
                {"score": r.score, "title": r.metadata.title, "content": r.content}
                for r in results
            ],
        }

    def _get_stats(self, args: dict) -> dict:
        return self.store.get_stats().to_dict()

    def _get_recent_docs(self, args: dict) -> dict:
        days = args.get("days", 7)
        docs = self.store.get_recent_docs(days)
        return {
            "days": days,
            "count": len(docs),
            "documents": [
                {
                    "id": d.id,
                    "title": d.metadata.title,
                    "source": d.metadata.source,
                    "category": d.metadata.category,
                    "lastModified": d.metadata.last_modified,
                    "filePath": d.metadata.file_path,
                }
                for d in docs
            ],
        }

    def _add_documents(self, args: dict) -> dict:
        documents = _require(args, "documents")
        if not isinstance(documents, list):
            raise InvalidArgument("'documents' must be an array")
        added = self.store.add_documents(documents)
        return {"success": True, "added": added}

    def _backup(self, args: dict) -> dict:
        path = _require(args, "outputPath")
        count = self.store.export_backup(path)
        return {
            "success": True,
            "message": f"Database backed up to {path}",
            "path": path,
            "documents": count,
        }

    def _restore(self, args: dict) -> dict:
        path = _require(args, "inputPath")
        clear = args.get("clearExisting", False)
        if not isinstance(clear, bool):
            raise InvalidArgument("'clearExisting' must be true or false")
        count = self.store.import_backup(path, clear_existing=clear)
        return {
            "success": True,
            "message": f"Database restored from {path}",
            "path": path,
            "documents": count,
            "clearedExisting": clear,
        }
