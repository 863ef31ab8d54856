#!/usr/bin/env python3
"""
vectordb CLI — query and manage the project vector database.

    COMMAND         ALIASES         WHAT IT DOES
    -------         -------         ----------------------------------
    query           search, find    Semantic search with filters
    stats           info            Collection statistics
    recent                          Recently modified documents
    clear           reset           Delete every document (asks first)
    backup          export, dump    Export the collection to JSONL
    restore         import          Restore from a JSONL backup
    ingest                          Chunk and add a directory of docs
    tools                           List / search protocol tools
    serve           start           Run the HTTP tool server

Any operation error exits non-zero with "Error [<kind>]: <message>".
"""

import argparse
import sys

from vectordb import __version__
from vectordb.errors import VectorDBError


def _get_store():
    from vectordb.config import build_store, get_config

    store = build_store(get_config())
    store.initialize()
    return store


def _truncate(text: str, n: int) -> str:
    return text if len(text) <= n else text[:n] + "..."


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_query(args):
    """Semantic search over the collection."""
    from vectordb.models import QueryOptions

    store = _get_store()
    text = " ".join(args.text)
    results = store.query(text, QueryOptions(
        limit=args.limit,
        threshold=args.threshold,
        category=args.category,
        source=args.source,
    ))

    print(f"\n  🔍 Query: '{text}'")
    print(f"  Found {len(results)} results")
    print("  " + "─" * 56)

    for i, r in enumerate(results, 1):
        meta = r.metadata
        print(f"\n  [{i}] score: {r.score:.3f} | {meta.title or r.id}")
        print(f"      category: {meta.category or '-'} | source: {meta.source or '-'}")
        if meta.file_path:
            print(f"      file: {meta.file_path}")
        print(f"      {_truncate(r.content, 150)}")
    print()


def cmd_stats(args):
    """Show collection statistics."""
    store = _get_store()
    stats = store.get_stats()

    print(f"\n  📊 Collection: {store.collection_name}")
    print(f"  ├─ Provider:       {store.embedding_provider.name}")
    print(f"  ├─ Documents:      {stats.total_documents}")
    print(f"  ├─ Avg chunk size: {stats.average_chunk_size} chars")
    print(f"  └─ Last updated:   {stats.last_updated}")

    for title, counts in (("Categories", stats.categories), ("Sources", stats.sources)):
        if not counts:
            continue
        print(f"\n  {title}")
        items = sorted(counts.items(), key=lambda x: x[1], reverse=True)
        for i, (name, count) in enumerate(items):
            prefix = "└─" if i == len(items) - 1 else "├─"
            print(f"  {prefix} {name}: {count} chunks")
    print()


def cmd_recent(args):
    """Show recently modified documents."""
    store = _get_store()
    docs = store.get_recent_docs(args.days)

    print(f"\n  📅 Modified in the last {args.days:g} days: {len(docs)} documents\n")
    for i, doc in enumerate(docs, 1):
        meta = doc.metadata
        print(f"  [{i}] {meta.title or doc.id}")
        print(f"      source: {meta.source or '-'} | category: {meta.category or '-'}")
        if meta.file_path:
            print(f"      file: {meta.file_path}")
        print(f"      modified: {meta.last_modified}")


def cmd_clear(args):
    """Delete every document, after confirmation."""
    if not args.yes:
        answer = input("  ⚠  Clear the entire collection? (yes/no): ").strip().lower()
        if answer != "yes":
            print("  Operation cancelled.")
            return
    store = _get_store()
    removed = store.clear_collection(True)
    print(f"  ✓  Collection cleared ({removed} documents removed)")


def cmd_backup(args):
    """Export the collection to a JSONL file."""
    store = _get_store()
    count = store.export_backup(args.path)
    print(f"  📦 Backed up {count} documents to {args.path}")


def cmd_restore(args):
    """Restore the collection from a JSONL file."""
    store = _get_store()
    count = store.import_backup(args.path, clear_existing=args.clear)
    cleared = " (collection cleared first)" if args.clear else ""
    print(f"  ✓  Restored {count} documents from {args.path}{cleared}")


def cmd_ingest(args):
    """Chunk and add every supported file under a directory."""
    from vectordb.ingest import ingest_directory

    store = _get_store()
    count = ingest_directory(store, args.directory, chunk_size=args.chunk_size)
    print(f"  ✓  Ingested {count} chunks from {args.directory}")
    print(f"     Collection now holds {store.count()} documents")


def cmd_tools(args):
    """List protocol tools, optionally filtered by keyword."""
    from vectordb.tools.registry import match_tools

    for tool in match_tools(args.keyword or ""):
        print(f"  ⚡ {tool['name']}")
        print(f"     {tool['description']}")


def cmd_serve(args):
    """Run the HTTP tool server."""
    import uvicorn
    from vectordb.config import get_config

    cfg = get_config()
    host = args.host or cfg["server"]["host"]
    port = args.port or cfg["server"]["port"]
    print(f"  Serving tools on {host}:{port}")
    print(f"  Store: {cfg['store'].get('path') or cfg['store']['url']} / {cfg['store']['collection']}")
    uvicorn.run("vectordb.main:app", host=host, port=port, log_level="info")


# ---------------------------------------------------------------------------
# Parser with aliases
# ---------------------------------------------------------------------------

def _add_command(subparsers, names, help_text, func, setup_fn=None):
    """Register a command under its name and aliases."""
    p = subparsers.add_parser(names[0], help=help_text, aliases=names[1:])
    p.set_defaults(func=func)
    if setup_fn:
        setup_fn(p)
    return p


def build_parser() -> argparse.ArgumentParser:
    from vectordb.config import get_config

    query_cfg = get_config().get("query", {})

    parser = argparse.ArgumentParser(
        prog="vectordb",
        description="Query and manage the project vector database.",
        epilog="Run 'vectordb <command> --help' for command-specific options.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", "-V", action="version",
        version=f"vectordb {__version__}",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log library activity to stderr",
    )
    sub = parser.add_subparsers(dest="command", metavar="<command>")

    def setup_query(p):
        p.add_argument("text", nargs="+", help="Search query")
        p.add_argument("--limit", "-l", type=int, default=query_cfg.get("limit", 5),
                       help="Maximum number of results")
        p.add_argument("--threshold", "-t", type=float, default=query_cfg.get("threshold", 0.7),
                       help="Minimum similarity score (0-1)")
        p.add_argument("--category", "-c", default=None, help="Filter by category")
        p.add_argument("--source", "-s", default=None, help="Filter by source")

    _add_command(sub, ["query", "search", "find"],
                 "Semantic search with filters", cmd_query, setup_query)

    _add_command(sub, ["stats", "info"], "Show collection statistics", cmd_stats)

    def setup_recent(p):
        p.add_argument("days", nargs="?", type=float, default=7,
                       help="Days to look back (default: 7)")

    _add_command(sub, ["recent"], "Show recently modified documents", cmd_recent, setup_recent)

    def setup_clear(p):
        p.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")

    _add_command(sub, ["clear", "reset"], "Delete every document", cmd_clear, setup_clear)

    def setup_backup(p):
        p.add_argument("path", help="Output file (e.g. ./backup.jsonl)")

    _add_command(sub, ["backup", "export", "dump"],
                 "Export the collection to JSONL", cmd_backup, setup_backup)

    def setup_restore(p):
        p.add_argument("path", help="Backup file to restore from")
        p.add_argument("--clear", action="store_true",
                       help="Clear the collection before restoring")

    _add_command(sub, ["restore", "import"],
                 "Restore from a JSONL backup", cmd_restore, setup_restore)

    def setup_ingest(p):
        p.add_argument("directory", help="Directory of .md/.mdx/.txt files")
        p.add_argument("--chunk-size", type=int, default=1000, help="Characters per chunk")

    _add_command(sub, ["ingest"], "Chunk and add a directory of docs", cmd_ingest, setup_ingest)

    def setup_tools(p):
        p.add_argument("keyword", nargs="?", default=None, help="Filter by keyword")

    _add_command(sub, ["tools"], "List protocol tools", cmd_tools, setup_tools)

    def setup_serve(p):
        p.add_argument("--host", default=None, help="Override listen host")
        p.add_argument("--port", "-p", type=int, default=None, help="Override listen port")

    _add_command(sub, ["serve", "start"], "Run the HTTP tool server", cmd_serve, setup_serve)

    return parser


def main(argv=None) -> int:
    from vectordb.config import get_config, setup_logging

    parser = build_parser()
    args = parser.parse_args(argv)

    log_cfg = dict(get_config().get("logging", {}))
    log_cfg["level"] = "DEBUG" if args.verbose else "WARNING"
    setup_logging({"logging": log_cfg})

    if not args.command:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except VectorDBError as e:
        print(f"Error [{e.kind}]: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n  Interrupted.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
