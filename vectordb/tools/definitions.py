"""
Static tool definitions for the protocol-tool surface.

Each tool maps 1:1 onto one VectorStore operation, plus search_tools for
keyword discovery over this list. Schemas are JSON Schema objects so any
tool-calling client can consume them unchanged.
"""

TOOLS: list[dict] = [
    {
        "name": "search_tools",
        "description": (
            "Search for available tools by keyword. Use this to discover specific "
            "capabilities without loading all tool definitions."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Keyword to match against tool names and descriptions"},
            },
            "required": ["query"],
        },
    },
    {
        "name": "query_vector_db",
        "description": (
            "Semantic search across project documentation. Returns relevant "
            "documentation chunks based on natural language queries."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Natural language question or search query"},
                "limit": {"type": "integer", "description": "Maximum number of results (default: 5)", "default": 5},
                "threshold": {"type": "number", "description": "Minimum similarity 0-1 (default: 0.7)", "default": 0.7},
                "category": {"type": "string", "description": "Filter by category (e.g. architecture, design)"},
                "source": {"type": "string", "description": "Filter by source (e.g. docs, memory-bank)"},
            },
            "required": ["query"],
        },
    },
    {
        "name": "search_by_category",
        "description": "Search within a specific documentation category",
        "inputSchema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "description": "Category to search within"},
                "query": {"type": "string", "description": "Search query"},
                "limit": {"type": "integer", "description": "Maximum number of results", "default": 5},
                "threshold": {"type": "number", "description": "Minimum similarity 0-1", "default": 0.7},
            },
            "required": ["category", "query"],
        },
    },
    {
        "name": "get_stats",
        "description": "Get statistics about the vector database collection",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": "get_recent_docs",
        "description": "Get recently modified documents",
        "inputSchema": {
            "type": "object",
            "properties": {
                "days": {"type": "number", "description": "Number of days to look back (default: 7)", "default": 7},
            },
        },
    },
    {
        "name": "add_documents",
        "description": "Add new documents to the vector database",
        "inputSchema": {
            "type": "object",
            "properties": {
                "documents": {
                    "type": "array",
                    "description": "Documents to add; an existing id is overwritten",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string"},
                            "content": {"type": "string"},
                            "metadata": {
                                "type": "object",
                                "properties": {
                                    "source": {"type": "string"},
                                    "category": {"type": "string"},
                                    "filePath": {"type": "string"},
                                    "title": {"type": "string"},
                                    "lastModified": {"type": "string"},
                                },
                            },
                        },
                        "required": ["id", "content", "metadata"],
                    },
                },
            },
            "required": ["documents"],
        },
    },
    {
        "name": "backup_database",
        "description": "Export the entire vector database to a backup file",
        "inputSchema": {
            "type": "object",
            "properties": {
                "outputPath": {
                    "type": "string",
                    "description": "Where to write the backup (e.g. ./backups/vectordb-backup.jsonl)",
                },
            },
            "required": ["outputPath"],
        },
    },
    {
        "name": "restore_database",
        "description": "Restore the vector database from a backup file",
        "inputSchema": {
            "type": "object",
            "properties": {
                "inputPath": {"type": "string", "description": "Backup file to restore from"},
                "clearExisting": {
                    "type": "boolean",
                    "description": "Clear existing data before restoring (default: false)",
                    "default": False,
                },
            },
            "required": ["inputPath"],
        },
    },
]
