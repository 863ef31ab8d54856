"""
vectordb — a document-oriented access layer over an embedding-backed
vector collection, with filtered semantic search, collection statistics
and portable JSONL backup/restore.
"""

__version__ = "1.0.0"
