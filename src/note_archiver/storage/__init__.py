"""Document stores."""
from .base import DocumentStore
from .filesystem_store import FileSystemDocumentStore
from .sqlite_store import SQLiteDocumentStore

__all__ = ["DocumentStore", "FileSystemDocumentStore", "SQLiteDocumentStore"]
