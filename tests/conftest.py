"""Shared fixtures for note archiver tests."""
from typing import Union

import pytest

from note_archiver.archive.paths import ensure_folders_exist
from note_archiver.storage.filesystem_store import FileSystemDocumentStore
from note_archiver.storage.sqlite_store import SQLiteDocumentStore

@pytest.fixture
def vault(tmp_path):
    """Create an empty vault directory store."""
    return FileSystemDocumentStore(tmp_path / "vault")

@pytest.fixture
def sqlite_store(tmp_path):
    """Create an empty SQLite document store."""
    return SQLiteDocumentStore(tmp_path / "store.db")

@pytest.fixture
def add_file():
    """Return a helper that writes a file into a store, creating its folders."""
    def _add(store, path: str, content: Union[str, bytes]):
        data = content.encode("utf-8") if isinstance(content, str) else content
        ensure_folders_exist(store, path)
        return store.create_binary(path, data)
    return _add

@pytest.fixture
def linked_vault(vault, add_file):
    """Vault where Home links to Notes/A, A to Notes/B, and B back to Home."""
    add_file(vault, "Home.md", "# Home\n\nStart at [[Notes/A]].\n")
    add_file(vault, "Notes/A.md", "# A\n\nNext is [[B]].\n")
    add_file(vault, "Notes/B.md", "# B\n\nBack to [[Home]].\n")
    return vault
