"""Archive formats, path mapping and errors."""
from .errors import (
    ArchiveError,
    ArchiveReadError,
    ArchiverError,
    ArchiveWriteError,
    DocumentNotFoundError,
    EncryptedEntryError,
    InvalidPasswordError,
    NoActiveDocumentError,
    SelectionCancelledError,
    UnsafeEntryPathError,
    UnsupportedFormatError,
)

__all__ = [
    "ArchiveError",
    "ArchiveReadError",
    "ArchiverError",
    "ArchiveWriteError",
    "DocumentNotFoundError",
    "EncryptedEntryError",
    "InvalidPasswordError",
    "NoActiveDocumentError",
    "SelectionCancelledError",
    "UnsafeEntryPathError",
    "UnsupportedFormatError",
]
