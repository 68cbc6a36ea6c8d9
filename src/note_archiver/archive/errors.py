"""Errors raised while exporting and importing archives."""
from typing import Optional

class ArchiverError(Exception):
    """Base class for all archiver faults.

    ``notice`` is the short message shown to the user when the fault reaches
    the command boundary.
    """
    notice = "Archive operation failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.notice)

class SelectionCancelledError(ArchiverError):
    """The user dismissed a file or password prompt."""
    notice = "Cancelled"

class NoActiveDocumentError(ArchiverError):
    """Export was requested without a document to start from."""
    notice = "No active note to export"

class DocumentNotFoundError(ArchiverError):
    """A store path does not name an existing document."""
    notice = "Document not found"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Document {path} not found")

class UnsupportedFormatError(ArchiverError):
    """The file is not a zip, tar or tar.gz archive."""
    notice = "Unsupported archive type"

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(f"Unsupported archive type: {file_name}")

class UnsafeEntryPathError(ArchiverError):
    """An archive entry name would escape the import folder."""
    notice = "Archive entry has an unsafe path"

    def __init__(self, entry_name: str):
        self.entry_name = entry_name
        super().__init__(f"Unsafe archive entry path: {entry_name!r}")

class ArchiveError(ArchiverError):
    """Base class for archive format faults."""

class ArchiveWriteError(ArchiveError):
    """The archive could not be written or finalized."""
    notice = "Could not create archive"

class ArchiveReadError(ArchiveError):
    """The archive is malformed or could not be read."""
    notice = "Could not read archive"

class EncryptedEntryError(ArchiveReadError):
    """An entry is encrypted and no password was supplied."""
    notice = "Archive is encrypted, a password is required"

class InvalidPasswordError(ArchiveReadError):
    """The supplied password does not decrypt the archive."""
    notice = "Wrong password"
