"""Delivery of finished archives: a share target or the store itself."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple, Union

from note_archiver.archive.paths import ensure_folders_exist, normalize_path
from note_archiver.models.schema import ArchiveKind
from note_archiver.storage.base import DocumentStore

logger = logging.getLogger(__name__)

def share_file_name(kind: ArchiveKind) -> str:
    return f"share.{kind.extension}"

class ShareSink(ABC):
    """Somewhere an archive blob can be handed off to."""

    @abstractmethod
    def can_share(self, file_name: str, mime_type: str) -> bool:
        """Whether this sink accepts the file."""

    @abstractmethod
    def share(self, blob: bytes, file_name: str, mime_type: str) -> str:
        """Hand off the blob and return where it went."""

class DirectoryShareSink(ShareSink):
    """Shares by writing the archive into a directory outside the store."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def can_share(self, file_name: str, mime_type: str) -> bool:
        return True

    def share(self, blob: bytes, file_name: str, mime_type: str) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / file_name
        target.write_bytes(blob)
        logger.info(f"Shared {file_name} ({mime_type}) to {target}")
        return str(target)

class StoreShareSink(ShareSink):
    """Writes the archive into the store under the export folder.

    A previous file at the same path is moved to trash first.
    """

    def __init__(self, store: DocumentStore, export_folder: str = "exports"):
        self.store = store
        self.export_folder = export_folder

    def target_path(self, file_name: str) -> str:
        return normalize_path(f"{self.export_folder}/{file_name}")

    def can_share(self, file_name: str, mime_type: str) -> bool:
        return True

    def share(self, blob: bytes, file_name: str, mime_type: str) -> str:
        full_path = self.target_path(file_name)

        if self.store.is_file(full_path):
            logger.info(f"Moving previous {full_path} to trash")
            self.store.trash(full_path)

        ensure_folders_exist(self.store, full_path)
        self.store.create_binary(full_path, blob)
        logger.info(f"Archive created at {full_path}")
        return full_path

class ShareDispatcher:
    """Prefers a native share target, falling back to the store."""

    def __init__(self, fallback: StoreShareSink, native: Optional[ShareSink] = None):
        self.fallback = fallback
        self.native = native

    def deliver(self, blob: bytes, kind: ArchiveKind) -> Tuple[str, bool]:
        """Deliver the archive; returns (location, shared natively)."""
        file_name = share_file_name(kind)
        if self.native is not None and self.native.can_share(file_name, kind.mime_type):
            return self.native.share(blob, file_name, kind.mime_type), True
        return self.fallback.share(blob, file_name, kind.mime_type), False
