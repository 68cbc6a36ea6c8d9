"""Document store interface used by the archiver core."""
from abc import ABC, abstractmethod
from typing import List, Optional

from note_archiver.models.schema import Document

class DocumentStore(ABC):
    """Hierarchical tree of files and folders addressed by slash paths.

    Paths are relative to the store root and never start or end with a
    slash. Folders must exist before a file is created inside them.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether a file or folder exists at the path."""

    @abstractmethod
    def is_folder(self, path: str) -> bool:
        """Whether the path names an existing folder."""

    @abstractmethod
    def create_folder(self, path: str) -> None:
        """Create a single folder. Its parent must already exist."""

    @abstractmethod
    def read_binary(self, path: str) -> bytes:
        """Read a file's bytes."""

    @abstractmethod
    def create_binary(self, path: str, data: bytes) -> Document:
        """Create a new file; fails if something already exists at the path."""

    @abstractmethod
    def modify(self, path: str, data: bytes) -> Document:
        """Replace an existing file's content in place."""

    @abstractmethod
    def trash(self, path: str) -> None:
        """Move a file or folder to the trash (recoverable deletion)."""

    @abstractmethod
    def list_files(self) -> List[str]:
        """All file paths in the store, excluding folders and trash."""

    def read_text(self, path: str) -> str:
        return self.read_binary(path).decode("utf-8")

    def create_text(self, path: str, text: str) -> Document:
        return self.create_binary(path, text.encode("utf-8"))

    def modify_text(self, path: str, text: str) -> Document:
        return self.modify(path, text.encode("utf-8"))

    def is_file(self, path: str) -> bool:
        return self.exists(path) and not self.is_folder(path)

    def get(self, path: str) -> Optional[Document]:
        """Return the file at the path, or None for folders and missing paths."""
        if not self.is_file(path):
            return None
        return Document(path=path, content=self.read_binary(path))
