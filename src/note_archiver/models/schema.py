"""Data models for documents, links and archive entries."""
import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from note_archiver.archive.errors import UnsupportedFormatError

TEXT_EXTENSION = ".md"

def is_text_path(path: str) -> bool:
    """Whether a store path names a text (markdown) document."""
    return path.endswith(TEXT_EXTENSION)

class LinkKind(str, Enum):
    """How one document refers to another."""
    LINK = "link"
    EMBED = "embed"
    FRONTMATTER = "frontmatter"

class ArchiveKind(str, Enum):
    """Supported archive formats."""
    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return {
            ArchiveKind.ZIP: "application/zip",
            ArchiveKind.TAR: "application/x-tar",
            ArchiveKind.TAR_GZ: "application/gzip",
        }[self]

    @property
    def supports_password(self) -> bool:
        return self is ArchiveKind.ZIP

    @classmethod
    def from_filename(cls, file_name: str) -> "ArchiveKind":
        """Detect the archive kind from a file name."""
        lowered = file_name.lower()
        if lowered.endswith(".tar.gz") or lowered.endswith(".tgz"):
            return cls.TAR_GZ
        if lowered.endswith(".tar"):
            return cls.TAR
        if lowered.endswith(".zip"):
            return cls.ZIP
        raise UnsupportedFormatError(file_name)

class Document(BaseModel):
    """A file in the document store, identified by its path."""
    path: str
    content: bytes = b""
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    @property
    def is_binary(self) -> bool:
        return not is_text_path(self.path)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

class Link(BaseModel):
    """A reference from one document to a link target token."""
    model_config = ConfigDict(frozen=True)

    source_path: str
    target: str
    kind: LinkKind = LinkKind.LINK

class FrontierEntry(BaseModel):
    """A document queued for expansion during traversal."""
    model_config = ConfigDict(frozen=True)

    path: str
    depth: int = Field(ge=0)

class ArchiveEntry(BaseModel):
    """One item inside an archive."""
    name: str
    is_directory: bool = False
    content: Optional[bytes] = None
