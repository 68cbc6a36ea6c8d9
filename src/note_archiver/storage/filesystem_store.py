"""Document store backed by a vault directory on disk."""
import datetime
import logging
import shutil
from pathlib import Path
from typing import List, Union

from note_archiver.archive.paths import normalize_path
from note_archiver.models.schema import Document
from note_archiver.storage.base import DocumentStore

logger = logging.getLogger(__name__)

TRASH_DIR = ".trash"

class FileSystemDocumentStore(DocumentStore):
    """A vault directory whose files are the store's documents.

    Hidden entries (names starting with ".") are not part of the store;
    trashed items are moved to ``<root>/.trash``.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized filesystem document store at {self.root}")

    def _resolve(self, path: str) -> Path:
        relative = normalize_path(path)
        if not relative:
            raise ValueError("Empty store path")
        full = (self.root / relative).resolve()
        if full != self.root and self.root not in full.parents:
            raise ValueError(f"Path {path} escapes the vault")
        return full

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def is_folder(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def create_folder(self, path: str) -> None:
        # mkdir without parents=True enforces parent-first creation
        self._resolve(path).mkdir()

    def read_binary(self, path: str) -> bytes:
        full = self._resolve(path)
        if full.is_dir():
            raise IsADirectoryError(f"{path} is a folder")
        return full.read_bytes()

    def create_binary(self, path: str, data: bytes) -> Document:
        full = self._resolve(path)
        if not full.parent.is_dir():
            raise FileNotFoundError(f"Parent folder of {path} does not exist")
        with open(full, "xb") as f:
            f.write(data)
        return self._document(path, data)

    def modify(self, path: str, data: bytes) -> Document:
        full = self._resolve(path)
        if not full.is_file():
            raise FileNotFoundError(f"File {path} does not exist")
        # Rewrite the same file so it keeps its inode and creation time
        with open(full, "r+b") as f:
            f.write(data)
            f.truncate()
        return self._document(path, data)

    def trash(self, path: str) -> None:
        full = self._resolve(path)
        if not full.exists():
            raise FileNotFoundError(f"{path} does not exist")

        destination = self.root / TRASH_DIR / normalize_path(path)
        if destination.exists():
            stamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            destination = destination.with_name(f"{destination.stem} {stamp}{destination.suffix}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(full), str(destination))
        logger.info(f"Moved {path} to trash")

    def list_files(self) -> List[str]:
        files = []
        for file_path in self.root.rglob("*"):
            relative = file_path.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if file_path.is_file():
                files.append(relative.as_posix())
        return sorted(files)

    def list_trash(self) -> List[str]:
        """Paths of trashed files relative to the trash folder."""
        trash_root = self.root / TRASH_DIR
        if not trash_root.exists():
            return []
        return sorted(
            p.relative_to(trash_root).as_posix()
            for p in trash_root.rglob("*") if p.is_file()
        )

    def _document(self, path: str, data: bytes) -> Document:
        stat = self._resolve(path).stat()
        return Document(
            path=normalize_path(path),
            content=data,
            updated_at=datetime.datetime.fromtimestamp(stat.st_mtime)
        )
