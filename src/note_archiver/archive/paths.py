"""Mapping between store paths and archive entry names."""
import logging
import re
from typing import TYPE_CHECKING, List, Optional

from note_archiver.archive.errors import UnsafeEntryPathError

if TYPE_CHECKING:
    from note_archiver.storage.base import DocumentStore

logger = logging.getLogger(__name__)

DRIVE_RE = re.compile(r"^[A-Za-z]:/")

def normalize_path(path: str) -> str:
    """Normalize a store path: forward slashes, no empty or "." segments,
    no leading or trailing slash."""
    segments = [s for s in path.replace("\\", "/").split("/") if s not in ("", ".")]
    return "/".join(segments)

def _join(root_folder: Optional[str], path: str) -> str:
    root = normalize_path(root_folder or "")
    return f"{root}/{path}" if root else path

def to_archive_path(store_path: str, root_folder: Optional[str] = None) -> str:
    """Entry name for a store path, optionally under an archive root folder."""
    return _join(root_folder, normalize_path(store_path))

def to_store_path(entry_name: str, root_folder: Optional[str] = None) -> str:
    """Store path for an archive entry, optionally under an import folder.

    Entry names that are absolute or climb out with ".." are rejected.
    """
    raw = entry_name.replace("\\", "/")
    if raw.startswith("/") or DRIVE_RE.match(raw):
        raise UnsafeEntryPathError(entry_name)
    normalized = normalize_path(raw)
    if not normalized or ".." in normalized.split("/"):
        raise UnsafeEntryPathError(entry_name)
    return _join(root_folder, normalized)

def ancestor_folders(path: str) -> List[str]:
    """Ancestor folders of a path, shortest first, excluding the path itself."""
    segments = normalize_path(path).split("/")[:-1]
    return ["/".join(segments[:i]) for i in range(1, len(segments) + 1)]

def ensure_folders_exist(store: "DocumentStore", path: str) -> List[str]:
    """Create any missing ancestor folders of ``path``, parents first.

    Returns the folders that were created.
    """
    created = []
    for folder in ancestor_folders(path):
        if not store.exists(folder):
            store.create_folder(folder)
            logger.debug(f"Created folder {folder}")
            created.append(folder)
    return created
