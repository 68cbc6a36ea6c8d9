"""Export a note and its linked notes into a single archive."""
import logging
from typing import Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from note_archiver.archive.errors import ArchiveWriteError, NoActiveDocumentError
from note_archiver.archive.formats import get_archive_format
from note_archiver.archive.paths import to_archive_path
from note_archiver.config import ArchiveSettings
from note_archiver.graph.links import LinkResolver
from note_archiver.graph.traversal import LinkGraphTraversal
from note_archiver.models.schema import ArchiveKind, Document
from note_archiver.prompts import EXPORT, PasswordProvider, normalize_password
from note_archiver.sharing import ShareDispatcher, share_file_name
from note_archiver.storage.base import DocumentStore

console = Console()
logger = logging.getLogger(__name__)

class ExportResult(BaseModel):
    """Outcome of one export."""
    kind: ArchiveKind
    file_name: str
    location: str
    paths: List[str] = Field(default_factory=list)
    encrypted: bool = False
    size: int = 0
    shared: bool = False
    warnings: List[str] = Field(default_factory=list)

class ArchiveExporter:
    """Export the link closure of a note as a zip, tar or tar.gz archive."""

    def __init__(
        self,
        store: DocumentStore,
        resolver: LinkResolver,
        settings: ArchiveSettings,
        password_provider: PasswordProvider,
        dispatcher: ShareDispatcher,
    ):
        """Initialize exporter with its collaborators."""
        self.store = store
        self.settings = settings
        self.password_provider = password_provider
        self.dispatcher = dispatcher
        self.traversal = LinkGraphTraversal(store, resolver)
        self.export_stats = self._new_stats()

    def _new_stats(self) -> dict:
        return {
            "total_documents": 0,
            "exported": 0,
            "skipped": 0,
            "warnings": []
        }

    def collect_entries(self, paths: Iterable[str]) -> List[Tuple[str, bytes]]:
        """Read the bytes of each path, skipping folders and vanished files."""
        paths = list(paths)
        entries = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True
        ) as progress:
            task = progress.add_task("Collecting documents...", total=len(paths))

            for path in paths:
                progress.update(task, advance=1, description=f"Collecting {escape(path)}")
                self.export_stats["total_documents"] += 1
                if not self.store.is_file(path):
                    logger.warning(f"Skipping {path}: not a file in the store")
                    self.export_stats["skipped"] += 1
                    self.export_stats["warnings"].append(f"Skipped {path}: not a file")
                    continue
                entries.append((to_archive_path(path), self.store.read_binary(path)))
                self.export_stats["exported"] += 1
        return entries

    def resolve_password(self, kind: ArchiveKind, password: Optional[str] = None) -> Optional[str]:
        """Password for the archive, or None when it will not be encrypted.

        Only zip archives are encrypted. Raises SelectionCancelledError if
        the user cancels the prompt.
        """
        if not kind.supports_password:
            return None
        if password is None:
            password = self.password_provider.get_password(EXPORT)
        return normalize_password(password)

    def export(
        self,
        start: Union[Document, str, None],
        kind: ArchiveKind,
        max_depth: Optional[int] = None,
        password: Optional[str] = None,
    ) -> ExportResult:
        """Export ``start`` and the notes it reaches within ``max_depth`` links."""
        if start is None:
            raise NoActiveDocumentError()
        start_path = start.path if isinstance(start, Document) else start
        if not self.store.is_file(start_path):
            raise NoActiveDocumentError(f"No note at {start_path} to export")

        kind = ArchiveKind(kind)
        depth = self.settings.max_depth if max_depth is None else max_depth
        visited = self.traversal.walk(start_path, depth)
        paths = [entry.path for entry in visited]

        # The prompt must come before anything is written
        archive_password = self.resolve_password(kind, password)

        self.export_stats = self._new_stats()
        entries = self.collect_entries(paths)
        archive_format = get_archive_format(kind)
        blob = archive_format.write(entries, archive_password)

        try:
            location, shared = self.dispatcher.deliver(blob, kind)
        except (OSError, ValueError) as e:
            raise ArchiveWriteError(f"Failed to save archive: {e}") from e

        logger.info(f"Exported {len(entries)} documents from {start_path} to {location}")
        return ExportResult(
            kind=kind,
            file_name=share_file_name(kind),
            location=location,
            paths=[name for name, _ in entries],
            encrypted=archive_password is not None,
            size=len(blob),
            shared=shared,
            warnings=list(self.export_stats["warnings"])
        )
