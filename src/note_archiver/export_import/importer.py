"""Import an archive's files back into the document store."""
import datetime
import logging
from pathlib import Path
from typing import List, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from note_archiver.archive.errors import ArchiverError
from note_archiver.archive.formats import ZipArchiveFormat, get_archive_format
from note_archiver.archive.paths import ensure_folders_exist, to_store_path
from note_archiver.config import ArchiveSettings
from note_archiver.models.schema import ArchiveEntry, ArchiveKind, is_text_path
from note_archiver.prompts import IMPORT, PasswordProvider, normalize_password
from note_archiver.storage.base import DocumentStore

console = Console()
logger = logging.getLogger(__name__)

class ImportReport:
    """Track import statistics and per-entry failures."""

    def __init__(self, archive_name: str = ""):
        self.archive_name = archive_name
        self.total_entries = 0
        self.imported = 0
        self.updated = 0
        self.replaced = 0
        self.failed = 0
        self.folders_created = 0
        self.paths: List[str] = []
        self.warnings: List[str] = []
        self.errors: List[dict] = []
        self.start_time = datetime.datetime.now()

    @property
    def succeeded(self) -> int:
        return self.imported + self.updated + self.replaced

    @property
    def success(self) -> bool:
        return self.failed == 0

    def add_error(self, entry_name: str, error: str):
        """Record a failed entry."""
        self.failed += 1
        self.errors.append({"entry": entry_name, "error": str(error)})

    def add_warning(self, message: str):
        """Record import warning."""
        self.warnings.append(message)

    def get_duration(self) -> float:
        """Get import duration in seconds."""
        return (datetime.datetime.now() - self.start_time).total_seconds()

    def to_dict(self) -> dict:
        return {
            "archive": self.archive_name,
            "total_entries": self.total_entries,
            "imported": self.imported,
            "updated": self.updated,
            "replaced": self.replaced,
            "failed": self.failed,
            "folders_created": self.folders_created,
            "warnings": list(self.warnings),
            "errors": list(self.errors)
        }

    def display_summary(self, out: Optional[Console] = None):
        """Display import summary to console."""
        out = out or console

        table = Table(title=f"Import of {escape(self.archive_name)}" if self.archive_name else "Import")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Entries", str(self.total_entries))
        table.add_row("Created", str(self.imported))
        table.add_row("Updated in place", str(self.updated))
        table.add_row("Replaced", str(self.replaced))
        table.add_row("Failed", str(self.failed))
        table.add_row("Folders created", str(self.folders_created))
        table.add_row("Duration", f"{self.get_duration():.2f} seconds")

        out.print(table)

        if self.warnings:
            out.print(f"\n[yellow]Warnings ({len(self.warnings)}):[/yellow]")
            for warning in self.warnings[:5]:
                out.print(f"  • {escape(warning)}")
            if len(self.warnings) > 5:
                out.print(f"  ... and {len(self.warnings) - 5} more")

        if self.errors:
            out.print(f"\n[red]Errors ({len(self.errors)}):[/red]")
            for error in self.errors[:5]:
                out.print(f"  • {escape(error['entry'])}: {escape(error['error'])}")
            if len(self.errors) > 5:
                out.print(f"  ... and {len(self.errors) - 5} more")

class ArchiveImporter:
    """Import zip, tar and tar.gz archives into a document store.

    Binary files replace whatever was at their path (the old file goes to
    trash). Markdown files update an existing note in place so the note
    keeps its identity.
    """

    def __init__(self, store: DocumentStore, settings: ArchiveSettings,
                 password_provider: PasswordProvider):
        """Initialize importer with its collaborators."""
        self.store = store
        self.settings = settings
        self.password_provider = password_provider

    def import_file(self, file_path: Union[str, Path]) -> ImportReport:
        """Import an archive file from disk."""
        file_path = Path(file_path)
        # Detect the format before touching the file
        ArchiveKind.from_filename(file_path.name)
        with open(file_path, "rb") as f:
            blob = f.read()
        return self.import_archive(file_path.name, blob)

    def import_archive(self, file_name: str, blob: bytes) -> ImportReport:
        """Import an archive blob; the format comes from ``file_name``."""
        kind = ArchiveKind.from_filename(file_name)
        archive_format = get_archive_format(kind)

        password = None
        if isinstance(archive_format, ZipArchiveFormat) and archive_format.is_encrypted(blob):
            # The prompt must come before the first store write
            password = normalize_password(self.password_provider.get_password(IMPORT))

        report = ImportReport(file_name)
        logger.info(f"Importing {kind.value} archive {file_name} into '{self.settings.import_folder}'")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            # Entry count is unknown until the archive is read
            task = progress.add_task("Importing entries...", total=None)

            for entry in archive_format.read(blob, password):
                progress.update(task, advance=1, description=f"Importing {escape(entry.name)}")
                report.total_entries += 1
                self.import_entry(entry, report)

        logger.info(
            f"Imported {report.succeeded} of {report.total_entries} entries "
            f"from {file_name} ({report.failed} failed)"
        )
        return report

    def import_entry(self, entry: ArchiveEntry, report: ImportReport) -> bool:
        """Write one archive entry to the store, recording the outcome."""
        if entry.is_directory:
            return True
        try:
            full_path = to_store_path(entry.name, self.settings.import_folder)
            content = entry.content or b""
            text = content.decode("utf-8") if is_text_path(full_path) else None

            if self.store.is_folder(full_path):
                raise IsADirectoryError(f"{full_path} is an existing folder")

            report.folders_created += len(ensure_folders_exist(self.store, full_path))
            existing = self.store.is_file(full_path)

            if text is None:
                if existing:
                    self.store.trash(full_path)
                    report.add_warning(f"Replaced {full_path}, previous version moved to trash")
                self.store.create_binary(full_path, content)
                if existing:
                    report.replaced += 1
                else:
                    report.imported += 1
            elif existing:
                self.store.modify_text(full_path, text)
                report.updated += 1
            else:
                self.store.create_text(full_path, text)
                report.imported += 1

            report.paths.append(full_path)
            logger.debug(f"Imported {entry.name} to {full_path}")
            return True

        except UnicodeDecodeError as e:
            logger.error(f"Entry {entry.name} is not valid UTF-8 text: {e}")
            report.add_error(entry.name, f"not valid UTF-8 text: {e}")
        except (ArchiverError, OSError, ValueError) as e:
            logger.error(f"Error importing {entry.name}: {e}")
            report.add_error(entry.name, str(e))
        return False
