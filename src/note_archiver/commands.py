"""The four archive commands and their user-facing notices."""
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.markup import escape

from note_archiver.archive.errors import (
    ArchiveReadError, ArchiverError, ArchiveWriteError, SelectionCancelledError
)
from note_archiver.export_import.exporter import ArchiveExporter, ExportResult
from note_archiver.export_import.importer import ArchiveImporter, ImportReport
from note_archiver.models.schema import ArchiveKind

logger = logging.getLogger(__name__)

class ArchiveCommands:
    """Zero-argument export/import actions for the host to bind.

    ``active_document`` returns the path of the note to export (or None) and
    ``select_archive`` returns the archive file to import (or None when the
    user closes the picker). Every ArchiverError is turned into a notice
    here; nothing propagates to the host.
    """

    def __init__(
        self,
        exporter: ArchiveExporter,
        importer: ArchiveImporter,
        active_document: Callable[[], Optional[str]],
        select_archive: Callable[[], Optional[Union[str, Path]]],
        console: Optional[Console] = None,
    ):
        self.exporter = exporter
        self.importer = importer
        self.active_document = active_document
        self.select_archive = select_archive
        self.console = console or Console()
        self.notices: List[str] = []
        self.last_error: Optional[ArchiverError] = None

    def notify(self, message: str, style: str = "") -> None:
        self.notices.append(message)
        text = escape(message)
        self.console.print(f"[{style}]{text}[/{style}]" if style else text)

    def export_zip(self) -> Optional[ExportResult]:
        return self._export(ArchiveKind.ZIP)

    def export_tar(self) -> Optional[ExportResult]:
        return self._export(ArchiveKind.TAR)

    def export_tar_gz(self) -> Optional[ExportResult]:
        return self._export(ArchiveKind.TAR_GZ)

    def import_from_archive(self) -> Optional[ImportReport]:
        self.last_error = None
        try:
            file_path = self.select_archive()
            if file_path is None:
                raise SelectionCancelledError("No archive selected")
            report = self.importer.import_file(file_path)
        except SelectionCancelledError as e:
            self._cancelled(e)
            return None
        except ArchiverError as e:
            self._failed("import", e)
            return None
        except OSError as e:
            self._failed("import", ArchiveReadError(f"Cannot open archive: {e}"))
            return None

        if report.success:
            self.notify(f"Imported {report.succeeded} files from {report.archive_name}", "green")
        else:
            self.notify(
                f"Imported {report.succeeded} of {report.total_entries} files from "
                f"{report.archive_name}, {report.failed} failed",
                "yellow"
            )
        return report

    def _export(self, kind: ArchiveKind) -> Optional[ExportResult]:
        self.last_error = None
        try:
            result = self.exporter.export(self.active_document(), kind)
        except SelectionCancelledError as e:
            self._cancelled(e)
            return None
        except ArchiverError as e:
            self._failed("export", e)
            return None
        except OSError as e:
            self._failed("export", ArchiveWriteError(f"Cannot read from the store: {e}"))
            return None

        if result.shared:
            self.notify(f"Archive shared to {result.location}", "green")
        else:
            self.notify(f"Archive created at {result.location}", "green")
        return result

    def _cancelled(self, error: SelectionCancelledError) -> None:
        self.last_error = error
        logger.info(f"Cancelled: {error}")
        self.notify(error.notice)

    def _failed(self, action: str, error: ArchiverError) -> None:
        self.last_error = error
        logger.error(f"Archive {action} failed: {error}")
        self.notify(error.notice, "red")
