"""Archive export and import for the note vault."""
from .exporter import ArchiveExporter, ExportResult
from .importer import ArchiveImporter, ImportReport

__all__ = [
    "ArchiveExporter",
    "ExportResult",
    "ArchiveImporter",
    "ImportReport"
]
