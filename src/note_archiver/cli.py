#!/usr/bin/env python3
"""Command-line entry point for exporting and importing note archives."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from note_archiver.archive.errors import SelectionCancelledError
from note_archiver.commands import ArchiveCommands
from note_archiver.config import ArchiveSettings, config, load_settings, save_settings
from note_archiver.export_import.exporter import ArchiveExporter
from note_archiver.export_import.importer import ArchiveImporter
from note_archiver.graph.links import MarkdownLinkResolver
from note_archiver.models.schema import ArchiveKind
from note_archiver.prompts import (
    ConsolePasswordPrompt, PasswordProvider, SettingsPasswordProvider, StaticPasswordProvider
)
from note_archiver.sharing import DirectoryShareSink, ShareDispatcher, StoreShareSink
from note_archiver.storage.base import DocumentStore
from note_archiver.storage.filesystem_store import FileSystemDocumentStore
from note_archiver.storage.sqlite_store import SQLiteDocumentStore

console = Console()
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2
EXIT_CANCELLED = 130

EXPORT_COMMANDS = {
    ArchiveKind.ZIP.value: "export_zip",
    ArchiveKind.TAR.value: "export_tar",
    ArchiveKind.TAR_GZ.value: "export_tar_gz",
}

def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all commands and options."""
    parser = argparse.ArgumentParser(
        prog="note-archiver",
        description="Export a note with its linked notes to an archive, or import an archive into the vault",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  note-archiver --vault ~/notes export zip Home.md
  note-archiver --vault ~/notes export tar.gz Projects/Plan.md --depth -1
  note-archiver --vault ~/notes import ~/Downloads/share.zip
  note-archiver settings set maxDepth 2
        """,
    )
    parser.add_argument("--vault", type=Path, help="Vault directory (default: from config)")
    parser.add_argument("--db-path", type=Path,
                        help="Use the SQLite document store at this path instead of a vault directory")
    parser.add_argument("--settings", type=Path, help="Settings file (default: from config)")
    parser.add_argument("--output-dir", type=Path,
                        help="Share exported archives to this directory instead of the vault's export folder")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export a note and its linked notes")
    export_parser.add_argument("format", choices=list(EXPORT_COMMANDS), help="Archive format")
    export_parser.add_argument("note", help="Store path of the note to start from")
    export_parser.add_argument("--depth", type=int,
                               help="Maximum link depth, -1 for unbounded (default: from settings)")
    export_parser.add_argument("--password", help="Zip password (default: from settings or prompt)")

    import_parser = subparsers.add_parser("import", help="Import an archive into the vault")
    import_parser.add_argument("archive", type=Path, help="zip, tar or tar.gz file")
    import_parser.add_argument("--import-folder", help="Store folder to import into (default: from settings)")
    import_parser.add_argument("--password", help="Zip password (default: prompt when encrypted)")

    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_command", required=True)
    settings_sub.add_parser("show", help="Show current settings")
    set_parser = settings_sub.add_parser("set", help="Change one setting")
    set_parser.add_argument("key", choices=list(ArchiveSettings().to_data()))
    set_parser.add_argument("value")

    return parser

def open_store(args: argparse.Namespace) -> DocumentStore:
    """Open the document store selected by the arguments or config."""
    if args.db_path:
        return SQLiteDocumentStore(args.db_path)
    if args.vault:
        return FileSystemDocumentStore(args.vault)
    if config.store_backend == "sqlite":
        return SQLiteDocumentStore()
    return FileSystemDocumentStore(config.get_absolute_path(config.vault_dir))

def password_provider(args: argparse.Namespace, settings: ArchiveSettings) -> PasswordProvider:
    if getattr(args, "password", None) is not None:
        return StaticPasswordProvider(args.password)
    return SettingsPasswordProvider(settings, ConsolePasswordPrompt(console))

def build_commands(args: argparse.Namespace, settings: ArchiveSettings) -> ArchiveCommands:
    """Wire the store, resolver, sinks and orchestrators for one run."""
    store = open_store(args)
    provider = password_provider(args, settings)
    native = DirectoryShareSink(args.output_dir) if args.output_dir else None
    dispatcher = ShareDispatcher(StoreShareSink(store, settings.export_folder), native)

    exporter = ArchiveExporter(store, MarkdownLinkResolver(store), settings, provider, dispatcher)
    importer = ArchiveImporter(store, settings, provider)
    return ArchiveCommands(
        exporter,
        importer,
        active_document=lambda: getattr(args, "note", None),
        select_archive=lambda: getattr(args, "archive", None),
        console=console,
    )

def show_settings(settings: ArchiveSettings) -> None:
    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in settings.to_data().items():
        shown = "********" if key == "defaultPassword" and value else repr(value)
        table.add_row(key, shown)
    console.print(table)

def run_settings(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    if args.settings_command == "show":
        show_settings(settings)
        return EXIT_OK

    data = settings.to_data()
    data[args.key] = args.value
    try:
        updated = ArchiveSettings.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]Invalid value for {args.key}: {e.errors()[0]['msg']}[/red]")
        return EXIT_FAILED
    path = save_settings(updated, args.settings)
    console.print(f"✓ Saved {args.key} to {path}")
    return EXIT_OK

def exit_code(commands: ArchiveCommands, succeeded: bool) -> int:
    if succeeded:
        return EXIT_OK
    if isinstance(commands.last_error, SelectionCancelledError):
        return EXIT_CANCELLED
    return EXIT_FAILED

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level or config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command == "settings":
        return run_settings(args)

    settings = load_settings(args.settings)
    if args.command == "export" and args.depth is not None:
        if args.depth < -1:
            console.print("[red]--depth must be -1 or greater[/red]")
            return EXIT_FAILED
        settings = settings.model_copy(update={"max_depth": args.depth})
    if args.command == "import" and args.import_folder is not None:
        settings = settings.model_copy(update={"import_folder": args.import_folder})

    commands = build_commands(args, settings)

    if args.command == "export":
        result = getattr(commands, EXPORT_COMMANDS[args.format])()
        return exit_code(commands, result is not None)

    report = commands.import_from_archive()
    if report is None:
        return exit_code(commands, False)
    report.display_summary(console)
    return EXIT_OK if report.success else EXIT_PARTIAL

if __name__ == "__main__":
    sys.exit(main())
