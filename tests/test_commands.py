"""Tests for the archive commands and their notices."""
import io
import struct

import pytest
from rich.console import Console

from note_archiver.archive.errors import (
    InvalidPasswordError, NoActiveDocumentError, SelectionCancelledError, UnsupportedFormatError
)
from note_archiver.archive.formats import get_archive_format
from note_archiver.commands import ArchiveCommands
from note_archiver.config import ArchiveSettings
from note_archiver.export_import.exporter import ArchiveExporter
from note_archiver.export_import.importer import ArchiveImporter
from note_archiver.graph.links import MarkdownLinkResolver
from note_archiver.models.schema import ArchiveKind
from note_archiver.prompts import SettingsPasswordProvider, StaticPasswordProvider
from note_archiver.sharing import ShareDispatcher, StoreShareSink

class Host:
    """Stands in for the editor: an active note and a file picker."""

    def __init__(self, active="Home.md", archive=None):
        self.active = active
        self.archive = archive

    def active_document(self):
        return self.active

    def select_archive(self):
        if isinstance(self.archive, BaseException):
            raise self.archive
        return self.archive

@pytest.fixture
def host():
    return Host()

@pytest.fixture
def make_commands(host):
    def _make(store, settings=None, password=None):
        settings = settings or ArchiveSettings()
        provider = SettingsPasswordProvider(settings, StaticPasswordProvider(password))
        exporter = ArchiveExporter(
            store, MarkdownLinkResolver(store), settings, provider,
            ShareDispatcher(StoreShareSink(store, settings.export_folder))
        )
        importer = ArchiveImporter(store, settings, provider)
        return ArchiveCommands(
            exporter, importer, host.active_document, host.select_archive,
            console=Console(file=io.StringIO())
        )
    return _make

class TestExportCommands:
    """Test the export commands."""

    @pytest.mark.parametrize("command, location", [
        ("export_zip", "exports/share.zip"),
        ("export_tar", "exports/share.tar"),
        ("export_tar_gz", "exports/share.tar.gz"),
    ])
    def test_export(self, linked_vault, make_commands, command, location):
        commands = make_commands(linked_vault)

        result = getattr(commands, command)()

        assert result.location == location
        assert linked_vault.is_file(location)
        assert commands.notices == [f"Archive created at {location}"]
        assert commands.last_error is None

    def test_no_active_note(self, linked_vault, make_commands, host):
        host.active = None
        commands = make_commands(linked_vault)

        assert commands.export_zip() is None
        assert commands.notices == [NoActiveDocumentError.notice]
        assert isinstance(commands.last_error, NoActiveDocumentError)

    def test_cancelled_prompt(self, linked_vault, make_commands):
        class CancellingProvider(StaticPasswordProvider):
            def get_password(self, purpose):
                raise SelectionCancelledError()

        commands = make_commands(linked_vault, ArchiveSettings(ask_password=True))
        commands.exporter.password_provider = CancellingProvider()

        assert commands.export_zip() is None
        assert commands.notices == ["Cancelled"]
        assert not linked_vault.exists("exports")

class TestImportCommand:
    """Test the import command."""

    def write_archive(self, tmp_path, name, kind, password=None):
        path = tmp_path / name
        path.write_bytes(get_archive_format(kind).write([("a.md", b"a"), ("b.png", b"b")], password))
        return path

    def test_import(self, vault, make_commands, host, tmp_path):
        host.archive = self.write_archive(tmp_path, "share.tar", ArchiveKind.TAR)
        commands = make_commands(vault)

        report = commands.import_from_archive()

        assert report.succeeded == 2
        assert commands.notices == ["Imported 2 files from share.tar"]
        assert vault.list_files() == ["a.md", "b.png"]

    def test_partial_import(self, vault, add_file, make_commands, host, tmp_path):
        add_file(vault, "a.md/blocker.md", "x")
        host.archive = self.write_archive(tmp_path, "share.zip", ArchiveKind.ZIP)
        commands = make_commands(vault)

        report = commands.import_from_archive()

        assert report.failed == 1
        assert commands.notices == ["Imported 1 of 2 files from share.zip, 1 failed"]

    def test_picker_closed(self, vault, make_commands, host):
        host.archive = None
        commands = make_commands(vault)

        assert commands.import_from_archive() is None
        assert commands.notices == ["Cancelled"]
        assert isinstance(commands.last_error, SelectionCancelledError)

    def test_unsupported_file(self, vault, make_commands, host, tmp_path):
        host.archive = tmp_path / "notes.7z"
        host.archive.write_bytes(b"7z")
        commands = make_commands(vault)

        assert commands.import_from_archive() is None
        assert commands.notices == ["Unsupported archive type"]
        assert isinstance(commands.last_error, UnsupportedFormatError)

    def test_wrong_password(self, vault, make_commands, host, tmp_path):
        host.archive = self.write_archive(tmp_path, "share.zip", ArchiveKind.ZIP, password="right")
        commands = make_commands(vault, password="wrong")

        assert commands.import_from_archive() is None
        assert commands.notices == ["Wrong password"]
        assert isinstance(commands.last_error, InvalidPasswordError)
        assert vault.list_files() == []

    def test_missing_file(self, vault, make_commands, host, tmp_path):
        host.archive = tmp_path / "gone.zip"
        commands = make_commands(vault)

        assert commands.import_from_archive() is None
        assert commands.notices == ["Could not read archive"]

    @pytest.mark.parametrize("password", [None, "secret"])
    @pytest.mark.parametrize("field", ["directory_offset", "version"])
    def test_corrupt_zip(self, vault, make_commands, host, tmp_path, password, field):
        """A damaged zip ends in a notice, not an exception."""
        path = self.write_archive(tmp_path, "share.zip", ArchiveKind.ZIP, password=password)
        data = bytearray(path.read_bytes())
        directory, = struct.unpack("<I", data[-6:-2])
        if field == "directory_offset":
            data[-6:-2] = struct.pack("<I", directory + 4096)
        else:
            data[directory + 6] = 0xFF
        path.write_bytes(bytes(data))
        host.archive = path
        commands = make_commands(vault, password=password)

        assert commands.import_from_archive() is None
        assert commands.notices == ["Could not read archive"]
        assert vault.list_files() == []
