"""Tests for configuration and persisted settings."""
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from note_archiver.config import ArchiverConfig, ArchiveSettings, load_settings, save_settings

class TestArchiveSettings:
    """Test settings defaults, loading and saving."""

    def test_defaults(self):
        settings = ArchiveSettings()

        assert settings.max_depth == 1
        assert settings.export_folder == "exports"
        assert settings.import_folder == ""
        assert settings.ask_password is False
        assert settings.default_password == ""

    def test_camel_case_keys(self):
        """Persisted keys are camelCase."""
        assert ArchiveSettings().to_data() == {
            "maxDepth": 1,
            "exportFolder": "exports",
            "importFolder": "",
            "askPassword": False,
            "defaultPassword": "",
        }

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "missing.json") == ArchiveSettings()

    def test_partial_file_merges_over_defaults(self, tmp_path):
        """Absent keys keep defaults; unknown keys are ignored."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"maxDepth": -1, "legacyOption": True}))

        settings = load_settings(path)

        assert settings.max_depth == -1
        assert settings.export_folder == "exports"

    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        settings = ArchiveSettings(max_depth=3, import_folder="Inbox", ask_password=True)

        saved = save_settings(settings, path)

        assert saved == path
        assert load_settings(path) == settings

    def test_default_password_is_trimmed(self):
        assert ArchiveSettings(defaultPassword="  pw \n").default_password == "pw"

    def test_depth_below_unbounded_rejected(self):
        with pytest.raises(ValidationError):
            ArchiveSettings(max_depth=-2)

    def test_non_object_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")

        with pytest.raises(ValueError, match="does not contain an object"):
            load_settings(path)

class TestArchiverConfig:
    """Test process configuration."""

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("NOTE_ARCHIVER_BASE_DIR", str(tmp_path))
        monkeypatch.setenv("NOTE_ARCHIVER_STORE", "sqlite")

        cfg = ArchiverConfig()

        assert cfg.base_dir == tmp_path
        assert cfg.store_backend == "sqlite"
        assert cfg.get_db_url() == f"sqlite:///{tmp_path / 'data/db/documents.db'}"

    def test_absolute_paths_kept(self, tmp_path):
        cfg = ArchiverConfig(base_dir=Path("/somewhere"))

        assert cfg.get_absolute_path(tmp_path) == tmp_path
        assert cfg.get_absolute_path(Path("vault")) == Path("/somewhere/vault")
