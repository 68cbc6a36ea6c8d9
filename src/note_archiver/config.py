"""Configuration module for the note archiver."""
import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

class ArchiverConfig(BaseModel):
    """Process-level configuration for the note archiver."""
    # Base directory for the project
    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("NOTE_ARCHIVER_BASE_DIR", "."))
    )
    # Root of the on-disk vault used by the filesystem store
    vault_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("NOTE_ARCHIVER_VAULT_DIR", "vault"))
    )
    # SQLite database used by the sqlite store
    database_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("NOTE_ARCHIVER_DATABASE_PATH", "data/db/documents.db")
        )
    )
    # Persisted archive settings
    settings_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("NOTE_ARCHIVER_SETTINGS_PATH", "data/settings.json")
        )
    )
    # Which document store backs the commands: "filesystem" or "sqlite"
    store_backend: str = Field(
        default_factory=lambda: os.getenv("NOTE_ARCHIVER_STORE", "filesystem")
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("NOTE_ARCHIVER_LOG_LEVEL", "INFO")
    )

    def get_absolute_path(self, path: Path) -> Path:
        """Convert a relative path to an absolute path based on base_dir."""
        if path.is_absolute():
            return path
        return self.base_dir / path

    def get_db_url(self) -> str:
        """Get the database URL for SQLite."""
        db_path = self.get_absolute_path(self.database_path)
        return f"sqlite:///{db_path}"

class ArchiveSettings(BaseModel):
    """User settings for export and import, persisted as camelCase JSON."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    max_depth: int = Field(default=1, ge=-1, alias="maxDepth")
    export_folder: str = Field(default="exports", alias="exportFolder")
    import_folder: str = Field(default="", alias="importFolder")
    ask_password: bool = Field(default=False, alias="askPassword")
    default_password: str = Field(default="", alias="defaultPassword")

    @field_validator("default_password")
    @classmethod
    def strip_password(cls, value: str) -> str:
        return value.strip()

    def to_data(self) -> dict:
        """Serialize to the persisted key-value form."""
        return self.model_dump(by_alias=True)

def load_settings(path: Optional[Union[str, Path]] = None) -> ArchiveSettings:
    """Load settings from disk, merged over the defaults.

    A missing file yields the defaults. Keys that are absent keep their
    default value and unknown keys are ignored.
    """
    settings_path = Path(path) if path else config.get_absolute_path(config.settings_path)
    if not settings_path.exists():
        logger.debug(f"No settings file at {settings_path}, using defaults")
        return ArchiveSettings()

    with open(settings_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Settings file {settings_path} does not contain an object")

    merged = ArchiveSettings().to_data()
    merged.update({k: v for k, v in data.items() if k in merged})
    return ArchiveSettings.model_validate(merged)

def save_settings(settings: ArchiveSettings, path: Optional[Union[str, Path]] = None) -> Path:
    """Persist settings to disk and return the file path."""
    settings_path = Path(path) if path else config.get_absolute_path(config.settings_path)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_path, "w", encoding="utf-8") as f:
        json.dump(settings.to_data(), f, indent=2)
    logger.info(f"Saved settings to {settings_path}")
    return settings_path

# Create a global config instance
config = ArchiverConfig()
