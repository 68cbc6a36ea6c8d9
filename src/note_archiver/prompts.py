"""Password providers for encrypted zip export and import."""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

from note_archiver.archive.errors import SelectionCancelledError
from note_archiver.config import ArchiveSettings

logger = logging.getLogger(__name__)

EXPORT = "export"
IMPORT = "import"

def normalize_password(raw: Optional[str]) -> Optional[str]:
    """Blank input means no password."""
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None

class PasswordProvider(ABC):
    """Supplies the password for an export or import."""

    @abstractmethod
    def get_password(self, purpose: str) -> Optional[str]:
        """Return the raw password for ``purpose`` ("export" or "import").

        Raises SelectionCancelledError when the user cancels.
        """

class StaticPasswordProvider(PasswordProvider):
    """Always returns the same password; for scripted runs."""

    def __init__(self, password: Optional[str] = None):
        self.password = password

    def get_password(self, purpose: str) -> Optional[str]:
        return self.password

class ConsolePasswordPrompt(PasswordProvider):
    """Asks for the password on the terminal without echoing it."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def get_password(self, purpose: str) -> Optional[str]:
        try:
            return Prompt.ask(
                f"Enter the archive password for {purpose} (leave blank for none)",
                password=True,
                default="",
                show_default=False,
                console=self.console,
            )
        except (KeyboardInterrupt, EOFError) as e:
            raise SelectionCancelledError("Password prompt cancelled") from e

class SettingsPasswordProvider(PasswordProvider):
    """Uses the configured default password for export unless the settings
    ask for a prompt; import always prompts."""

    def __init__(self, settings: ArchiveSettings, prompt: PasswordProvider):
        self.settings = settings
        self.prompt = prompt

    def get_password(self, purpose: str) -> Optional[str]:
        if purpose == EXPORT and not self.settings.ask_password:
            return self.settings.default_password
        logger.debug(f"Prompting for {purpose} password")
        return self.prompt.get_password(purpose)
