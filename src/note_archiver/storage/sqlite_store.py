"""SQLite-backed document store."""
import datetime
import logging
import posixpath
from pathlib import Path
from typing import List, Optional

from sqlalchemy import select

from note_archiver.archive.paths import normalize_path
from note_archiver.config import config
from note_archiver.models.db_models_sqlite import (
    DBDocument, DBTrashedDocument, get_session_factory, init_db
)
from note_archiver.models.schema import Document
from note_archiver.storage.base import DocumentStore

logger = logging.getLogger(__name__)

class SQLiteDocumentStore(DocumentStore):
    """Document store that keeps files, folders and trash in SQLite.

    Files and folders live in the ``documents`` table keyed by path.
    Trashed items move to the ``trash`` table so they can be restored.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the store with a SQLite backend."""
        if db_path:
            self.db_path = Path(db_path)
            db_url = f"sqlite:///{self.db_path}"
        else:
            db_url = config.get_db_url()
            self.db_path = Path(db_url.replace("sqlite:///", ""))

        # Ensure database directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = init_db(db_url)
        self.session_factory = get_session_factory(self.engine)

        logger.info(f"Initialized SQLite document store at {self.db_path}")

    def _find(self, session, path: str) -> Optional[DBDocument]:
        return session.scalar(select(DBDocument).where(DBDocument.path == normalize_path(path)))

    def exists(self, path: str) -> bool:
        with self.session_factory() as session:
            return self._find(session, path) is not None

    def is_folder(self, path: str) -> bool:
        with self.session_factory() as session:
            db_doc = self._find(session, path)
            return bool(db_doc and db_doc.is_folder)

    def _check_parent(self, session, path: str) -> None:
        parent = posixpath.dirname(path)
        if not parent:
            return
        db_parent = self._find(session, parent)
        if not db_parent or not db_parent.is_folder:
            raise FileNotFoundError(f"Parent folder {parent} does not exist")

    def create_folder(self, path: str) -> None:
        path = normalize_path(path)
        with self.session_factory() as session:
            if self._find(session, path):
                raise FileExistsError(f"{path} already exists")
            self._check_parent(session, path)
            session.add(DBDocument(path=path, is_folder=True, content=None))
            session.commit()

    def read_binary(self, path: str) -> bytes:
        with self.session_factory() as session:
            db_doc = self._find(session, path)
            if not db_doc or db_doc.is_folder:
                raise FileNotFoundError(f"File {path} does not exist")
            return db_doc.content or b""

    def create_binary(self, path: str, data: bytes) -> Document:
        path = normalize_path(path)
        with self.session_factory() as session:
            if self._find(session, path):
                raise FileExistsError(f"{path} already exists")
            self._check_parent(session, path)
            db_doc = DBDocument(path=path, is_folder=False, content=bytes(data))
            session.add(db_doc)
            session.commit()
            return self._db_document_to_document(db_doc)

    def modify(self, path: str, data: bytes) -> Document:
        with self.session_factory() as session:
            db_doc = self._find(session, path)
            if not db_doc or db_doc.is_folder:
                raise FileNotFoundError(f"File {path} does not exist")
            db_doc.content = bytes(data)
            db_doc.revision += 1
            db_doc.updated_at = datetime.datetime.now()
            session.commit()
            session.refresh(db_doc)
            return self._db_document_to_document(db_doc)

    def trash(self, path: str) -> None:
        path = normalize_path(path)
        with self.session_factory() as session:
            db_doc = self._find(session, path)
            if not db_doc:
                raise FileNotFoundError(f"{path} does not exist")

            # Folders take their contents with them
            victims = [db_doc]
            if db_doc.is_folder:
                victims.extend(session.scalars(
                    select(DBDocument).where(DBDocument.path.startswith(f"{path}/", autoescape=True))
                ).all())

            for victim in victims:
                session.add(DBTrashedDocument(
                    original_path=victim.path,
                    is_folder=victim.is_folder,
                    content=victim.content
                ))
                session.delete(victim)
            session.commit()
            logger.info(f"Moved {path} to trash")

    def list_files(self) -> List[str]:
        with self.session_factory() as session:
            return list(session.scalars(
                select(DBDocument.path)
                .where(DBDocument.is_folder.is_(False))
                .order_by(DBDocument.path)
            ).all())

    def list_trash(self) -> List[str]:
        """Original paths of trashed items, oldest first."""
        with self.session_factory() as session:
            return list(session.scalars(
                select(DBTrashedDocument.original_path).order_by(DBTrashedDocument.id)
            ).all())

    def get_revision(self, path: str) -> Optional[int]:
        with self.session_factory() as session:
            db_doc = self._find(session, path)
            return db_doc.revision if db_doc else None

    def _db_document_to_document(self, db_doc: DBDocument) -> Document:
        """Convert a database row to a domain document."""
        return Document(
            path=db_doc.path,
            content=db_doc.content or b"",
            created_at=db_doc.created_at,
            updated_at=db_doc.updated_at
        )
