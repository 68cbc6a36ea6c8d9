"""SQLAlchemy models for the SQLite document store."""
import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, LargeBinary, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

class Base(DeclarativeBase):
    """Declarative base for document store tables."""

class DBDocument(Base):
    """A file or folder in the store.

    Folders carry no content. ``revision`` is bumped on every in-place
    modification so that the row keeps its identity across imports.
    """
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(String(1024), unique=True, index=True, nullable=False)
    is_folder: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    content: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    revision: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=datetime.datetime.now, nullable=False
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=datetime.datetime.now, nullable=False
    )

    def __repr__(self) -> str:
        kind = "folder" if self.is_folder else "file"
        return f"<DBDocument(path='{self.path}', {kind}, revision={self.revision})>"

class DBTrashedDocument(Base):
    """A document moved to the trash; recoverable until purged."""
    __tablename__ = "trash"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    original_path: Mapped[str] = mapped_column(String(1024), index=True, nullable=False)
    is_folder: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    content: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    trashed_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=datetime.datetime.now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<DBTrashedDocument(original_path='{self.original_path}')>"

def init_db(db_url: str) -> Engine:
    """Create the engine and make sure all tables exist."""
    engine = create_engine(db_url, future=True)
    Base.metadata.create_all(engine)
    return engine

def get_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)
