"""
TraceNotes Backend - Note SQLAlchemy Model
===========================================

What:  ORM row backing the `notes` table used by the SQL storage backend.
How:   Inherits from the shared DeclarativeBase; converts to and from the
       `Note` entity so nothing above the storage layer sees ORM objects.
Who:   Used by SqlNoteStore and by Alembic for schema management.

Table Design:
    - note_id: UUID primary key, generated by the service (never by the DB)
    - title / content: TEXT, no length limit
    - created: TIMESTAMP WITH TIME ZONE, UTC
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tracenotes.database import Base
from tracenotes.schemas.note import Note


class NoteRecord(Base):
    """
    One stored note. Rows are inserted once and never updated.

    Query Patterns:
        - Get single note: SELECT ... WHERE note_id = :uuid
          → primary key lookup
    """

    __tablename__ = "notes"

    # ── Primary Key ───────────────────────────────────────────────────────
    # No server default: the id is assigned by CreateNote before the insert
    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        comment="Unique identifier generated by the service",
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Note title",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Note body",
    )

    # SQLite drops tzinfo on read; to_note() restores UTC
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the service accepted this note (UTC)",
    )

    @classmethod
    def from_note(cls, note: Note) -> "NoteRecord":
        return cls(
            note_id=note.note_id,
            title=note.title,
            content=note.content,
            created=note.created,
        )

    def to_note(self) -> Note:
        created = self.created
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return Note(
            note_id=self.note_id,
            title=self.title,
            content=self.content,
            created=created,
        )

    def __repr__(self) -> str:
        """Developer-friendly string representation for debugging."""
        return f"<NoteRecord(note_id={self.note_id}, created='{self.created}')>"
