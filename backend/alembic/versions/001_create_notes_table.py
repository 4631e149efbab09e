"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `notes` table read and written by SqlNoteStore.
How:   Generic SQLAlchemy types (Uuid, DateTime(timezone=True)) so the same
       migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops the table (destructive, all notes lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the notes table. Column docs live in tracenotes/models/note.py."""
    op.create_table(
        "notes",
        sa.Column(
            "note_id",
            sa.Uuid(as_uuid=True),
            nullable=False,
            comment="Unique identifier generated by the service",
        ),
        sa.Column(
            "title",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Note title",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Note body",
        ),
        sa.Column(
            "created",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When the service accepted this note (UTC)",
        ),
        sa.PrimaryKeyConstraint("note_id"),
    )


def downgrade() -> None:
    op.drop_table("notes")
