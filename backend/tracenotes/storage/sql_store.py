"""
TraceNotes Backend - SQL Storage Backend
=========================================

What:  NoteStore implementation over async SQLAlchemy.
How:   One short-lived AsyncSession per call; inserts run inside
       `session.begin()` so the row is committed before `store()` returns.
Who:   Built by the storage factory when STORAGE_BACKEND=sql.

Schema:
    Production schemas are managed by Alembic (alembic/versions). With
    DB_AUTO_CREATE_SCHEMA=true, or when a test calls create_schema(), the
    table is created from the ORM metadata instead.
"""

import logging
from uuid import UUID

from opentelemetry.trace import Tracer
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tracenotes.database import Base
from tracenotes.exceptions import NotFoundError
from tracenotes.models.note import NoteRecord
from tracenotes.schemas.note import Note
from tracenotes.storage.base import NoteStore

logger = logging.getLogger(__name__)


class SqlNoteStore(NoteStore):
    """
    Stores notes as rows of the `notes` table.

    The engine's own connection pool is the only shared resource; it is safe
    for concurrent use by in-flight requests.
    """

    def __init__(
        self,
        tracer: Tracer,
        engine: AsyncEngine,
        timeout: float = 5.0,
        auto_create_schema: bool = False,
    ):
        super().__init__(tracer, timeout)
        self._engine = engine
        self._auto_create_schema = auto_create_schema
        # expire_on_commit=False: rows are read after the session closes
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.db_system = engine.dialect.name

    async def _store(self, note: Note) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(NoteRecord.from_note(note))

    async def _get(self, note_id: UUID) -> Note:
        async with self._session_factory() as session:
            record = await session.get(NoteRecord, note_id)
        if record is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return record.to_note()

    async def create_schema(self) -> None:
        """Create the notes table if it does not exist."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def startup(self) -> None:
        if self._auto_create_schema:
            await self.create_schema()
            logger.info("Database schema ensured (auto-create enabled)")

    async def health_check(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Health check: database unreachable: %s", str(e))
            return False

    async def close(self) -> None:
        await self._engine.dispose()
