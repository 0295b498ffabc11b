"""Relational persistence for ingested calls.

Reference rows (sources and the talkgroup) are upserted first with
last-write-wins semantics. The call row and its frequency/source
observations are then written in one transaction: the call is upserted on
its filename and observations are inserted with ``ON CONFLICT DO NOTHING`` on
their content hash, so replaying an upload adds no rows.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trunk_processor.errors import DatabaseError
from trunk_processor.models import Call, FreqList, Source, SrcList, Talkgroup
from trunk_processor.views import CallMetadata, HashedEntry

logger = logging.getLogger(__name__)

_INSERT_BUILDERS: dict[str, Callable[[Table], Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(session: AsyncSession, table: Table) -> Any:
    dialect = session.get_bind().dialect.name
    try:
        builder = _INSERT_BUILDERS[dialect]
    except KeyError:
        raise DatabaseError(f"upserts are not supported on {dialect}") from None
    return builder(table)


def _unique_rows(entries: Iterable[HashedEntry]) -> list[dict[str, Any]]:
    rows: dict[int, dict[str, Any]] = {}
    for entry in entries:
        entry.compute_key()
        rows.setdefault(entry.hashed, entry.to_row())
    return list(rows.values())


class CallRepository:
    """Write a fully populated :class:`CallMetadata` to the database."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        reference_upserts_in_transaction: bool = False,
    ) -> None:
        self._session_factory = session_factory
        self._reference_in_transaction = reference_upserts_in_transaction

    async def save(self, meta: CallMetadata) -> None:
        if not meta.filename:
            raise DatabaseError("call has no storage key assigned")

        try:
            async with self._session_factory() as session:
                if not self._reference_in_transaction:
                    async with session.begin():
                        await self._upsert_references(session, meta)

                async with session.begin():
                    if self._reference_in_transaction:
                        await self._upsert_references(session, meta)
                    await self._upsert_call(session, meta)
                    await self._insert_observations(session, meta)
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Database write failed for call=%s: %s", meta.filename, exc)
            raise DatabaseError(str(exc)) from exc

        logger.info(
            "Persisted call=%s freq_entries=%d src_entries=%d",
            meta.filename,
            len(meta.freq_list),
            len(meta.src_list),
        )

    async def _upsert_references(self, session: AsyncSession, meta: CallMetadata) -> None:
        await self.upsert_sources(session, meta)
        await self.upsert_talkgroup(session, meta)

    async def upsert_sources(self, session: AsyncSession, meta: CallMetadata) -> None:
        rows = sorted(meta.source_rows(), key=lambda row: row["src"])
        if not rows:
            return
        stmt = _insert_for(session, Source.__table__).values(rows)
        await session.execute(
            stmt.on_conflict_do_update(
                index_elements=["src"],
                set_={"tag": stmt.excluded.tag},
            )
        )

    async def upsert_talkgroup(self, session: AsyncSession, meta: CallMetadata) -> None:
        row = meta.talkgroup_row()
        stmt = _insert_for(session, Talkgroup.__table__).values(row)
        await session.execute(
            stmt.on_conflict_do_update(
                index_elements=["talkgroup"],
                set_={key: stmt.excluded[key] for key in row if key != "talkgroup"},
            )
        )

    async def _upsert_call(self, session: AsyncSession, meta: CallMetadata) -> None:
        row = meta.call_row()
        stmt = _insert_for(session, Call.__table__).values(row)
        await session.execute(
            stmt.on_conflict_do_update(
                index_elements=["filename"],
                set_={key: stmt.excluded[key] for key in row if key != "filename"},
            )
        )

    async def _insert_observations(self, session: AsyncSession, meta: CallMetadata) -> None:
        for model, entries in (
            (FreqList, meta.freq_list),
            (SrcList, meta.src_list),
        ):
            rows = _unique_rows(entries)
            if not rows:
                continue
            stmt = _insert_for(session, model.__table__).values(rows)
            await session.execute(stmt.on_conflict_do_nothing(index_elements=["hashed"]))


__all__ = ["CallRepository"]
