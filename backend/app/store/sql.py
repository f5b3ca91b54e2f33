from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.errors import NotFoundError, UpstreamError
from app.models.record import StoredRecord
from app.store.base import Record, RecordStore, belongs_to

logger = logging.getLogger(__name__)


def new_record_id() -> str:
    return f"rec{uuid.uuid4().hex[:14]}"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_record(row: StoredRecord) -> Record:
    return Record(id=row.id, fields=dict(row.fields or {}), created_time=_as_utc(row.created_at))


def _matches(fields: dict[str, Any], filters: Optional[dict[str, Any]]) -> bool:
    if not filters:
        return True
    return all(fields.get(k) == v for k, v in filters.items())


def _sort_key(field_name: str):
    def key(record: Record):
        value = record.fields.get(field_name)
        # Missing values sort first, then numbers by value, then text
        if value is None or value == "":
            return (0, 0.0, "")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return (1, float(value), "")
        return (2, 0.0, str(value))
    return key


def _arrange(records: list[Record], sort: Optional[tuple[str, str]], max_records: Optional[int]) -> list[Record]:
    if sort:
        field_name, direction = sort
        records = sorted(records, key=_sort_key(field_name), reverse=direction == "desc")
    if max_records is not None:
        records = records[:max_records]
    return records


class SqlRecordStore(RecordStore):
    """Record store over one SQLAlchemy table; blocking work runs in a worker thread."""

    name = "sql"

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(self._in_session, fn, *args)
        except SQLAlchemyError as e:
            logger.exception("record store failure")
            raise UpstreamError("Record store unavailable", details=str(e)) from e

    def _in_session(self, fn, *args):
        with self._session_factory() as db:
            return fn(db, *args)

    @staticmethod
    def _get_row(db: Session, collection: str, record_id: str) -> StoredRecord:
        row = db.get(StoredRecord, record_id)
        if row is None or row.collection != collection:
            raise NotFoundError(
                "Record not found",
                details=f"Could not find record {record_id} in {collection}",
            )
        return row

    async def find(self, collection: str, record_id: str) -> Record:
        def op(db: Session) -> Record:
            return _to_record(self._get_row(db, collection, record_id))
        return await self._run(op)

    async def _collection(self, collection: str) -> list[Record]:
        def op(db: Session) -> list[Record]:
            rows = (
                db.query(StoredRecord)
                .filter(StoredRecord.collection == collection)
                .order_by(StoredRecord.created_at.asc(), StoredRecord.id.asc())
                .all()
            )
            return [_to_record(r) for r in rows]
        return await self._run(op)

    async def list(
        self,
        collection: str,
        *,
        filters: Optional[dict[str, Any]] = None,
        max_records: Optional[int] = None,
        sort: Optional[tuple[str, str]] = None,
    ) -> list[Record]:
        records = [r for r in await self._collection(collection) if _matches(r.fields, filters)]
        return _arrange(records, sort, max_records)

    async def find_by_owner(
        self,
        collection: str,
        link_field: str,
        owner_id: str,
        *,
        max_records: Optional[int] = None,
        sort: Optional[tuple[str, str]] = None,
    ) -> list[Record]:
        """Ownership is checked on every row before any cap, so a page limit never hides an owner's records."""
        records = [r for r in await self._collection(collection) if belongs_to(r, link_field, owner_id)]
        return _arrange(records, sort, max_records)

    async def find_many(self, collection: str, record_ids: Iterable[str]) -> list[Record]:
        ids = sorted({rid for rid in record_ids if rid})
        if not ids:
            return []

        def op(db: Session) -> list[Record]:
            rows = (
                db.query(StoredRecord)
                .filter(StoredRecord.collection == collection, StoredRecord.id.in_(ids))
                .all()
            )
            return [_to_record(r) for r in rows]
        return await self._run(op)

    async def create(self, collection: str, fields: dict[str, Any]) -> Record:
        def op(db: Session) -> Record:
            row = StoredRecord(id=new_record_id(), collection=collection, fields=dict(fields))
            db.add(row)
            db.commit()
            db.refresh(row)
            return _to_record(row)
        return await self._run(op)

    async def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> Record:
        def op(db: Session) -> Record:
            row = self._get_row(db, collection, record_id)
            # Reassign so SQLAlchemy sees the JSON change
            row.fields = {**(row.fields or {}), **fields}
            db.commit()
            db.refresh(row)
            return _to_record(row)
        return await self._run(op)

    async def destroy(self, collection: str, record_id: str) -> None:
        def op(db: Session) -> None:
            row = self._get_row(db, collection, record_id)
            db.delete(row)
            db.commit()
        await self._run(op)
