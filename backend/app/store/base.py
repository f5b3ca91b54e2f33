"""Uniform async access to named collections of loosely typed records.

Records carry a flat field map. Relationships are "link" fields holding a list
of ids from another collection, usually a list of exactly one. Native filtering
on link fields is not trusted, so ownership is always re-derived client-side.
"""
from __future__ import annotations

import abc
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional


@dataclass
class Record:
    id: str
    fields: dict[str, Any] = field(default_factory=dict)
    created_time: Optional[datetime] = None

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


def linked_id(value: Any) -> Optional[str]:
    """First id held by a link field. Elements may be bare ids or {"id": ...} objects."""
    if not isinstance(value, (list, tuple)) or not value:
        return None
    first = value[0]
    if isinstance(first, str):
        return first or None
    if isinstance(first, dict):
        rid = first.get("id")
        return rid if isinstance(rid, str) and rid else None
    return None


def belongs_to(record: Record, link_field: str, owner_id: str) -> bool:
    return bool(owner_id) and linked_id(record.fields.get(link_field)) == owner_id


class RecordStore(abc.ABC):
    """Backend-neutral record store. Implementations raise NotFoundError / UpstreamError."""

    name = "abstract"

    @abc.abstractmethod
    async def find(self, collection: str, record_id: str) -> Record:
        ...

    @abc.abstractmethod
    async def list(
        self,
        collection: str,
        *,
        filters: Optional[dict[str, Any]] = None,
        max_records: Optional[int] = None,
        sort: Optional[tuple[str, str]] = None,
    ) -> list[Record]:
        """Return records in creation order unless sort=(field, "asc"|"desc") is given."""

    @abc.abstractmethod
    async def find_many(self, collection: str, record_ids: Iterable[str]) -> list[Record]:
        """Batched lookup by id; unknown ids are skipped rather than raising."""

    @abc.abstractmethod
    async def create(self, collection: str, fields: dict[str, Any]) -> Record:
        ...

    @abc.abstractmethod
    async def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> Record:
        """Merge fields into the record; fields not named are left untouched."""

    @abc.abstractmethod
    async def destroy(self, collection: str, record_id: str) -> None:
        ...

    async def find_by_owner(
        self,
        collection: str,
        link_field: str,
        owner_id: str,
        *,
        max_records: Optional[int] = None,
        sort: Optional[tuple[str, str]] = None,
    ) -> list[Record]:
        """Records whose link field points at owner_id, read from one bounded page.

        Callers pass a newest-first sort so the page holds the most recent
        records; stores that can check ownership before capping override this.
        """
        records = await self.list(collection, max_records=max_records, sort=sort)
        return [r for r in records if belongs_to(r, link_field, owner_id)]
