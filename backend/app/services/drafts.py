"""At most one in-progress proposal draft per vendor.

The store has no unique constraint or compare-and-swap, so the singleton is
kept by read-then-write. Two concurrent saves can still race into two rows;
reads pick the most recently saved one and deletes remove every match.
"""
import asyncio
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from app.models.draft import DRAFT_STATUS, DRAFTS, DraftField
from app.models.vendor import VENDORS
from app.schemas.draft import DraftLoadResponse
from app.services.clock import parse_timestamp, utc_now, utc_now_iso
from app.services.identity import vendor_profile
from app.store.base import Record, RecordStore

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _saved_at(record: Record) -> Optional[datetime]:
    return parse_timestamp(record.get(DraftField.LAST_SAVED)) or record.created_time


def _decode_payload(record: Record) -> dict[str, Any]:
    raw = record.get(DraftField.DATA)
    if not raw:
        return {}
    try:
        payload = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        logger.warning("draft %s has unreadable payload; returning empty draft", record.id)
        return {}
    return payload if isinstance(payload, dict) else {}


class DraftManager:
    def __init__(self, store: RecordStore, *, scan_limit: int = 500, retention_days: int = 30) -> None:
        self.store = store
        self.scan_limit = scan_limit
        self.retention_days = retention_days

    async def _vendor_drafts(self, vendor_id: str) -> list[Record]:
        return await self.store.find_by_owner(
            DRAFTS,
            DraftField.VENDOR,
            vendor_id,
            max_records=self.scan_limit,
            sort=(DraftField.LAST_SAVED, "desc"),
        )

    async def save_draft(self, vendor_id: str, payload: dict[str, Any]) -> str:
        fields = {
            DraftField.DATA: json.dumps(payload),
            DraftField.LAST_SAVED: utc_now_iso(),
            DraftField.STATUS: DRAFT_STATUS,
        }
        existing = await self._vendor_drafts(vendor_id)
        if existing:
            latest = max(existing, key=lambda r: _saved_at(r) or _EPOCH)
            record = await self.store.update(DRAFTS, latest.id, fields)
            logger.info("draft updated: vendor_id=%s draft_id=%s", vendor_id, record.id)
        else:
            record = await self.store.create(DRAFTS, {DraftField.VENDOR: [vendor_id], **fields})
            logger.info("draft created: vendor_id=%s draft_id=%s", vendor_id, record.id)
        return record.id

    async def load_draft(self, vendor_id: str) -> DraftLoadResponse:
        """Latest draft (or None) plus the vendor's profile read fresh from the store."""
        vendor = await self.store.find(VENDORS, vendor_id)
        drafts = await self._vendor_drafts(vendor_id)
        if not drafts:
            return DraftLoadResponse(draft=None, vendor=vendor_profile(vendor))
        if len(drafts) > 1:
            logger.warning("vendor %s has %s drafts; using the most recent", vendor_id, len(drafts))
        latest = max(drafts, key=lambda r: _saved_at(r) or _EPOCH)
        return DraftLoadResponse(
            draft=_decode_payload(latest),
            last_saved=latest.get(DraftField.LAST_SAVED),
            vendor=vendor_profile(vendor),
        )

    async def delete_draft(self, vendor_id: str) -> int:
        drafts = await self._vendor_drafts(vendor_id)
        await asyncio.gather(*(self.store.destroy(DRAFTS, d.id) for d in drafts))
        logger.info("drafts deleted: vendor_id=%s count=%s", vendor_id, len(drafts))
        return len(drafts)

    async def purge_stale(self, now: Optional[datetime] = None) -> int:
        """Delete drafts last saved more than retention_days ago, whoever owns them."""
        cutoff = (now or utc_now()) - timedelta(days=self.retention_days)
        drafts = await self.store.list(DRAFTS)
        stale = [d for d in drafts if (_saved_at(d) or cutoff) < cutoff]
        await asyncio.gather(*(self.store.destroy(DRAFTS, d.id) for d in stale))
        logger.info("stale drafts purged: count=%s cutoff=%s", len(stale), cutoff.isoformat())
        return len(stale)
