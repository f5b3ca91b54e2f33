"""REST client for a hosted Airtable base.

Timeouts and retries live here and nowhere else: 429 and 5xx responses are
retried with exponential backoff up to max_retries, everything else surfaces
as NotFoundError / UpstreamError.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from datetime import datetime
from typing import Any, Iterable, Optional

from app.errors import NotFoundError, UpstreamError
from app.store.base import Record, RecordStore

logger = logging.getLogger(__name__)

API_URL = "https://api.airtable.com/v0"
# Airtable caps formula length; batch RECORD_ID() lookups below this
_MAX_IDS_PER_FORMULA = 50
_RETRY_STATUSES = (429, 500, 502, 503, 504)


def _quote(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE()" if value else "FALSE()"
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def equality_formula(filters: dict[str, Any]) -> str:
    """{Field} = 'value' clauses joined with AND()."""
    clauses = [f"{{{name}}} = {_quote(value)}" for name, value in filters.items()]
    if len(clauses) == 1:
        return clauses[0]
    return f"AND({', '.join(clauses)})"


def record_id_formula(record_ids: list[str]) -> str:
    clauses = [f"RECORD_ID() = {_quote(rid)}" for rid in record_ids]
    return f"OR({', '.join(clauses)})"


def _parse_created_time(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def _to_record(payload: dict) -> Record:
    return Record(
        id=payload["id"],
        fields=dict(payload.get("fields") or {}),
        created_time=_parse_created_time(payload.get("createdTime")),
    )


class AirtableRecordStore(RecordStore):
    name = "airtable"

    def __init__(
        self,
        api_key: str,
        base_id: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_sec: float = 0.5,
        api_url: str = API_URL,
    ) -> None:
        if not api_key or not base_id:
            raise ValueError("Airtable api_key and base_id are required")
        self.api_key = api_key
        self.base_id = base_id
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_sec = backoff_sec
        self.api_url = api_url.rstrip("/")

    def _url(self, collection: str, record_id: Optional[str] = None, query: Optional[list] = None) -> str:
        path = f"{self.api_url}/{self.base_id}/{urllib.parse.quote(collection)}"
        if record_id:
            path += f"/{urllib.parse.quote(record_id)}"
        if query:
            path += "?" + urllib.parse.urlencode(query)
        return path

    def _request(self, method: str, url: str, body: Optional[dict] = None) -> dict:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if data is not None:
            headers["Content-Type"] = "application/json"
        attempt = 0
        while True:
            req = urllib.request.Request(url, data=data, method=method, headers=headers)
            try:
                with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                    raw = resp.read().decode("utf-8")
                    return json.loads(raw) if raw else {}
            except urllib.error.HTTPError as e:
                err_body = e.read().decode("utf-8") if e.fp else ""
                if e.code == 404:
                    raise NotFoundError("Record not found", details=err_body or url) from e
                if e.code in _RETRY_STATUSES and attempt < self.max_retries:
                    attempt += 1
                    logger.warning("airtable %s %s -> %s, retry %s/%s", method, url, e.code, attempt, self.max_retries)
                    time.sleep(self.backoff_sec * (2 ** (attempt - 1)))
                    continue
                raise UpstreamError("Record store request failed", details=f"HTTP {e.code}: {err_body}") from e
            except (urllib.error.URLError, OSError) as e:
                if attempt < self.max_retries:
                    attempt += 1
                    logger.warning("airtable %s %s failed (%s), retry %s/%s", method, url, e, attempt, self.max_retries)
                    time.sleep(self.backoff_sec * (2 ** (attempt - 1)))
                    continue
                raise UpstreamError("Record store unreachable", details=str(e)) from e

    async def _call(self, method: str, url: str, body: Optional[dict] = None) -> dict:
        return await asyncio.to_thread(self._request, method, url, body)

    async def _select(self, collection: str, query: list) -> list[Record]:
        """Follow the offset cursor until all pages (or maxRecords) are read."""
        records: list[Record] = []
        offset = None
        while True:
            page_query = list(query)
            if offset:
                page_query.append(("offset", offset))
            payload = await self._call("GET", self._url(collection, query=page_query))
            records.extend(_to_record(r) for r in payload.get("records") or [])
            offset = payload.get("offset")
            if not offset:
                return records

    async def find(self, collection: str, record_id: str) -> Record:
        return _to_record(await self._call("GET", self._url(collection, record_id)))

    async def list(
        self,
        collection: str,
        *,
        filters: Optional[dict[str, Any]] = None,
        max_records: Optional[int] = None,
        sort: Optional[tuple[str, str]] = None,
    ) -> list[Record]:
        query: list[tuple[str, Any]] = []
        if filters:
            query.append(("filterByFormula", equality_formula(filters)))
        if max_records is not None:
            query.append(("maxRecords", max_records))
        if sort:
            query.append(("sort[0][field]", sort[0]))
            query.append(("sort[0][direction]", sort[1]))
        return await self._select(collection, query)

    async def find_many(self, collection: str, record_ids: Iterable[str]) -> list[Record]:
        ids = sorted({rid for rid in record_ids if rid})
        records: list[Record] = []
        for start in range(0, len(ids), _MAX_IDS_PER_FORMULA):
            chunk = ids[start:start + _MAX_IDS_PER_FORMULA]
            records.extend(await self._select(collection, [("filterByFormula", record_id_formula(chunk))]))
        return records

    async def create(self, collection: str, fields: dict[str, Any]) -> Record:
        payload = await self._call("POST", self._url(collection), {"fields": fields, "typecast": True})
        return _to_record(payload)

    async def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> Record:
        payload = await self._call("PATCH", self._url(collection, record_id), {"fields": fields, "typecast": True})
        return _to_record(payload)

    async def destroy(self, collection: str, record_id: str) -> None:
        await self._call("DELETE", self._url(collection, record_id))
