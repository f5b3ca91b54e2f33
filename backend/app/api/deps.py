"""FastAPI dependencies: settings, the record store, collaborators and the session caller."""
from typing import Optional

from fastapi import Depends, Header

from app.config import Settings, get_settings
from app.errors import AuthenticationError, AuthorizationError
from app.services.approvals import ApprovalService
from app.services.drafts import DraftManager
from app.services.file_service import LocalDocumentStorage
from app.services.identity import VendorDirectory
from app.services.notifications import NotificationDispatcher, WebhookNotifier
from app.services.sessions import ROLE_ADMIN, ROLE_VENDOR, SessionClaims, decode_session_token
from app.services.submissions import SubmissionManager
from app.services.threads import ThreadService
from app.store.base import RecordStore

_store: Optional[RecordStore] = None


def build_store(settings: Settings) -> RecordStore:
    if settings.record_store == "airtable":
        from app.store.airtable import AirtableRecordStore

        return AirtableRecordStore(
            settings.airtable_api_key,
            settings.airtable_base_id,
            timeout=settings.airtable_timeout_sec,
            max_retries=settings.airtable_max_retries,
        )
    from app.database import SessionLocal
    from app.store.sql import SqlRecordStore

    return SqlRecordStore(SessionLocal)


def get_store() -> RecordStore:
    global _store
    if _store is None:
        _store = build_store(get_settings())
    return _store


def get_document_storage(settings: Settings = Depends(get_settings)) -> LocalDocumentStorage:
    return LocalDocumentStorage(settings.upload_dir)


def get_dispatcher(settings: Settings = Depends(get_settings)) -> NotificationDispatcher:
    notifier = None
    if settings.notify_webhook_url:
        notifier = WebhookNotifier(settings.notify_webhook_url, timeout=settings.notify_timeout_sec)
    return NotificationDispatcher(notifier)


def get_vendor_directory(
    store: RecordStore = Depends(get_store),
    storage: LocalDocumentStorage = Depends(get_document_storage),
    settings: Settings = Depends(get_settings),
) -> VendorDirectory:
    return VendorDirectory(
        store,
        storage,
        bcrypt_rounds=settings.bcrypt_rounds,
        max_upload_bytes=settings.max_upload_bytes,
    )


def get_draft_manager(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> DraftManager:
    return DraftManager(store, scan_limit=settings.store_scan_limit, retention_days=settings.draft_retention_days)


def get_submission_manager(
    store: RecordStore = Depends(get_store),
    drafts: DraftManager = Depends(get_draft_manager),
    settings: Settings = Depends(get_settings),
) -> SubmissionManager:
    return SubmissionManager(store, drafts, scan_limit=settings.store_scan_limit, rfp_type=settings.rfp_type)


def get_thread_service(
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ThreadService:
    return ThreadService(store, scan_limit=settings.store_scan_limit)


def get_approval_service(
    store: RecordStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> ApprovalService:
    return ApprovalService(store, dispatcher)


def get_session(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> SessionClaims:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Not authenticated")
    return decode_session_token(token.strip(), settings)


def current_vendor_id(session: SessionClaims = Depends(get_session)) -> str:
    if session.role != ROLE_VENDOR:
        raise AuthorizationError("Vendor session required")
    return session.subject


def current_admin(session: SessionClaims = Depends(get_session)) -> str:
    if session.role != ROLE_ADMIN:
        raise AuthorizationError("Admin session required")
    return session.subject
