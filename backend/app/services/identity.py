"""Vendor identity: email dedup, registration, login and profile reads."""
import logging
from dataclasses import dataclass
from typing import Optional

from app.errors import AuthenticationError, AuthorizationError, ConflictError, PortalError, ValidationError
from app.models.vendor import VENDORS, VendorField, VendorStatus
from app.schemas.vendor import (
    DuplicateVendorEntry,
    DuplicateVendorsResponse,
    PendingVendor,
    VendorProfile,
)
from app.services.clock import today_iso
from app.services.file_service import NDA_FOLDER, PDF_CONTENT_TYPES, validate_document
from app.services.passwords import hash_password, verify_password
from app.store.base import Record, RecordStore

logger = logging.getLogger(__name__)


class IdentityStatus:
    NEW = "NEW"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"


# Conflict wording shown to the registering vendor, keyed by resolved status
_CONFLICTS = {
    IdentityStatus.APPROVED: (
        "An account with this email already exists and is approved. Please use the login page instead.",
        "approved",
    ),
    IdentityStatus.PENDING: (
        "An account with this email is already pending approval. "
        "Please wait for admin approval or contact support.",
        "pending",
    ),
    IdentityStatus.DECLINED: (
        "An account with this email already exists. Please contact support for assistance.",
        "exists",
    ),
}


@dataclass
class IdentityResolution:
    status: str
    vendor: Optional[Record] = None


@dataclass
class VendorRegistration:
    vendor_name: str
    contact_person: str
    email: str
    password: str
    contact_title: str = ""
    phone: str = ""
    website: str = ""
    country: str = ""
    company_size: str = ""
    services: str = ""


@dataclass
class UploadedDocument:
    content: bytes
    file_name: str
    content_type: Optional[str]


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _text(record: Record, name: str) -> str:
    value = record.get(name)
    return value if isinstance(value, str) else ("" if value is None else str(value))


def vendor_profile(record: Record) -> VendorProfile:
    return VendorProfile(
        id=record.id,
        name=_text(record, VendorField.NAME),
        contact_person=_text(record, VendorField.CONTACT_PERSON),
        contact_title=_text(record, VendorField.CONTACT_TITLE),
        email=_text(record, VendorField.EMAIL),
        phone=_text(record, VendorField.PHONE),
        website=_text(record, VendorField.WEBSITE),
        country=_text(record, VendorField.COUNTRY),
        company_size=_text(record, VendorField.COMPANY_SIZE),
        services=_text(record, VendorField.SERVICES),
        status=_text(record, VendorField.STATUS),
        nda_url=record.get(VendorField.NDA_URL) or None,
        approval_date=record.get(VendorField.APPROVAL_DATE) or None,
        last_login=record.get(VendorField.LAST_LOGIN) or None,
    )


class IdentityResolver:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def matching_vendors(self, email: str) -> list[Record]:
        wanted = normalize_email(email)
        if not wanted:
            return []
        vendors = await self.store.list(VENDORS)
        return [v for v in vendors if normalize_email(v.get(VendorField.EMAIL)) == wanted]

    async def resolve(self, email: str) -> IdentityResolution:
        """Lifecycle state of the identity behind an email. An Approved match wins over Pending, Pending over Declined."""
        matches = await self.matching_vendors(email)
        if not matches:
            return IdentityResolution(IdentityStatus.NEW)
        for status, resolved in (
            (VendorStatus.APPROVED, IdentityStatus.APPROVED),
            (VendorStatus.PENDING_APPROVAL, IdentityStatus.PENDING),
        ):
            for vendor in matches:
                if vendor.get(VendorField.STATUS) == status:
                    return IdentityResolution(resolved, vendor)
        return IdentityResolution(IdentityStatus.DECLINED, matches[0])


class VendorDirectory:
    """Registration, login and vendor reads on top of the identity resolver."""

    def __init__(self, store: RecordStore, storage=None, *, bcrypt_rounds: int = 10, max_upload_bytes: int = 10 * 1024 * 1024) -> None:
        self.store = store
        self.storage = storage
        self.resolver = IdentityResolver(store)
        self.bcrypt_rounds = bcrypt_rounds
        self.max_upload_bytes = max_upload_bytes

    async def register(self, form: VendorRegistration, nda: Optional[UploadedDocument]) -> Record:
        if not (form.vendor_name.strip() and form.contact_person.strip() and form.email.strip() and form.password) or nda is None:
            raise ValidationError("Missing required fields or NDA file")
        validate_document(
            nda.content,
            nda.content_type,
            allowed_types=PDF_CONTENT_TYPES,
            max_bytes=self.max_upload_bytes,
            label="NDA",
        )

        resolution = await self.resolver.resolve(form.email)
        if resolution.status != IdentityStatus.NEW:
            message, existing = _CONFLICTS[resolution.status]
            logger.info("registration rejected: email already %s", existing)
            raise ConflictError(message, existingStatus=existing)

        # Upload first so a storage failure never leaves a vendor without its NDA
        stored = await self.storage.upload(nda.content, nda.file_name, NDA_FOLDER)
        record = await self.store.create(
            VENDORS,
            {
                VendorField.NAME: form.vendor_name.strip(),
                VendorField.CONTACT_PERSON: form.contact_person.strip(),
                VendorField.CONTACT_TITLE: form.contact_title or "",
                VendorField.EMAIL: form.email.strip(),
                VendorField.PHONE: form.phone or "",
                VendorField.WEBSITE: form.website or "",
                VendorField.COUNTRY: form.country or "",
                VendorField.COMPANY_SIZE: form.company_size or "",
                VendorField.SERVICES: form.services or "",
                VendorField.PASSWORD_HASH: hash_password(form.password, self.bcrypt_rounds),
                VendorField.NDA_ON_FILE: True,
                VendorField.NDA_FILE_NAME: stored.file_name,
                VendorField.NDA_URL: stored.url,
                VendorField.NDA_STORAGE_ID: stored.storage_id,
                VendorField.NDA_VIEW_URL: stored.url,
                VendorField.STATUS: VendorStatus.PENDING_APPROVAL,
            },
        )
        logger.info("vendor registered: vendor_id=%s", record.id)
        return record

    async def authenticate(self, email: str, password: str) -> Record:
        if not email or not password:
            raise ValidationError("Email and password required")
        resolution = await self.resolver.resolve(email)
        vendor = resolution.vendor
        if vendor is None:
            raise AuthenticationError("Invalid email or password")

        status = vendor.get(VendorField.STATUS)
        if status == VendorStatus.PENDING_APPROVAL:
            raise AuthorizationError(
                "Your account is pending admin approval. We will notify you once approved.",
                status=status,
            )
        if status == VendorStatus.DECLINED:
            raise AuthorizationError(
                "Your registration has been declined. Please contact support.",
                status=status,
            )
        if status != VendorStatus.APPROVED:
            raise AuthorizationError(f"Account not approved - Status: {status}", status=status)

        digest = vendor.get(VendorField.PASSWORD_HASH)
        if not digest:
            raise PortalError("Account corrupted")
        if not verify_password(password, digest):
            raise AuthenticationError("Invalid email or password")

        updated = await self.store.update(VENDORS, vendor.id, {VendorField.LAST_LOGIN: today_iso()})
        logger.info("vendor login: vendor_id=%s", vendor.id)
        return updated

    async def get_profile(self, vendor_id: str) -> VendorProfile:
        return vendor_profile(await self.store.find(VENDORS, vendor_id))

    async def list_pending(self) -> list[PendingVendor]:
        records = await self.store.list(VENDORS, filters={VendorField.STATUS: VendorStatus.PENDING_APPROVAL})
        return [
            PendingVendor(
                id=r.id,
                vendor_name=_text(r, VendorField.NAME),
                email=_text(r, VendorField.EMAIL),
                contact_person=_text(r, VendorField.CONTACT_PERSON),
                company_size=_text(r, VendorField.COMPANY_SIZE),
                nda_file_name=r.get(VendorField.NDA_FILE_NAME),
                nda_url=r.get(VendorField.NDA_URL),
                nda_storage_id=r.get(VendorField.NDA_STORAGE_ID),
                status=_text(r, VendorField.STATUS),
            )
            for r in records
        ]

    async def duplicate_report(self) -> DuplicateVendorsResponse:
        vendors = await self.store.list(VENDORS)
        groups: dict[str, list[DuplicateVendorEntry]] = {}
        for v in vendors:
            groups.setdefault(normalize_email(v.get(VendorField.EMAIL)), []).append(
                DuplicateVendorEntry(
                    id=v.id,
                    email=_text(v, VendorField.EMAIL),
                    status=_text(v, VendorField.STATUS),
                    name=_text(v, VendorField.NAME),
                    created=v.created_time.isoformat() if v.created_time else None,
                )
            )
        duplicates = {email: entries for email, entries in groups.items() if len(entries) > 1}
        return DuplicateVendorsResponse(
            total_vendors=len(vendors),
            duplicate_count=len(duplicates),
            duplicates=duplicates,
        )
