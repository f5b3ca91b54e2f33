from typing import Literal, Optional

from app.schemas.common import CamelModel


class VendorProfile(CamelModel):
    """Authoritative vendor fields, always read fresh from the store."""
    id: str
    name: str = ""
    contact_person: str = ""
    contact_title: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    country: str = ""
    company_size: str = ""
    services: str = ""
    status: str = ""
    nda_url: Optional[str] = None
    approval_date: Optional[str] = None
    last_login: Optional[str] = None


class RegistrationResponse(CamelModel):
    success: bool = True
    message: str
    vendor_id: str
    status: str = "pending_approval"


class LoginRequest(CamelModel):
    email: str
    password: str


class SessionVendor(CamelModel):
    id: str
    name: str = ""
    email: str = ""
    contact: str = ""
    nda_url: Optional[str] = None


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    vendor: SessionVendor


class AdminLoginResponse(CamelModel):
    success: bool = True
    token: str
    admin: dict


class PendingVendor(CamelModel):
    id: str
    vendor_name: str = ""
    email: str = ""
    contact_person: str = ""
    company_size: str = ""
    nda_file_name: Optional[str] = None
    nda_url: Optional[str] = None
    nda_storage_id: Optional[str] = None
    status: str = ""


class PendingVendorsResponse(CamelModel):
    vendors: list[PendingVendor]


class DuplicateVendorEntry(CamelModel):
    id: str
    email: str = ""
    status: str = ""
    name: str = ""
    created: Optional[str] = None


class DuplicateVendorsResponse(CamelModel):
    success: bool = True
    total_vendors: int
    duplicate_count: int
    duplicates: dict[str, list[DuplicateVendorEntry]]


class VendorActionRequest(CamelModel):
    vendor_id: str
    action: Literal["approve", "decline"]


class VendorActionResponse(CamelModel):
    success: bool = True
    message: str
    status: str
