import hmac

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.api.deps import current_vendor_id, get_vendor_directory
from app.config import Settings, get_settings
from app.errors import AuthenticationError
from app.models.vendor import VendorField
from app.schemas.vendor import (
    AdminLoginResponse,
    LoginRequest,
    LoginResponse,
    RegistrationResponse,
    SessionVendor,
    VendorProfile,
)
from app.services.identity import UploadedDocument, VendorDirectory, VendorRegistration
from app.services.sessions import ROLE_ADMIN, ROLE_VENDOR, issue_session_token

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=RegistrationResponse)
async def register_vendor(
    vendor_name: str = Form("", alias="vendorName"),
    contact_person: str = Form("", alias="contactPerson"),
    contact_title: str = Form("", alias="contactTitle"),
    email: str = Form(""),
    phone: str = Form(""),
    website: str = Form(""),
    country: str = Form(""),
    company_size: str = Form("", alias="companySize"),
    services: str = Form(""),
    password: str = Form(""),
    nda_file: UploadFile | None = File(None, alias="ndaFile"),
    directory: VendorDirectory = Depends(get_vendor_directory),
):
    """Register a vendor with its signed NDA; the account starts Pending Approval."""
    nda = None
    if nda_file is not None:
        nda = UploadedDocument(
            content=await nda_file.read(),
            file_name=nda_file.filename or "nda.pdf",
            content_type=nda_file.content_type,
        )
    form = VendorRegistration(
        vendor_name=vendor_name,
        contact_person=contact_person,
        contact_title=contact_title,
        email=email,
        phone=phone,
        website=website,
        country=country,
        company_size=company_size,
        services=services,
        password=password,
    )
    record = await directory.register(form, nda)
    return RegistrationResponse(
        message="Registration submitted! Your NDA is under review. You will be notified once approved.",
        vendor_id=record.id,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    directory: VendorDirectory = Depends(get_vendor_directory),
    settings: Settings = Depends(get_settings),
):
    vendor = await directory.authenticate(payload.email, payload.password)
    return LoginResponse(
        token=issue_session_token(vendor.id, ROLE_VENDOR, settings),
        vendor=SessionVendor(
            id=vendor.id,
            name=vendor.get(VendorField.NAME) or "",
            email=vendor.get(VendorField.EMAIL) or "",
            contact=vendor.get(VendorField.CONTACT_PERSON) or "",
            nda_url=vendor.get(VendorField.NDA_URL),
        ),
    )


@router.post("/admin/login", response_model=AdminLoginResponse)
def admin_login(payload: LoginRequest, settings: Settings = Depends(get_settings)):
    email_ok = bool(settings.admin_email) and hmac.compare_digest(
        payload.email.strip().lower().encode(), settings.admin_email.lower().encode()
    )
    password_ok = bool(settings.admin_password) and hmac.compare_digest(
        payload.password.encode(), settings.admin_password.encode()
    )
    if not (email_ok and password_ok):
        raise AuthenticationError("Invalid admin credentials")
    return AdminLoginResponse(
        token=issue_session_token(settings.admin_email, ROLE_ADMIN, settings),
        admin={"email": settings.admin_email},
    )


@router.get("/vendor/profile", response_model=VendorProfile)
async def vendor_profile(
    vendor_id: str = Depends(current_vendor_id),
    directory: VendorDirectory = Depends(get_vendor_directory),
):
    """Profile read fresh from the store, never from the session."""
    return await directory.get_profile(vendor_id)
