from typing import Any, Optional

from app.schemas.common import CamelModel
from app.schemas.vendor import VendorProfile


class DraftSaveResponse(CamelModel):
    success: bool = True
    draft_id: str
    message: str = "Draft saved successfully"


class DraftLoadResponse(CamelModel):
    success: bool = True
    draft: Optional[dict[str, Any]] = None
    last_saved: Optional[str] = None
    vendor: VendorProfile


class DraftDeleteResponse(CamelModel):
    success: bool = True
    deleted: int
    message: str


class DraftCleanupResponse(CamelModel):
    success: bool = True
    deleted: int
    message: str
