from typing import Any

from fastapi import APIRouter, Body, Depends

from app.api.deps import current_vendor_id, get_draft_manager
from app.schemas.draft import DraftCleanupResponse, DraftDeleteResponse, DraftLoadResponse, DraftSaveResponse
from app.services.drafts import DraftManager

router = APIRouter(prefix="/api", tags=["drafts"])


@router.post("/save-draft", response_model=DraftSaveResponse)
async def save_draft(
    payload: dict[str, Any] = Body(...),
    vendor_id: str = Depends(current_vendor_id),
    drafts: DraftManager = Depends(get_draft_manager),
):
    """Create or overwrite the vendor's single draft. The payload is stored as-is."""
    draft_id = await drafts.save_draft(vendor_id, payload)
    return DraftSaveResponse(draft_id=draft_id)


@router.get("/load-draft", response_model=DraftLoadResponse)
async def load_draft(
    vendor_id: str = Depends(current_vendor_id),
    drafts: DraftManager = Depends(get_draft_manager),
):
    return await drafts.load_draft(vendor_id)


@router.delete("/delete-draft", response_model=DraftDeleteResponse)
async def delete_draft(
    vendor_id: str = Depends(current_vendor_id),
    drafts: DraftManager = Depends(get_draft_manager),
):
    deleted = await drafts.delete_draft(vendor_id)
    message = f"Deleted {deleted} draft(s)" if deleted else "No drafts to delete"
    return DraftDeleteResponse(deleted=deleted, message=message)


@router.delete("/cleanup-old-drafts", response_model=DraftCleanupResponse)
async def cleanup_old_drafts(drafts: DraftManager = Depends(get_draft_manager)):
    """Maintenance sweep: purge drafts not saved within the retention window."""
    deleted = await drafts.purge_stale()
    return DraftCleanupResponse(deleted=deleted, message=f"Cleaned up {deleted} old drafts")
