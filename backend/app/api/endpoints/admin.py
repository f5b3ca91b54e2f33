"""Admin review endpoints: vendor approval, submission review and reporting."""

from fastapi import APIRouter, BackgroundTasks, Depends

from app.api.deps import current_admin, get_approval_service, get_submission_manager, get_vendor_directory
from app.schemas.submission import AdminSubmissionListResponse, SubmissionActionRequest, SubmissionActionResponse
from app.schemas.vendor import (
    DuplicateVendorsResponse,
    PendingVendorsResponse,
    VendorActionRequest,
    VendorActionResponse,
)
from app.services.approvals import ApprovalService
from app.services.identity import VendorDirectory
from app.services.submissions import SubmissionManager

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/pending-vendors", response_model=PendingVendorsResponse)
async def pending_vendors(
    _admin: str = Depends(current_admin),
    directory: VendorDirectory = Depends(get_vendor_directory),
):
    return PendingVendorsResponse(vendors=await directory.list_pending())


@router.get("/duplicate-vendors", response_model=DuplicateVendorsResponse)
async def duplicate_vendors(
    _admin: str = Depends(current_admin),
    directory: VendorDirectory = Depends(get_vendor_directory),
):
    """Vendors sharing a normalized email; these need manual support cleanup."""
    return await directory.duplicate_report()


@router.post("/vendor-action", response_model=VendorActionResponse)
async def vendor_action(
    payload: VendorActionRequest,
    background_tasks: BackgroundTasks,
    admin: str = Depends(current_admin),
    approvals: ApprovalService = Depends(get_approval_service),
):
    """Approve or decline a pending vendor. The webhook fires after the response."""
    decision = await approvals.decide_vendor(payload.vendor_id, payload.action, admin, background_tasks)
    return VendorActionResponse(message=f"Vendor {decision.status.lower()}", status=decision.status)


@router.post("/submission-action", response_model=SubmissionActionResponse)
async def submission_action(
    payload: SubmissionActionRequest,
    _admin: str = Depends(current_admin),
    approvals: ApprovalService = Depends(get_approval_service),
):
    status = await approvals.review_submission(payload.submission_id, payload.action, payload.notes)
    return SubmissionActionResponse(message=f"Submission {status.lower()} successfully", status=status)


@router.get("/submissions", response_model=AdminSubmissionListResponse)
async def list_submissions(
    _admin: str = Depends(current_admin),
    submissions: SubmissionManager = Depends(get_submission_manager),
):
    """All submissions, newest first, with vendor names from one batched lookup."""
    return AdminSubmissionListResponse(submissions=await submissions.list_all_submissions())
