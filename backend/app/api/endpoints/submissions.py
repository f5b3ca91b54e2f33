from fastapi import APIRouter, Depends, File, UploadFile

from app.api.deps import current_vendor_id, get_document_storage, get_submission_manager
from app.config import Settings, get_settings
from app.schemas.submission import (
    DocumentUploadResponse,
    ProposalForm,
    SubmissionDetailResponse,
    SubmissionListResponse,
    SubmissionWriteResponse,
)
from app.services.file_service import PRICING_CONTENT_TYPES, PRICING_FOLDER, LocalDocumentStorage, validate_document
from app.services.submissions import SubmissionManager

router = APIRouter(prefix="/api", tags=["submissions"])


@router.post("/submit-proposal", response_model=SubmissionWriteResponse)
async def submit_proposal(
    payload: ProposalForm,
    vendor_id: str = Depends(current_vendor_id),
    submissions: SubmissionManager = Depends(get_submission_manager),
):
    submission_id = await submissions.create_submission(vendor_id, payload)
    return SubmissionWriteResponse(
        message="Aviation RFP submission completed successfully!",
        submission_id=submission_id,
    )


@router.post("/update-submission/{submission_id}", response_model=SubmissionWriteResponse)
async def update_submission(
    submission_id: str,
    payload: ProposalForm,
    vendor_id: str = Depends(current_vendor_id),
    submissions: SubmissionManager = Depends(get_submission_manager),
):
    """Resubmit an owned submission; its review status goes back to Pending."""
    await submissions.update_submission(submission_id, vendor_id, payload)
    return SubmissionWriteResponse(message="Submission updated successfully!", submission_id=submission_id)


@router.get("/vendor/submissions", response_model=SubmissionListResponse)
async def list_vendor_submissions(
    vendor_id: str = Depends(current_vendor_id),
    submissions: SubmissionManager = Depends(get_submission_manager),
):
    return SubmissionListResponse(submissions=await submissions.list_submissions(vendor_id))


@router.get("/vendor/submissions/{submission_id}", response_model=SubmissionDetailResponse)
async def get_vendor_submission(
    submission_id: str,
    vendor_id: str = Depends(current_vendor_id),
    submissions: SubmissionManager = Depends(get_submission_manager),
):
    return SubmissionDetailResponse(submission=await submissions.get_submission(submission_id, vendor_id))


@router.post("/vendor/pricing-document", response_model=DocumentUploadResponse)
async def upload_pricing_document(
    file: UploadFile = File(...),
    vendor_id: str = Depends(current_vendor_id),
    storage: LocalDocumentStorage = Depends(get_document_storage),
    settings: Settings = Depends(get_settings),
):
    """Store a pricing document ahead of submit; the returned url goes into pricingDocumentUrl."""
    content = await file.read()
    validate_document(
        content,
        file.content_type,
        allowed_types=PRICING_CONTENT_TYPES,
        max_bytes=settings.max_upload_bytes,
        label="Pricing document",
    )
    stored = await storage.upload(content, file.filename or "pricing", PRICING_FOLDER)
    return DocumentUploadResponse(url=stored.url, storage_id=stored.storage_id, file_name=stored.file_name)
