"""Submission ownership, versioning and the vendor/admin read models."""
import logging
from typing import Any, Optional

from app.errors import AuthorizationError, NotFoundError, UpstreamError, ValidationError
from app.models.submission import SUBMISSIONS, ReviewStatus, SubmissionField as F
from app.models.vendor import VENDORS, VendorField, VendorStatus
from app.schemas.submission import (
    AdminSubmissionSummary,
    ProposalForm,
    SubmissionDetail,
    SubmissionSummary,
)
from app.services.clock import utc_now_iso
from app.services.drafts import DraftManager
from app.services.proposal_fields import (
    decode_integration_scores,
    decode_reference,
    encode_blob,
    format_cost,
    parse_cost,
)
from app.store.base import Record, RecordStore, belongs_to, linked_id

logger = logging.getLogger(__name__)

DEFAULT_RFP_NAME = "Private Aviation RFP"
REQUIRED_FIELDS = (
    ("client_workflow_description", "clientWorkflowDescription"),
    ("request_capture_description", "requestCaptureDescription"),
    ("internal_workflow_description", "internalWorkflowDescription"),
)


def _text(record: Record, name: str) -> str:
    value = record.get(name)
    return value if isinstance(value, str) else ("" if value is None else str(value))


def _cost(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def company_snapshot(vendor: Record) -> dict[str, Any]:
    """Company identity copied from the vendor record, never from client input."""
    return {
        F.COMPANY_NAME: _text(vendor, VendorField.NAME),
        F.WEBSITE: _text(vendor, VendorField.WEBSITE),
        F.CONTACT_PERSON: _text(vendor, VendorField.CONTACT_PERSON),
        F.EMAIL: _text(vendor, VendorField.EMAIL),
        F.PHONE: _text(vendor, VendorField.PHONE),
        F.COMPANY_DESCRIPTION: _text(vendor, VendorField.SERVICES),
    }


def proposal_fields(form: ProposalForm) -> dict[str, Any]:
    return {
        F.CLIENT_WORKFLOW: form.client_workflow_description,
        F.REQUEST_CAPTURE: form.request_capture_description,
        F.INTERNAL_WORKFLOW: form.internal_workflow_description,
        F.REPORTING: form.reporting_capabilities,
        F.DATA_ARCHITECTURE: form.data_architecture,
        F.STEP2_QUESTIONS: form.step2_questions,
        F.INTEGRATION_SCORES: encode_blob(form.integration_scores),
        F.SECURITY_MEASURES: form.security_measures,
        F.PCI_COMPLIANT: form.pci_compliant,
        F.PII_COMPLIANT: form.pii_compliant,
        F.STEP3_QUESTIONS: form.step3_questions,
        F.IMPLEMENTATION_TIMELINE: form.implementation_timeline,
        F.PROJECT_START_DATE: form.project_start_date,
        F.IMPLEMENTATION_PHASES: form.implementation_phases,
        F.UPFRONT_COST: parse_cost(form.upfront_cost),
        F.MONTHLY_COST: form.monthly_cost,
        F.PRICING_DOCUMENT_URL: form.pricing_document_url or "",
        F.STEP4_QUESTIONS: form.step4_questions,
        F.REFERENCE_1: encode_blob(form.reference1),
        F.REFERENCE_2: encode_blob(form.reference2),
        F.SOLUTION_FIT: form.solution_fit,
        F.INFO_ACCURATE: form.info_accurate,
        F.CONTACT_CONSENT: form.contact_consent,
    }


def submission_detail(record: Record) -> SubmissionDetail:
    return SubmissionDetail(
        id=record.id,
        company_name=_text(record, F.COMPANY_NAME),
        website=_text(record, F.WEBSITE),
        contact_person=_text(record, F.CONTACT_PERSON),
        email=_text(record, F.EMAIL),
        phone=_text(record, F.PHONE),
        company_description=_text(record, F.COMPANY_DESCRIPTION),
        client_workflow_description=_text(record, F.CLIENT_WORKFLOW),
        request_capture_description=_text(record, F.REQUEST_CAPTURE),
        internal_workflow_description=_text(record, F.INTERNAL_WORKFLOW),
        reporting_capabilities=_text(record, F.REPORTING),
        data_architecture=_text(record, F.DATA_ARCHITECTURE),
        step2_questions=_text(record, F.STEP2_QUESTIONS),
        integration_scores=decode_integration_scores(record.get(F.INTEGRATION_SCORES)),
        security_measures=_text(record, F.SECURITY_MEASURES),
        pci_compliant=bool(record.get(F.PCI_COMPLIANT)),
        pii_compliant=bool(record.get(F.PII_COMPLIANT)),
        step3_questions=_text(record, F.STEP3_QUESTIONS),
        implementation_timeline=_text(record, F.IMPLEMENTATION_TIMELINE),
        project_start_date=_text(record, F.PROJECT_START_DATE),
        implementation_phases=_text(record, F.IMPLEMENTATION_PHASES),
        upfront_cost=format_cost(record.get(F.UPFRONT_COST)),
        monthly_cost=_text(record, F.MONTHLY_COST),
        pricing_document_url=record.get(F.PRICING_DOCUMENT_URL) or None,
        step4_questions=_text(record, F.STEP4_QUESTIONS),
        reference1=decode_reference(record.get(F.REFERENCE_1), "Reference 1"),
        reference2=decode_reference(record.get(F.REFERENCE_2), "Reference 2"),
        solution_fit=_text(record, F.SOLUTION_FIT),
        info_accurate=bool(record.get(F.INFO_ACCURATE)),
        contact_consent=bool(record.get(F.CONTACT_CONSENT)),
        status=record.get(F.REVIEW_STATUS) or ReviewStatus.PENDING,
        submitted_at=_submitted_at(record),
        last_updated=record.get(F.LAST_UPDATED) or None,
    )


def _submitted_at(record: Record) -> Optional[str]:
    value = record.get(F.SUBMISSION_DATE)
    if value:
        return value
    return record.created_time.isoformat() if record.created_time else None


def _summary_kwargs(record: Record) -> dict[str, Any]:
    return dict(
        id=record.id,
        rfp_name=record.get(F.RFP_TYPE) or DEFAULT_RFP_NAME,
        company_name=_text(record, F.COMPANY_NAME),
        contact_person=_text(record, F.CONTACT_PERSON),
        email=_text(record, F.EMAIL),
        status=record.get(F.REVIEW_STATUS) or ReviewStatus.PENDING,
        submitted_at=_submitted_at(record),
        implementation_timeline=_text(record, F.IMPLEMENTATION_TIMELINE),
        upfront_cost=_cost(record.get(F.UPFRONT_COST)),
        monthly_cost=_text(record, F.MONTHLY_COST),
    )


def _newest_first(records: list[Record]) -> list[Record]:
    return sorted(records, key=lambda r: _submitted_at(r) or "", reverse=True)


def fallback_vendor_name(vendor_id: Optional[str]) -> str:
    return f"Vendor-{vendor_id[-4:]}" if vendor_id else "Unknown Vendor"


class SubmissionManager:
    def __init__(
        self,
        store: RecordStore,
        drafts: Optional[DraftManager] = None,
        *,
        scan_limit: int = 500,
        rfp_type: str = "Private Aviation Workflow Modernization",
    ) -> None:
        self.store = store
        self.drafts = drafts
        self.scan_limit = scan_limit
        self.rfp_type = rfp_type

    @staticmethod
    def _require_proposal(form: ProposalForm) -> None:
        missing = [wire for attr, wire in REQUIRED_FIELDS if not getattr(form, attr).strip()]
        if missing:
            raise ValidationError("Required fields missing", missing=missing)

    async def _load_owned(self, submission_id: str, vendor_id: str) -> Record:
        try:
            record = await self.store.find(SUBMISSIONS, submission_id)
        except NotFoundError as e:
            raise NotFoundError("Submission not found", details="The requested submission does not exist") from e
        if not belongs_to(record, F.VENDOR, vendor_id):
            raise AuthorizationError("Access denied - submission does not belong to this vendor")
        return record

    async def _load_vendor(self, vendor_id: str) -> Record:
        try:
            return await self.store.find(VENDORS, vendor_id)
        except NotFoundError as e:
            raise NotFoundError("Vendor not found") from e

    async def _discard_drafts(self, vendor_id: str) -> None:
        if self.drafts is None:
            return
        try:
            await self.drafts.delete_draft(vendor_id)
        except UpstreamError as e:
            logger.warning("could not clear drafts for vendor %s after submission: %s", vendor_id, e)

    async def create_submission(self, vendor_id: str, form: ProposalForm) -> str:
        vendor = await self._load_vendor(vendor_id)
        self._require_proposal(form)
        if vendor.get(VendorField.STATUS) != VendorStatus.APPROVED:
            raise AuthorizationError("Vendor account not approved")

        now = utc_now_iso()
        record = await self.store.create(
            SUBMISSIONS,
            {
                F.VENDOR: [vendor_id],
                **company_snapshot(vendor),
                **proposal_fields(form),
                F.REVIEW_STATUS: ReviewStatus.PENDING,
                F.SUBMISSION_DATE: now,
                F.RFP_TYPE: self.rfp_type,
            },
        )
        logger.info("submission created: vendor_id=%s submission_id=%s", vendor_id, record.id)
        await self._discard_drafts(vendor_id)
        return record.id

    async def update_submission(self, submission_id: str, vendor_id: str, form: ProposalForm) -> str:
        """Resubmit in place. Review goes back to Pending; admin-owned answer fields stay as they are."""
        await self._load_owned(submission_id, vendor_id)
        vendor = await self._load_vendor(vendor_id)
        self._require_proposal(form)
        await self.store.update(
            SUBMISSIONS,
            submission_id,
            {
                **company_snapshot(vendor),
                **proposal_fields(form),
                F.REVIEW_STATUS: ReviewStatus.PENDING,
                F.LAST_UPDATED: utc_now_iso(),
            },
        )
        logger.info("submission updated: vendor_id=%s submission_id=%s", vendor_id, submission_id)
        await self._discard_drafts(vendor_id)
        return submission_id

    async def get_submission(self, submission_id: str, vendor_id: str) -> SubmissionDetail:
        return submission_detail(await self._load_owned(submission_id, vendor_id))

    async def owned_submissions(self, vendor_id: str) -> list[Record]:
        return await self.store.find_by_owner(
            SUBMISSIONS,
            F.VENDOR,
            vendor_id,
            max_records=self.scan_limit,
            sort=(F.SUBMISSION_DATE, "desc"),
        )

    async def list_submissions(self, vendor_id: str) -> list[SubmissionSummary]:
        records = _newest_first(await self.owned_submissions(vendor_id))
        return [SubmissionSummary(**_summary_kwargs(r)) for r in records]

    async def vendor_names(self, vendor_ids: set[str]) -> dict[str, Record]:
        """One batched lookup for every vendor referenced by a set of submissions."""
        if not vendor_ids:
            return {}
        vendors = await self.store.find_many(VENDORS, vendor_ids)
        return {v.id: v for v in vendors}

    async def list_all_submissions(self) -> list[AdminSubmissionSummary]:
        records = _newest_first(await self.store.list(SUBMISSIONS, sort=(F.SUBMISSION_DATE, "desc")))
        vendor_ids = {vid for vid in (linked_id(r.get(F.VENDOR)) for r in records) if vid}
        try:
            vendors = await self.vendor_names(vendor_ids)
        except UpstreamError as e:
            logger.warning("vendor lookup for admin submissions failed: %s", e)
            vendors = {}

        summaries = []
        for record in records:
            vendor_id = linked_id(record.get(F.VENDOR))
            vendor = vendors.get(vendor_id) if vendor_id else None
            name = _text(vendor, VendorField.NAME) if vendor else ""
            summaries.append(
                AdminSubmissionSummary(
                    **_summary_kwargs(record),
                    vendor_name=name or fallback_vendor_name(vendor_id),
                    vendor_id=vendor_id,
                    admin_notes=_text(record, F.INTERNAL_NOTES),
                    client_workflow_description=_text(record, F.CLIENT_WORKFLOW),
                )
            )
        return summaries
