"""Vendor and submission lifecycle transitions driven by the admin."""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import BackgroundTasks

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.submission import SUBMISSIONS, ReviewStatus, SubmissionField
from app.models.vendor import VENDORS, VendorField, VendorStatus
from app.services.clock import today_iso, utc_now_iso
from app.services.notifications import NotificationDispatcher
from app.store.base import RecordStore

logger = logging.getLogger(__name__)

VENDOR_ACTIONS = {
    "approve": VendorStatus.APPROVED,
    "decline": VendorStatus.DECLINED,
}
SUBMISSION_ACTIONS = {
    "approve": ReviewStatus.APPROVED,
    "shortlist": ReviewStatus.SHORTLISTED,
    "decline": ReviewStatus.REJECTED,
    "reopen": ReviewStatus.PENDING,
}


@dataclass
class VendorDecision:
    vendor_id: str
    status: str
    event: dict[str, Any]


class ApprovalService:
    def __init__(self, store: RecordStore, dispatcher: NotificationDispatcher) -> None:
        self.store = store
        self.dispatcher = dispatcher

    async def decide_vendor(
        self,
        vendor_id: str,
        action: str,
        actor: str,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> VendorDecision:
        """Pending Approval -> Approved | Declined. Both targets are terminal.

        The webhook is queued on background_tasks when given, otherwise awaited
        inline; either way a delivery failure never undoes the transition.
        """
        new_status = VENDOR_ACTIONS.get(action)
        if not vendor_id or new_status is None:
            raise ValidationError("Invalid request")
        try:
            vendor = await self.store.find(VENDORS, vendor_id)
        except NotFoundError as e:
            raise NotFoundError("Vendor not found") from e
        current = vendor.get(VendorField.STATUS)
        if current != VendorStatus.PENDING_APPROVAL:
            raise ConflictError(f"Vendor is already {current}", existingStatus=current)

        update = {VendorField.STATUS: new_status, VendorField.APPROVAL_DATE: today_iso()}
        if new_status == VendorStatus.APPROVED:
            update[VendorField.APPROVED_BY] = actor
        updated = await self.store.update(VENDORS, vendor_id, update)
        logger.info("vendor %s: vendor_id=%s actor=%s", new_status.lower(), vendor_id, actor)

        event = {
            "vendorId": vendor_id,
            "vendorName": updated.get(VendorField.NAME),
            "email": updated.get(VendorField.EMAIL),
            "contactPerson": updated.get(VendorField.CONTACT_PERSON),
            "action": action,
            "timestamp": utc_now_iso(),
        }
        if background_tasks is not None:
            background_tasks.add_task(self.dispatcher.dispatch, event)
        else:
            await self.dispatcher.dispatch(event)
        return VendorDecision(vendor_id=vendor_id, status=new_status, event=event)

    async def review_submission(self, submission_id: str, action: str, notes: Optional[str] = None) -> str:
        review_status = SUBMISSION_ACTIONS.get(action)
        if not submission_id or review_status is None:
            raise ValidationError("Invalid request")
        try:
            await self.store.find(SUBMISSIONS, submission_id)
        except NotFoundError as e:
            raise NotFoundError("Submission not found") from e
        await self.store.update(
            SUBMISSIONS,
            submission_id,
            {SubmissionField.REVIEW_STATUS: review_status, SubmissionField.INTERNAL_NOTES: notes or ""},
        )
        logger.info("submission reviewed: submission_id=%s status=%s", submission_id, review_status)
        return review_status
