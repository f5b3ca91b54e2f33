from app.models.record import StoredRecord
from app.models.vendor import VENDORS, VendorField, VendorStatus
from app.models.draft import DRAFTS, DRAFT_STATUS, DraftField
from app.models.submission import SUBMISSIONS, ReviewStatus, SubmissionField

__all__ = [
    "StoredRecord",
    "VENDORS",
    "VendorField",
    "VendorStatus",
    "DRAFTS",
    "DRAFT_STATUS",
    "DraftField",
    "SUBMISSIONS",
    "ReviewStatus",
    "SubmissionField",
]
