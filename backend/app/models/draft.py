DRAFTS = "Drafts"
DRAFT_STATUS = "draft"


class DraftField:
    VENDOR = "Vendor"  # link field: [vendor_id]
    DATA = "Draft Data"  # JSON text, schema owned by the frontend
    LAST_SAVED = "Last Saved"
    STATUS = "Status"
