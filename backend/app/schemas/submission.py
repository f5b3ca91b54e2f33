from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel


def _as_text(v: Any) -> Any:
    if v is None:
        return ""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class IntegrationScores(CamelModel):
    zendesk: str = ""
    oracle_sql: str = ""
    quickbooks: str = ""
    slack: str = ""
    brex: str = ""
    avinode: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _as_text(v)


class Reference(CamelModel):
    name: str = ""
    company: str = ""
    email: str = ""
    reason: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _as_text(v)


class ProposalForm(CamelModel):
    """Vendor-supplied proposal. Company identity fields are not accepted here."""
    # Step 2
    client_workflow_description: str = ""
    request_capture_description: str = ""
    internal_workflow_description: str = ""
    reporting_capabilities: str = ""
    data_architecture: str = ""
    step2_questions: str = ""
    # Step 3
    integration_scores: IntegrationScores = Field(default_factory=IntegrationScores)
    security_measures: str = ""
    pci_compliant: bool = False
    pii_compliant: bool = False
    step3_questions: str = ""
    # Step 4
    implementation_timeline: str = ""
    project_start_date: str = ""
    implementation_phases: str = ""
    upfront_cost: str = ""
    monthly_cost: str = ""
    pricing_document_url: Optional[str] = None
    step4_questions: str = ""
    # Step 5
    reference1: Reference = Field(default_factory=Reference)
    reference2: Reference = Field(default_factory=Reference)
    solution_fit: str = ""
    info_accurate: bool = False
    contact_consent: bool = False

    @field_validator(
        "client_workflow_description",
        "request_capture_description",
        "internal_workflow_description",
        "reporting_capabilities",
        "data_architecture",
        "step2_questions",
        "security_measures",
        "step3_questions",
        "implementation_timeline",
        "project_start_date",
        "implementation_phases",
        "upfront_cost",
        "monthly_cost",
        "step4_questions",
        "solution_fit",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("pci_compliant", "pii_compliant", "info_accurate", "contact_consent", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> Any:
        return False if v is None or v == "" else v

    @field_validator("integration_scores", "reference1", "reference2", mode="before")
    @classmethod
    def default_when_missing(cls, v: Any) -> Any:
        return {} if v is None else v


class SubmissionDetail(ProposalForm):
    id: str
    company_name: str = ""
    website: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    company_description: str = ""
    status: str = "Pending"
    submitted_at: Optional[str] = None
    last_updated: Optional[str] = None


class SubmissionDetailResponse(CamelModel):
    success: bool = True
    submission: SubmissionDetail


class SubmissionSummary(CamelModel):
    id: str
    rfp_name: str
    company_name: str = ""
    contact_person: str = ""
    email: str = ""
    status: str = "Pending"
    submitted_at: Optional[str] = None
    implementation_timeline: str = ""
    upfront_cost: Optional[float] = None
    monthly_cost: str = ""


class SubmissionListResponse(CamelModel):
    success: bool = True
    submissions: list[SubmissionSummary]


class AdminSubmissionSummary(SubmissionSummary):
    vendor_name: str
    vendor_id: Optional[str] = None
    admin_notes: str = ""
    client_workflow_description: str = ""


class AdminSubmissionListResponse(CamelModel):
    submissions: list[AdminSubmissionSummary]


class SubmissionWriteResponse(CamelModel):
    success: bool = True
    message: str
    submission_id: str


class SubmissionActionRequest(CamelModel):
    submission_id: str
    action: Literal["approve", "shortlist", "decline", "reopen"]
    notes: Optional[str] = None


class SubmissionActionResponse(CamelModel):
    success: bool = True
    message: str
    status: str


class DocumentUploadResponse(CamelModel):
    success: bool = True
    url: str
    storage_id: str
    file_name: str
