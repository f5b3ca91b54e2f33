SUBMISSIONS = "Submissions"


class ReviewStatus:
    PENDING = "Pending"
    APPROVED = "Approved"
    SHORTLISTED = "Shortlisted"
    REJECTED = "Rejected"


class SubmissionField:
    VENDOR = "Vendor ID"  # link field: [vendor_id]

    # Company snapshot, always copied from the vendor record
    COMPANY_NAME = "Company Name"
    WEBSITE = "Website"
    CONTACT_PERSON = "Contact Person"
    EMAIL = "Email"
    PHONE = "Phone"
    COMPANY_DESCRIPTION = "Company Description"

    # Step 2: solution fit
    CLIENT_WORKFLOW = "Client Workflow Description"
    REQUEST_CAPTURE = "Request Capture Description"
    INTERNAL_WORKFLOW = "Internal Workflow Description"
    REPORTING = "Reporting Capabilities"
    DATA_ARCHITECTURE = "Data Architecture"
    STEP2_QUESTIONS = "Step 2 Questions"

    # Step 3: technical capabilities and compliance
    INTEGRATION_SCORES = "Integration Scores"  # JSON text
    SECURITY_MEASURES = "Security Measures"
    PCI_COMPLIANT = "PCI Compliant"
    PII_COMPLIANT = "PII Compliant"
    STEP3_QUESTIONS = "Step 3 Questions"

    # Step 4: implementation and pricing
    IMPLEMENTATION_TIMELINE = "Implementation Timeline"
    PROJECT_START_DATE = "Project Start Date"
    IMPLEMENTATION_PHASES = "Implementation Phases"
    UPFRONT_COST = "Upfront Cost"
    MONTHLY_COST = "Monthly Cost"  # free text
    PRICING_DOCUMENT_URL = "Pricing Document URL"
    STEP4_QUESTIONS = "Step 4 Questions"

    # Step 5: references and attestation
    REFERENCE_1 = "Reference 1"  # JSON text
    REFERENCE_2 = "Reference 2"  # JSON text
    SOLUTION_FIT = "Solution Fit"
    INFO_ACCURATE = "Info Accurate"
    CONTACT_CONSENT = "Contact Consent"

    # Review, owned by the admin
    REVIEW_STATUS = "Review Status"
    INTERNAL_NOTES = "Internal Notes"
    SUBMISSION_DATE = "Submission Date"
    LAST_UPDATED = "Last Updated"
    RFP_TYPE = "RFP Type"

    # Q&A answers, owned by the admin
    STEP2_ANSWERS = "Step 2 Answers"
    STEP3_ANSWERS = "Step 3 Answers"
    STEP4_ANSWERS = "Step 4 Answers"
    QUESTIONS_LAST_UPDATED = "Questions Last Updated"
    VENDOR_VIEWED_ANSWERS = "Vendor Viewed Answers"
