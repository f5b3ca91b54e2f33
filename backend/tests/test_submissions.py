import pytest

from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.draft import DRAFTS
from app.models.submission import SUBMISSIONS, ReviewStatus, SubmissionField as F
from app.models.vendor import VendorStatus
from app.schemas.submission import ProposalForm
from app.services.drafts import DraftManager
from app.services.submissions import SubmissionManager, fallback_vendor_name

from conftest import make_vendor, proposal, run


@pytest.fixture
def drafts(store):
    return DraftManager(store)


@pytest.fixture
def manager(store, drafts):
    return SubmissionManager(store, drafts, rfp_type="Test RFP")


def form(**overrides) -> ProposalForm:
    return ProposalForm.model_validate(proposal(**overrides))


def test_create_sanitizes_cost_and_snapshots_vendor(manager, store):
    vendor = make_vendor(store, name="JetWorks")
    submission_id = run(manager.create_submission(vendor.id, form(upfrontCost="$12,500")))

    record = run(store.find(SUBMISSIONS, submission_id))
    assert record.get(F.UPFRONT_COST) == 12500
    assert record.get(F.MONTHLY_COST) == "$2,000 per month incl. support"
    assert record.get(F.COMPANY_NAME) == "JetWorks"
    assert record.get(F.VENDOR) == [vendor.id]
    assert record.get(F.REVIEW_STATUS) == ReviewStatus.PENDING
    assert record.get(F.RFP_TYPE) == "Test RFP"


def test_unparseable_cost_is_stored_as_zero(manager, store):
    vendor = make_vendor(store)
    submission_id = run(manager.create_submission(vendor.id, form(upfrontCost="tbd")))
    assert run(store.find(SUBMISSIONS, submission_id)).get(F.UPFRONT_COST) == 0


def test_company_fields_from_client_are_ignored(manager, store):
    vendor = make_vendor(store, name="JetWorks")
    submission_id = run(manager.create_submission(vendor.id, form(companyName="Impostor Ltd")))
    assert run(store.find(SUBMISSIONS, submission_id)).get(F.COMPANY_NAME) == "JetWorks"


def test_create_requires_core_fields(manager, store):
    vendor = make_vendor(store)
    with pytest.raises(ValidationError) as exc:
        run(manager.create_submission(vendor.id, form(clientWorkflowDescription="  ")))
    assert exc.value.extra["missing"] == ["clientWorkflowDescription"]


def test_create_requires_approved_vendor(manager, store):
    vendor = make_vendor(store, status=VendorStatus.PENDING_APPROVAL)
    with pytest.raises(AuthorizationError):
        run(manager.create_submission(vendor.id, form()))
    with pytest.raises(NotFoundError, match="Vendor not found"):
        run(manager.create_submission("recghost", form()))


def test_create_discards_vendor_draft(manager, drafts, store):
    vendor = make_vendor(store)
    run(drafts.save_draft(vendor.id, {"step": 5}))
    run(manager.create_submission(vendor.id, form()))
    assert run(store.list(DRAFTS)) == []


def test_update_by_non_owner_is_denied_and_leaves_record(manager, store):
    owner = make_vendor(store, email="owner@x.example")
    intruder = make_vendor(store, email="intruder@x.example")
    submission_id = run(manager.create_submission(owner.id, form()))
    before = run(store.find(SUBMISSIONS, submission_id)).fields

    with pytest.raises(AuthorizationError):
        run(manager.update_submission(submission_id, intruder.id, form(clientWorkflowDescription="hijacked")))
    assert run(store.find(SUBMISSIONS, submission_id)).fields == before


def test_update_resets_review_and_keeps_answers(manager, store):
    vendor = make_vendor(store)
    submission_id = run(manager.create_submission(vendor.id, form(step2Questions="Is SSO supported?")))
    run(store.update(SUBMISSIONS, submission_id, {F.REVIEW_STATUS: ReviewStatus.SHORTLISTED, F.STEP2_ANSWERS: "Yes"}))

    run(manager.update_submission(submission_id, vendor.id, form(implementationTimeline="8 weeks")))
    record = run(store.find(SUBMISSIONS, submission_id))
    assert record.get(F.REVIEW_STATUS) == ReviewStatus.PENDING
    assert record.get(F.IMPLEMENTATION_TIMELINE) == "8 weeks"
    assert record.get(F.STEP2_ANSWERS) == "Yes"
    assert record.get(F.LAST_UPDATED)


def test_update_missing_submission(manager, store):
    vendor = make_vendor(store)
    with pytest.raises(NotFoundError, match="Submission not found"):
        run(manager.update_submission("recnope", vendor.id, form()))


def test_detail_decodes_blobs_and_formats_cost(manager, store):
    vendor = make_vendor(store)
    submission_id = run(manager.create_submission(vendor.id, form()))
    run(store.update(SUBMISSIONS, submission_id, {F.REFERENCE_2: '"{\\"name\\": \\"Legacy\\"}"'}))

    detail = run(manager.get_submission(submission_id, vendor.id))
    assert detail.upfront_cost == "12500"
    assert detail.integration_scores.zendesk == "3"
    assert detail.reference1.company == "SkyCo"
    assert detail.reference2.name == "Legacy"


def test_vendor_listing_is_owned_and_newest_first(manager, store):
    a = make_vendor(store, email="a@x.example")
    b = make_vendor(store, email="b@x.example")
    first = run(manager.create_submission(a.id, form()))
    second = run(manager.create_submission(a.id, form()))
    run(manager.create_submission(b.id, form()))

    listed = run(manager.list_submissions(a.id))
    assert [s.id for s in listed] == [second, first]
    assert listed[0].upfront_cost == 12500.0
    assert listed[0].rfp_name == "Test RFP"


def test_admin_listing_resolves_vendor_names(manager, store):
    vendor = make_vendor(store, name="JetWorks")
    run(manager.create_submission(vendor.id, form()))
    orphan = run(store.create(SUBMISSIONS, {F.VENDOR: ["recgone1234"], F.SUBMISSION_DATE: "2020-01-01T00:00:00+00:00"}))
    run(store.create(SUBMISSIONS, {F.SUBMISSION_DATE: "2019-01-01T00:00:00+00:00"}))

    listed = run(manager.list_all_submissions())
    assert [s.vendor_name for s in listed] == ["JetWorks", "Vendor-1234", "Unknown Vendor"]
    assert listed[1].id == orphan.id


def test_fallback_vendor_name():
    assert fallback_vendor_name("recABCDEF") == "Vendor-CDEF"
    assert fallback_vendor_name(None) == "Unknown Vendor"
