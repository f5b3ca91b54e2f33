import pytest

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.submission import SUBMISSIONS, ReviewStatus, SubmissionField as F
from app.models.vendor import VENDORS, VendorField, VendorStatus
from app.services.approvals import ApprovalService
from app.services.notifications import NotificationDispatcher

from conftest import FakeNotifier, make_vendor, run


@pytest.fixture
def approvals(store, notifier):
    return ApprovalService(store, NotificationDispatcher(notifier))


def test_approve_pending_vendor_notifies(approvals, store, notifier):
    vendor = make_vendor(store, status=VendorStatus.PENDING_APPROVAL, name="JetWorks")
    decision = run(approvals.decide_vendor(vendor.id, "approve", "admin@example.com"))

    assert decision.status == VendorStatus.APPROVED
    record = run(store.find(VENDORS, vendor.id))
    assert record.get(VendorField.STATUS) == VendorStatus.APPROVED
    assert record.get(VendorField.APPROVED_BY) == "admin@example.com"
    assert record.get(VendorField.APPROVAL_DATE)

    (event,) = notifier.events
    assert event["vendorId"] == vendor.id
    assert event["vendorName"] == "JetWorks"
    assert event["action"] == "approve"


def test_decline_does_not_set_approver(approvals, store):
    vendor = make_vendor(store, status=VendorStatus.PENDING_APPROVAL)
    run(approvals.decide_vendor(vendor.id, "decline", "admin@example.com"))
    record = run(store.find(VENDORS, vendor.id))
    assert record.get(VendorField.STATUS) == VendorStatus.DECLINED
    assert record.get(VendorField.APPROVED_BY) is None


@pytest.mark.parametrize("status", [VendorStatus.APPROVED, VendorStatus.DECLINED])
def test_decided_vendor_is_terminal(approvals, store, status):
    vendor = make_vendor(store, status=status)
    with pytest.raises(ConflictError):
        run(approvals.decide_vendor(vendor.id, "approve", "admin@example.com"))
    assert run(store.find(VENDORS, vendor.id)).get(VendorField.STATUS) == status


def test_webhook_failure_keeps_transition(store):
    failing = ApprovalService(store, NotificationDispatcher(FakeNotifier(fail=True)))
    vendor = make_vendor(store, status=VendorStatus.PENDING_APPROVAL)
    run(failing.decide_vendor(vendor.id, "approve", "admin@example.com"))
    assert run(store.find(VENDORS, vendor.id)).get(VendorField.STATUS) == VendorStatus.APPROVED


def test_unconfigured_webhook_is_skipped():
    assert run(NotificationDispatcher(None).dispatch({"vendorId": "rec1", "action": "approve"})) is False


def test_invalid_vendor_actions(approvals, store):
    with pytest.raises(ValidationError):
        run(approvals.decide_vendor("rec1", "promote", "admin"))
    with pytest.raises(NotFoundError):
        run(approvals.decide_vendor("recmissing", "approve", "admin"))


@pytest.mark.parametrize(
    "action, expected",
    [
        ("approve", ReviewStatus.APPROVED),
        ("shortlist", ReviewStatus.SHORTLISTED),
        ("decline", ReviewStatus.REJECTED),
        ("reopen", ReviewStatus.PENDING),
    ],
)
def test_review_submission(approvals, store, action, expected):
    sub = run(store.create(SUBMISSIONS, {F.REVIEW_STATUS: ReviewStatus.PENDING, F.STEP2_ANSWERS: "kept"}))
    assert run(approvals.review_submission(sub.id, action, "checked refs")) == expected
    record = run(store.find(SUBMISSIONS, sub.id))
    assert record.get(F.REVIEW_STATUS) == expected
    assert record.get(F.INTERNAL_NOTES) == "checked refs"
    assert record.get(F.STEP2_ANSWERS) == "kept"


def test_review_missing_submission(approvals):
    with pytest.raises(NotFoundError):
        run(approvals.review_submission("recmissing", "approve"))
