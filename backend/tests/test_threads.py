import pytest

from app.errors import NotFoundError, ValidationError
from app.models.submission import SUBMISSIONS, SubmissionField as F
from app.services.threads import ThreadService, build_threads, resolve_step, sort_threads
from app.store.base import Record

from conftest import make_vendor, run


@pytest.fixture
def threads(store):
    return ThreadService(store)


def submission(store, vendor_id, asked, **fields):
    return run(store.create(SUBMISSIONS, {F.VENDOR: [vendor_id], F.SUBMISSION_DATE: asked, F.COMPANY_NAME: "JetWorks", **fields}))


def test_only_asked_steps_become_threads():
    record = Record(id="recS", fields={F.STEP2_QUESTIONS: "Do you support SSO?", F.STEP3_QUESTIONS: "   "})
    built = build_threads(record)
    assert len(built) == 1
    assert built[0].id == "recS-step2"
    assert built[0].answer is None
    assert built[0].has_new_answer is False


def test_answered_thread_uses_questions_last_updated():
    record = Record(
        id="recS",
        fields={
            F.SUBMISSION_DATE: "2024-03-01T00:00:00+00:00",
            F.STEP4_QUESTIONS: "Is there a setup fee?",
            F.STEP4_ANSWERS: "No",
            F.QUESTIONS_LAST_UPDATED: "2024-03-05T00:00:00+00:00",
        },
    )
    (thread,) = build_threads(record)
    assert thread.step_title == "Implementation & Pricing"
    assert thread.asked_at == "2024-03-01T00:00:00+00:00"
    assert thread.answered_at == "2024-03-05T00:00:00+00:00"
    assert thread.has_new_answer is True


def test_sort_unanswered_first_then_newest():
    def record(rid, day, answered):
        fields = {F.SUBMISSION_DATE: f"2024-01-0{day}T00:00:00+00:00", F.STEP2_QUESTIONS: "q"}
        if answered:
            fields[F.STEP2_ANSWERS] = "a"
        return Record(id=rid, fields=fields)

    a = build_threads(record("A", 1, False))
    b = build_threads(record("B", 3, True))
    c = build_threads(record("C", 2, False))
    ordered = sort_threads(a + b + c)
    assert [t.submission_id for t in ordered] == ["C", "A", "B"]


def test_resolve_step_accepts_tag_or_title():
    assert resolve_step("step3").answer_field == F.STEP3_ANSWERS
    assert resolve_step("Technical Capabilities & Compliance").tag == "step3"
    with pytest.raises(ValidationError):
        resolve_step("step9")


def test_answer_then_mark_read_clears_every_thread_of_submission(threads, store):
    vendor = make_vendor(store)
    sub = submission(
        store,
        vendor.id,
        "2024-01-01T00:00:00+00:00",
        **{F.STEP2_QUESTIONS: "q2", F.STEP3_QUESTIONS: "q3", F.STEP2_ANSWERS: "old answer", F.VENDOR_VIEWED_ANSWERS: True},
    )
    before = {t.step: t.has_new_answer for t in run(threads.threads_for_vendor(vendor.id))}
    assert before == {"step2": False, "step3": False}

    run(threads.post_answer(sub.id, "step3", "X"))
    after = {t.step: t for t in run(threads.threads_for_vendor(vendor.id))}
    assert after["step3"].answer == "X"
    assert after["step3"].has_new_answer is True
    # Viewed flag is per submission, so the older answer is new again too
    assert after["step2"].has_new_answer is True

    assert run(threads.mark_read(vendor.id)) == 1
    assert all(not t.has_new_answer for t in run(threads.threads_for_vendor(vendor.id)))


def test_post_answer_keeps_other_fields(threads, store):
    vendor = make_vendor(store)
    sub = submission(store, vendor.id, "2024-01-01T00:00:00+00:00", **{F.STEP2_QUESTIONS: "q2", F.CLIENT_WORKFLOW: "email"})
    run(threads.post_answer(sub.id, "Solution Fit & Use Cases", "Yes"))
    record = run(store.find(SUBMISSIONS, sub.id))
    assert record.get(F.STEP2_ANSWERS) == "Yes"
    assert record.get(F.CLIENT_WORKFLOW) == "email"
    assert record.get(F.QUESTIONS_LAST_UPDATED)


def test_post_answer_validation(threads):
    with pytest.raises(ValidationError):
        run(threads.post_answer("recS", "step2", "  "))
    with pytest.raises(NotFoundError):
        run(threads.post_answer("recmissing", "step2", "answer"))


def test_vendor_sees_only_own_threads(threads, store):
    mine = make_vendor(store, email="mine@x.example")
    other = make_vendor(store, email="other@x.example")
    submission(store, mine.id, "2024-01-01T00:00:00+00:00", **{F.STEP2_QUESTIONS: "mine"})
    submission(store, other.id, "2024-01-02T00:00:00+00:00", **{F.STEP2_QUESTIONS: "theirs"})

    assert [t.question for t in run(threads.threads_for_vendor(mine.id))] == ["mine"]
    assert run(threads.mark_read(mine.id)) == 1


def test_admin_threads_carry_vendor_and_status(threads, store):
    vendor = make_vendor(store, name="JetWorks", email="ops@jetworks.example")
    submission(store, vendor.id, "2024-01-01T00:00:00+00:00", **{F.STEP2_QUESTIONS: "q"})
    submission(store, "recgone", "2024-01-02T00:00:00+00:00", **{F.STEP3_QUESTIONS: "orphan"})

    listed = run(threads.threads_for_admin())
    assert [t.question for t in listed] == ["orphan", "q"]
    assert listed[0].vendor.name == "Unknown Vendor"
    assert listed[1].vendor.name == "JetWorks"
    assert listed[1].vendor.email == "ops@jetworks.example"
    assert listed[1].status == "Pending"


def test_owner_threads_visible_when_store_exceeds_scan_page(store):
    small_page = ThreadService(store, scan_limit=5)
    for n in range(5):
        submission(store, f"recother{n}", f"2024-01-0{n + 1}T00:00:00+00:00", **{F.STEP2_QUESTIONS: "other"})
    vendor = make_vendor(store)
    submission(store, vendor.id, "2024-02-01T00:00:00+00:00", **{F.STEP2_QUESTIONS: "mine", F.STEP2_ANSWERS: "yes"})

    listed = run(small_page.threads_for_vendor(vendor.id))
    assert [t.question for t in listed] == ["mine"]
    assert listed[0].has_new_answer is True
    assert run(small_page.mark_read(vendor.id)) == 1
    assert run(small_page.threads_for_vendor(vendor.id))[0].has_new_answer is False
