"""Virtual Q&A threads built from the per-step question/answer fields of submissions.

Read state lives on the submission ("Vendor Viewed Answers"), not on a thread:
marking read covers every answer of that submission, and any new admin answer
makes all of its answered threads show as new again.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from app.errors import NotFoundError, ValidationError
from app.models.submission import SUBMISSIONS, ReviewStatus, SubmissionField as F
from app.models.vendor import VENDORS, VendorField
from app.schemas.qa import QuestionThread, ThreadVendor
from app.services.clock import parse_timestamp, utc_now_iso
from app.store.base import Record, RecordStore, linked_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThreadStep:
    tag: str
    title: str
    question_field: str
    answer_field: str


STEPS = (
    ThreadStep("step2", "Solution Fit & Use Cases", F.STEP2_QUESTIONS, F.STEP2_ANSWERS),
    ThreadStep("step3", "Technical Capabilities & Compliance", F.STEP3_QUESTIONS, F.STEP3_ANSWERS),
    ThreadStep("step4", "Implementation & Pricing", F.STEP4_QUESTIONS, F.STEP4_ANSWERS),
)


def resolve_step(step: str) -> ThreadStep:
    """Accept either the tag ("step3") or the display title."""
    wanted = (step or "").strip()
    for s in STEPS:
        if wanted.lower() == s.tag or wanted == s.title:
            return s
    raise ValidationError("Invalid step", step=step)


def _present(value) -> Optional[str]:
    if isinstance(value, str):
        return value if value.strip() else None
    return str(value) if value not in (None, False) else None


def build_threads(record: Record, vendor: Optional[ThreadVendor] = None, *, include_status: bool = False) -> list[QuestionThread]:
    """One thread per step whose question field is non-empty; unasked steps yield nothing."""
    fields = record.fields
    submitted_at = fields.get(F.SUBMISSION_DATE)
    viewed = bool(fields.get(F.VENDOR_VIEWED_ANSWERS))
    threads = []
    for step in STEPS:
        question = _present(fields.get(step.question_field))
        if question is None:
            continue
        answer = _present(fields.get(step.answer_field))
        threads.append(
            QuestionThread(
                id=f"{record.id}-{step.tag}",
                submission_id=record.id,
                step=step.tag,
                step_title=step.title,
                company_name=fields.get(F.COMPANY_NAME) or "",
                question=question,
                answer=answer,
                submitted_at=submitted_at,
                asked_at=submitted_at,
                answered_at=fields.get(F.QUESTIONS_LAST_UPDATED) if answer else None,
                has_new_answer=answer is not None and not viewed,
                status=(fields.get(F.REVIEW_STATUS) or ReviewStatus.PENDING) if include_status else None,
                vendor=vendor,
            )
        )
    return threads


def sort_threads(threads: list[QuestionThread]) -> list[QuestionThread]:
    """Unanswered first, then newest question first within each group."""
    def key(thread: QuestionThread):
        asked = parse_timestamp(thread.asked_at)
        return (thread.answer is not None, -asked.timestamp() if asked else float("inf"))
    return sorted(threads, key=key)


class ThreadService:
    def __init__(self, store: RecordStore, *, scan_limit: int = 500) -> None:
        self.store = store
        self.scan_limit = scan_limit

    async def _owned(self, vendor_id: str) -> list[Record]:
        return await self.store.find_by_owner(
            SUBMISSIONS,
            F.VENDOR,
            vendor_id,
            max_records=self.scan_limit,
            sort=(F.SUBMISSION_DATE, "desc"),
        )

    async def threads_for_vendor(self, vendor_id: str) -> list[QuestionThread]:
        threads = []
        for record in await self._owned(vendor_id):
            threads.extend(build_threads(record))
        return sort_threads(threads)

    async def threads_for_admin(self) -> list[QuestionThread]:
        submissions = await self.store.list(SUBMISSIONS)
        vendor_ids = {vid for vid in (linked_id(s.get(F.VENDOR)) for s in submissions) if vid}
        vendors = {v.id: v for v in await self.store.find_many(VENDORS, vendor_ids)} if vendor_ids else {}

        threads = []
        for record in submissions:
            vendor = vendors.get(linked_id(record.get(F.VENDOR)) or "")
            display = ThreadVendor(
                name=vendor.get(VendorField.NAME) or "Unknown Vendor",
                email=vendor.get(VendorField.EMAIL) or "",
            ) if vendor else ThreadVendor()
            threads.extend(build_threads(record, display, include_status=True))
        return sort_threads(threads)

    async def post_answer(self, submission_id: str, step: str, answer: str) -> None:
        target = resolve_step(step)
        if not submission_id or not (answer or "").strip():
            raise ValidationError("Missing required fields")
        try:
            await self.store.find(SUBMISSIONS, submission_id)
        except NotFoundError as e:
            raise NotFoundError("Submission not found") from e
        await self.store.update(
            SUBMISSIONS,
            submission_id,
            {
                target.answer_field: answer,
                F.QUESTIONS_LAST_UPDATED: utc_now_iso(),
                F.VENDOR_VIEWED_ANSWERS: False,
            },
        )
        logger.info("answer posted: submission_id=%s step=%s", submission_id, target.tag)

    async def mark_read(self, vendor_id: str) -> int:
        owned = await self._owned(vendor_id)
        await asyncio.gather(
            *(self.store.update(SUBMISSIONS, s.id, {F.VENDOR_VIEWED_ANSWERS: True}) for s in owned)
        )
        logger.info("questions marked read: vendor_id=%s submissions=%s", vendor_id, len(owned))
        return len(owned)
