from fastapi import APIRouter, Depends

from app.api.deps import current_admin, current_vendor_id, get_thread_service
from app.schemas.common import MessageResponse
from app.schemas.qa import AdminQuestionsResponse, AnswerQuestionRequest, MarkReadResponse, VendorQuestionsResponse
from app.services.threads import ThreadService

router = APIRouter(prefix="/api", tags=["qa"])


@router.get("/vendor/questions", response_model=VendorQuestionsResponse)
async def list_vendor_questions(
    vendor_id: str = Depends(current_vendor_id),
    threads: ThreadService = Depends(get_thread_service),
):
    """Questions the vendor asked across its submissions, unanswered first."""
    questions = await threads.threads_for_vendor(vendor_id)
    return VendorQuestionsResponse(
        questions=questions,
        unread_count=sum(1 for q in questions if q.has_new_answer),
    )


@router.post("/vendor/mark-questions-read", response_model=MarkReadResponse)
async def mark_questions_read(
    vendor_id: str = Depends(current_vendor_id),
    threads: ThreadService = Depends(get_thread_service),
):
    return MarkReadResponse(updated=await threads.mark_read(vendor_id))


@router.get("/admin/questions", response_model=AdminQuestionsResponse)
async def list_admin_questions(
    _admin: str = Depends(current_admin),
    threads: ThreadService = Depends(get_thread_service),
):
    """All vendor questions with vendor name/email resolved."""
    questions = await threads.threads_for_admin()
    return AdminQuestionsResponse(
        questions=questions,
        unanswered_count=sum(1 for q in questions if q.answer is None),
    )


@router.post("/admin/answer-question", response_model=MessageResponse)
async def answer_question(
    payload: AnswerQuestionRequest,
    _admin: str = Depends(current_admin),
    threads: ThreadService = Depends(get_thread_service),
):
    """Answer one step's question (Bid Manager). Resets the vendor's viewed flag."""
    await threads.post_answer(payload.submission_id, payload.step, payload.answer)
    return MessageResponse(message="Answer submitted successfully")
