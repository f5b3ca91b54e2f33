from typing import Optional

from app.schemas.common import CamelModel


class ThreadVendor(CamelModel):
    name: str = "Unknown Vendor"
    email: str = ""


class QuestionThread(CamelModel):
    """One (submission, step) question with its optional answer. Derived, never stored."""
    id: str
    submission_id: str
    step: str
    step_title: str
    company_name: str = ""
    question: str
    answer: Optional[str] = None
    submitted_at: Optional[str] = None
    asked_at: Optional[str] = None
    answered_at: Optional[str] = None
    has_new_answer: bool = False
    status: Optional[str] = None
    vendor: Optional[ThreadVendor] = None


class VendorQuestionsResponse(CamelModel):
    success: bool = True
    questions: list[QuestionThread]
    unread_count: int


class AdminQuestionsResponse(CamelModel):
    success: bool = True
    questions: list[QuestionThread]
    unanswered_count: int


class AnswerQuestionRequest(CamelModel):
    submission_id: str
    step: str
    answer: str


class MarkReadResponse(CamelModel):
    success: bool = True
    message: str = "Questions marked as read"
    updated: int
