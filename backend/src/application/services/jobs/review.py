"""
Human review boundary: what a reviewer sees and what they decide.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from domain.entities import ApplicationSession
from domain.value_objects import ConfidenceScore


@dataclass
class ReviewQuestion:
    """Editable view of one non-pre-filled question"""
    id: str
    question_text: str
    type: str
    options: List[str]
    is_required: bool
    answer: str
    page_number: int
    max_length: Optional[int] = None

    @property
    def is_missing(self) -> bool:
        return self.is_required and not self.answer.strip()


@dataclass
class ApplicationReview:
    """Read-only context plus editable fields for one session"""
    session_id: str
    status: str
    job_title: str
    company: str
    platform: str
    application_message: str
    questions: List[ReviewQuestion]
    pre_filled: Dict[str, str]
    matching_skills: List[str]
    addressed_requirements: List[str]
    confidence_score: int
    confidence_level: str
    total_pages: int
    error_message: Optional[str] = None

    @classmethod
    def from_session(cls, session: ApplicationSession) -> "ApplicationReview":
        confidence = ConfidenceScore.from_raw(session.confidence_score)
        return cls(
            session_id=session.session_id,
            status=session.status.value,
            job_title=session.job_title,
            company=session.company,
            platform=session.platform.value,
            application_message=session.application_message,
            questions=[
                ReviewQuestion(
                    id=q.id,
                    question_text=q.question_text,
                    type=q.type.value,
                    options=list(q.options),
                    is_required=q.is_required,
                    answer=q.answer,
                    page_number=q.page_index + 1,
                    max_length=q.max_length,
                )
                for q in session.questions
                if not q.is_pre_filled
            ],
            pre_filled={
                q.question_text: q.pre_filled_value or ""
                for q in session.questions
                if q.is_pre_filled
            },
            matching_skills=list(session.matching_skills),
            addressed_requirements=list(session.addressed_requirements),
            confidence_score=confidence.value,
            confidence_level=confidence.level,
            total_pages=session.total_pages,
            error_message=session.error_message,
        )

    @property
    def missing_required(self) -> List[ReviewQuestion]:
        return [q for q in self.questions if q.is_missing]


@dataclass
class ReviewDecision:
    """Reviewer outcome: approve with edits, or cancel"""
    approved: bool
    message: Optional[str] = None
    answers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def approve(cls, message: Optional[str] = None, answers: Optional[Dict[str, str]] = None) -> "ReviewDecision":
        return cls(approved=True, message=message, answers=dict(answers or {}))

    @classmethod
    def cancel(cls) -> "ReviewDecision":
        return cls(approved=False)
