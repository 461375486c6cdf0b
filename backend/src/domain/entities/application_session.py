"""
Application Session Domain Entity
Aggregate root for one attempt to apply to one job
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from core.exceptions import InvalidTransitionException, SessionLockedException
from ..enums import ActionType, ApplicationSessionStatus, JobPlatform
from .job import Job
from .question import Question


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ApplicationAction:
    """Single immutable entry in the session's action log"""
    timestamp: datetime
    action_type: str
    description: str
    success: bool = True
    details: Optional[str] = None
    duration_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "action_type": self.action_type,
            "description": self.description,
            "success": self.success,
            "details": self.details,
            "duration_ms": self.duration_ms,
        }


@dataclass
class ApplicationSession:
    """
    One application attempt, from Prepare through a terminal status.

    Status changes go through transition_to(), which only follows the legal
    edges. Message and answers can be edited while Pending or ReadyForReview;
    after approval only the action log and terminal fields change, and a
    terminal session is fully closed.
    """

    platform: JobPlatform
    external_job_id: str
    job_title: str = ""
    company: str = ""
    job_url: str = ""

    session_id: str = field(default_factory=lambda: str(uuid4()))
    status: ApplicationSessionStatus = ApplicationSessionStatus.PENDING

    # Timestamps
    started_at: datetime = field(default_factory=utc_now)
    approved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Draft content
    application_message: str = ""
    questions: List[Question] = field(default_factory=list)

    # Form shape
    total_pages: int = 0
    current_page: int = 0

    # AI metadata
    matching_skills: List[str] = field(default_factory=list)
    addressed_requirements: List[str] = field(default_factory=list)
    confidence_score: int = 0

    error_message: Optional[str] = None
    _actions: List[ApplicationAction] = field(default_factory=list, repr=False)

    @classmethod
    def for_job(cls, job: Job) -> "ApplicationSession":
        return cls(
            platform=job.platform,
            external_job_id=job.external_job_id,
            job_title=job.title,
            company=job.company,
            job_url=job.job_url,
        )

    def to_job(self) -> Job:
        """The posting this session applies to, rebuilt from the session fields"""
        return Job(
            platform=self.platform,
            external_job_id=self.external_job_id,
            title=self.job_title,
            company=self.company,
            job_url=self.job_url,
        )

    @property
    def actions(self) -> List[ApplicationAction]:
        """Read-only copy of the action log"""
        return list(self._actions)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    # ---------------------------------------------------------------- status

    def transition_to(self, target: ApplicationSessionStatus) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidTransitionException(self.status.value, target.value)

        self.status = target
        now = utc_now()
        if target == ApplicationSessionStatus.APPROVED:
            self.approved_at = now
        if target.is_terminal:
            self.completed_at = now

    def fail(self, reason: str) -> None:
        """Record the reason, log it and move to Failed"""
        if not self.status.can_transition_to(ApplicationSessionStatus.FAILED):
            raise InvalidTransitionException(self.status.value, ApplicationSessionStatus.FAILED.value)
        self.error_message = reason
        self.log_action(ActionType.ERROR, reason, success=False)
        self.transition_to(ApplicationSessionStatus.FAILED)

    # ------------------------------------------------------------ action log

    def log_action(
        self,
        action_type: Union[ActionType, str],
        description: str,
        success: bool = True,
        details: Optional[str] = None,
        duration_ms: Optional[int] = None,
    ) -> ApplicationAction:
        if self.is_terminal:
            raise SessionLockedException(self.session_id, self.status.value, "action log")

        action = ApplicationAction(
            timestamp=utc_now(),
            action_type=action_type.value if isinstance(action_type, ActionType) else str(action_type),
            description=description,
            success=success,
            details=details,
            duration_ms=duration_ms,
        )
        self._actions.append(action)
        return action

    # ---------------------------------------------------------------- drafts

    def _ensure_editable(self, what: str) -> None:
        if not self.status.is_editable:
            raise SessionLockedException(self.session_id, self.status.value, what)

    def set_message(self, message: str) -> None:
        self._ensure_editable("application message")
        self.application_message = message or ""

    def set_answer(self, question_id: str, answer: str) -> bool:
        """
        Set the answer of one question.

        Returns False when the question is unknown or pre-filled; pre-filled
        values are never overwritten.
        """
        self._ensure_editable("answers")
        question = self.find_question(question_id)
        if question is None or question.is_pre_filled:
            return False
        question.answer = answer or ""
        return True

    def apply_ai_metadata(
        self,
        matching_skills: Optional[List[str]] = None,
        addressed_requirements: Optional[List[str]] = None,
        confidence_score: int = 0,
    ) -> None:
        self._ensure_editable("AI metadata")
        self.matching_skills = list(matching_skills or [])
        self.addressed_requirements = list(addressed_requirements or [])
        self.confidence_score = confidence_score

    def set_questions(self, questions: List[Question], total_pages: int) -> None:
        self._ensure_editable("questions")
        self.questions = list(questions)
        self.total_pages = total_pages

    # --------------------------------------------------------------- queries

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def questions_on_page(self, page_index: int) -> List[Question]:
        return [q for q in self.questions if q.page_index == page_index]

    def unanswered_questions(self, required_only: bool = False) -> List[Question]:
        return [
            q for q in self.questions
            if q.needs_answer and not q.is_answered and (q.is_required or not required_only)
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "platform": self.platform.value,
            "external_job_id": self.external_job_id,
            "job_title": self.job_title,
            "company": self.company,
            "job_url": self.job_url,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "application_message": self.application_message,
            "matching_skills": list(self.matching_skills),
            "addressed_requirements": list(self.addressed_requirements),
            "confidence_score": self.confidence_score,
            "total_pages": self.total_pages,
            "questions": [q.to_dict() for q in self.questions],
            "actions": [a.to_dict() for a in self._actions],
            "error_message": self.error_message,
        }
