"""
Domain Enums
Business enumerations for application sessions
"""
from enum import Enum
from typing import Dict, FrozenSet


class JobPlatform(str, Enum):
    """Hiring platforms with a registered automation adapter"""
    LINKEDIN = "linkedin"
    UPWORK = "upwork"


class ApplicationSessionStatus(str, Enum):
    """Lifecycle of one application attempt"""
    PENDING = "pending"
    READY_FOR_REVIEW = "ready_for_review"
    APPROVED = "approved"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_editable(self) -> bool:
        """Message and answers may change only before approval"""
        return self in (ApplicationSessionStatus.PENDING, ApplicationSessionStatus.READY_FOR_REVIEW)

    def can_transition_to(self, target: "ApplicationSessionStatus") -> bool:
        return target in LEGAL_TRANSITIONS.get(self, frozenset())


TERMINAL_STATUSES: FrozenSet[ApplicationSessionStatus] = frozenset({
    ApplicationSessionStatus.SUBMITTED,
    ApplicationSessionStatus.FAILED,
    ApplicationSessionStatus.CANCELLED,
})

LEGAL_TRANSITIONS: Dict[ApplicationSessionStatus, FrozenSet[ApplicationSessionStatus]] = {
    ApplicationSessionStatus.PENDING: frozenset({
        ApplicationSessionStatus.READY_FOR_REVIEW,
        ApplicationSessionStatus.FAILED,
    }),
    ApplicationSessionStatus.READY_FOR_REVIEW: frozenset({
        ApplicationSessionStatus.APPROVED,
        ApplicationSessionStatus.CANCELLED,
    }),
    ApplicationSessionStatus.APPROVED: frozenset({
        ApplicationSessionStatus.SUBMITTING,
    }),
    ApplicationSessionStatus.SUBMITTING: frozenset({
        ApplicationSessionStatus.SUBMITTED,
        ApplicationSessionStatus.FAILED,
    }),
}


class QuestionType(str, Enum):
    """Shape of a detected form control"""
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    NUMBER = "number"
    YES_NO = "yes_no"
    PHONE = "phone"
    EMAIL = "email"
    DATE = "date"
    FILE_UPLOAD = "file_upload"
    UNKNOWN = "unknown"

    @property
    def is_text_entry(self) -> bool:
        return self in (
            QuestionType.TEXT,
            QuestionType.TEXTAREA,
            QuestionType.NUMBER,
            QuestionType.PHONE,
            QuestionType.EMAIL,
            QuestionType.DATE,
        )


class NavigationControl(str, Enum):
    """Form footer control visible on the current page"""
    SUBMIT = "submit"
    REVIEW = "review"
    NEXT = "next"
    NONE = "none"

    @property
    def advances(self) -> bool:
        return self in (NavigationControl.NEXT, NavigationControl.REVIEW)


class ActionType(str, Enum):
    """Kinds of entries in a session's action log"""
    NAVIGATE = "Navigate"
    OPEN_FORM = "OpenForm"
    DETECT = "Detect"
    NEXT_PAGE = "NextPage"
    REWIND = "Rewind"
    AI_MESSAGE = "AIMessage"
    AI_ANSWERS = "AIAnswers"
    EDIT = "Edit"
    APPROVE = "Approve"
    FILL = "Fill"
    FILL_MESSAGE = "FillMessage"
    SUBMIT = "Submit"
    CANCEL = "Cancel"
    ERROR = "Error"
