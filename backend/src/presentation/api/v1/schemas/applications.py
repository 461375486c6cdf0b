"""
Application Review Schemas
Request and response bodies for the prepare / review / submit flow
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from application.services.jobs.review import ApplicationReview
from domain.entities import ApplicationSession, Job
from domain.enums import JobPlatform


class JobIn(BaseModel):
    """Job to apply to"""

    platform: JobPlatform = Field(..., description="LinkedIn or Upwork")
    external_job_id: str = Field(..., min_length=1, examples=["4329656579"])
    title: str = Field(..., min_length=1, examples=["Backend Engineer"])
    company: str = Field("", examples=["Acme"])
    location: str = ""
    job_url: str = Field(..., min_length=1, examples=["https://www.linkedin.com/jobs/view/4329656579/"])
    description: Optional[str] = None
    connects_required: Optional[int] = Field(None, ge=0, description="Upwork: Connects the proposal costs")

    @field_validator('job_url')
    @classmethod
    def validate_job_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError('job_url must be an http(s) URL')
        return v

    def to_entity(self) -> Job:
        return Job(
            platform=self.platform,
            external_job_id=self.external_job_id,
            title=self.title,
            company=self.company,
            location=self.location,
            job_url=self.job_url,
            description=self.description,
            connects_required=self.connects_required,
        )


class PrepareApplicationRequest(BaseModel):
    """Open the application form and draft answers"""

    job: JobIn
    user_profile: str = Field(..., min_length=1, description="Applicant profile text given to the AI")
    job_description: str = Field("", description="Overrides job.description when set")


class ApproveApplicationRequest(BaseModel):
    """Reviewer edits committed with the approval"""

    application_message: Optional[str] = Field(None, description="Omit to keep the drafted message")
    answers: Dict[str, str] = Field(default_factory=dict, description="Answers keyed by question id")


class ReviewQuestionResponse(BaseModel):
    id: str
    question_text: str
    type: str
    options: List[str]
    is_required: bool
    answer: str
    page_number: int
    max_length: Optional[int] = None


class ApplicationReviewResponse(BaseModel):
    """What the reviewer sees before approving"""

    session_id: str
    status: str
    job_title: str
    company: str
    platform: str
    application_message: str
    questions: List[ReviewQuestionResponse]
    pre_filled: Dict[str, str]
    missing_required: List[str]
    matching_skills: List[str]
    addressed_requirements: List[str]
    confidence_score: int
    confidence_level: str
    total_pages: int
    error_message: Optional[str] = None

    @classmethod
    def from_session(cls, session: ApplicationSession) -> "ApplicationReviewResponse":
        review = ApplicationReview.from_session(session)
        return cls(
            session_id=review.session_id,
            status=review.status,
            job_title=review.job_title,
            company=review.company,
            platform=review.platform,
            application_message=review.application_message,
            questions=[ReviewQuestionResponse(**vars(q)) for q in review.questions],
            pre_filled=review.pre_filled,
            missing_required=[q.id for q in review.missing_required],
            matching_skills=review.matching_skills,
            addressed_requirements=review.addressed_requirements,
            confidence_score=review.confidence_score,
            confidence_level=review.confidence_level,
            total_pages=review.total_pages,
            error_message=review.error_message,
        )


class SessionStatusResponse(BaseModel):
    """Status after cancel or submit"""

    session_id: str
    status: str
    submitted: bool = False
    error_message: Optional[str] = None

    @classmethod
    def from_session(cls, session: ApplicationSession, submitted: bool = False) -> "SessionStatusResponse":
        return cls(
            session_id=session.session_id,
            status=session.status.value,
            submitted=submitted,
            error_message=session.error_message,
        )
