"""Domain Entities - Core business objects"""

from .job import Job, JobDetails, SearchFilter
from .question import Question
from .application_session import ApplicationAction, ApplicationSession
__all__ = [
    "Job",
    "JobDetails",
    "SearchFilter",
    "Question",
    "ApplicationAction",
    "ApplicationSession",
]
