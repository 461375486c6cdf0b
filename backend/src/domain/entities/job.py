"""
Job Domain Entities
Job postings, detail pages and search filters
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from ..enums import JobPlatform


@dataclass(frozen=True)
class Job:
    """Job posting discovered on a platform - immutable"""

    platform: JobPlatform
    external_job_id: str  # unique per platform
    title: str
    company: str
    location: str = ""
    job_url: str = ""
    description: Optional[str] = None
    has_easy_apply: bool = False
    date_posted: Optional[datetime] = None
    # Upwork: Connects a proposal costs
    connects_required: Optional[int] = None


@dataclass
class JobDetails:
    """Details scraped from a job page"""

    description: str = ""
    recruiter_email: Optional[str] = None
    external_apply_url: Optional[str] = None
    has_easy_apply: bool = False

    # Upwork-specific
    hourly_rate_min: Optional[float] = None
    hourly_rate_max: Optional[float] = None
    fixed_price: Optional[float] = None
    proposals_count: Optional[int] = None
    required_skills: List[str] = field(default_factory=list)
    experience_level: Optional[str] = None
    connects_required: Optional[int] = None


@dataclass
class SearchFilter:
    """Job search criteria"""

    job_title: str
    experience_levels: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    remote_only: bool = False
    max_results: int = 50
