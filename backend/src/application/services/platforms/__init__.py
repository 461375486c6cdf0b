"""
Job Platform Adapter Interface
One implementation per supported hiring site
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from domain.entities import ApplicationSession, Job, JobDetails, SearchFilter
from domain.enums import JobPlatform
from application.services.jobs.cancellation import CancellationToken
from application.services.jobs.progress import ProgressCallback


class IJobPlatformAdapter(ABC):
    """Automation contract for one hiring platform"""

    @property
    @abstractmethod
    def platform(self) -> JobPlatform:
        pass

    @abstractmethod
    async def search_jobs(
        self,
        search_filter: SearchFilter,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> List[Job]:
        """
        Search the platform for jobs matching the filter

        Args:
            search_filter: Title, locations, experience levels, remote flag
            progress: Fire-and-forget status callback
            cancel: Cooperative cancellation token

        Returns:
            Jobs found, at most search_filter.max_results
        """
        pass

    @abstractmethod
    async def fetch_job_details(self, job_url: str) -> Optional[JobDetails]:
        """Scrape a job page; None on any navigation or parse failure"""
        pass

    @abstractmethod
    async def prepare_application(
        self,
        job: Job,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[ApplicationSession]:
        """
        Open the application form and detect every question without filling

        Returns:
            ReadyForReview session on success, Failed session with a reason
            when not logged in, refused by a platform check (e.g. Upwork
            Connects) or the form cannot be opened, None when no browser is
            available
        """
        pass

    @abstractmethod
    async def submit_application(
        self,
        session: ApplicationSession,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """
        Fill and submit an Approved session

        Returns:
            True only when a success marker is detected after the submit click.
            Sessions that are not Approved are left untouched and yield False.
        """
        pass

    @abstractmethod
    async def check_login_status(self) -> bool:
        """
        Check whether the browser holds an authenticated platform session

        Prepare, Submit and scraping refuse to run while this is False.
        """
        pass

    @abstractmethod
    async def cancel_application(self, session: Optional[ApplicationSession] = None) -> None:
        """
        Dismiss the open application form. Idempotent, never raises.

        With a session, the form is left alone when it belongs to another
        session.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the browser surface"""
        pass
