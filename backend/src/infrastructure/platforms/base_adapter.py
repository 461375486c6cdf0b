"""
Playwright platform adapter base
Browser lifecycle + the shared Prepare/Submit flow for one platform
"""
from typing import Optional

from loguru import logger

from application.services.jobs.cancellation import CancellationToken
from application.services.jobs.form_automation import FormAutomation
from application.services.jobs.form_inspector import FormInspector
from application.services.jobs.pacing_governor import PacingGovernor
from application.services.jobs.progress import ProgressCallback, report_progress
from application.services.platforms import IJobPlatformAdapter
from application.services.platforms.surface import IApplicationSurface
from domain.entities import ApplicationSession, Job
from domain.enums import ApplicationSessionStatus
from .browser_session import BrowserSession


class PlaywrightPlatformAdapter(IJobPlatformAdapter):
    """Adapter over one browser page; one Prepare/Submit/search flow at a time"""

    def __init__(
        self,
        browser: BrowserSession,
        surface: IApplicationSurface,
        governor: Optional[PacingGovernor] = None,
        inspector: Optional[FormInspector] = None,
    ):
        self.browser = browser
        self.surface = surface
        self.automation = FormAutomation(
            platform=self.platform,
            surface=surface,
            inspector=inspector,
            governor=governor,
        )
        self._logged_in = False

    @property
    def governor(self) -> PacingGovernor:
        return self.automation.governor

    @property
    def is_logged_in(self) -> bool:
        """Result of the last login check"""
        return self._logged_in

    @property
    def not_logged_in_reason(self) -> str:
        return f"Not logged in to {self.platform.value}"

    async def check_login_status(self) -> bool:
        if not self.browser.is_open:
            self._logged_in = False
            return False
        self._logged_in = await self.surface.check_logged_in()
        # Checking may navigate away from an open form
        self.automation.forget_form()
        if not self._logged_in:
            logger.warning(f"{self.platform.value}: browser session is not logged in")
        return self._logged_in

    async def _ensure_logged_in(self) -> bool:
        """Cached login flag; a negative result is re-checked once"""
        if self._logged_in:
            return True
        return await self.check_login_status()

    async def _preflight(self, job: Job) -> Optional[str]:
        """Platform checks before a form is opened; returns a refusal reason"""
        return None

    async def prepare_application(
        self,
        job: Job,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[ApplicationSession]:
        async with self.automation.exclusive():
            if not await self.browser.start():
                report_progress(progress, "Browser not ready")
                return None

            reason = None
            if not await self._ensure_logged_in():
                reason = self.not_logged_in_reason
            else:
                reason = await self._preflight(job)
            if reason is not None:
                report_progress(progress, reason)
                logger.warning(f"{self.platform.value}: not preparing {job.external_job_id}: {reason}")
                session = ApplicationSession.for_job(job)
                session.fail(reason)
                return session

            return await self.automation.prepare(job, progress, cancel)

    async def submit_application(
        self,
        session: ApplicationSession,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        if session.status != ApplicationSessionStatus.APPROVED:
            logger.warning(f"{self.platform.value}: session {session.session_id} is not approved, not submitting")
            return False

        async with self.automation.exclusive():
            reason = None
            if not self.browser.is_open:
                reason = "Browser not ready"
            elif not await self._ensure_logged_in():
                reason = self.not_logged_in_reason
            if reason is not None:
                session.transition_to(ApplicationSessionStatus.SUBMITTING)
                session.fail(reason)
                return False
            return await self.automation.submit(session, progress, cancel)

    async def cancel_application(self, session: Optional[ApplicationSession] = None) -> None:
        owner = self.automation.open_session_id
        if session is not None and owner is not None and owner != session.session_id:
            logger.debug(
                f"{self.platform.value}: open form belongs to session {owner}, "
                f"leaving it for {session.session_id}"
            )
            return
        try:
            await self.surface.dismiss()
        except Exception as e:
            logger.warning(f"{self.platform.value}: dismissing application form failed: {e}")
        self.automation.forget_form()

    async def close(self) -> None:
        self.automation.forget_form()
        self._logged_in = False
        await self.browser.close()
