"""
Session Controller
Owns the human-gated lifecycle of application sessions:
- Prepare through the platform adapter, then AI drafting
- Explicit human approval before anything is submitted
- Exactly one audit record per finished session
"""
from typing import Dict, Optional

from loguru import logger

from core.exceptions import InvalidTransitionException
from core.logging_config import job_context
from domain.entities import ApplicationSession, Job
from domain.enums import ActionType, ApplicationSessionStatus
from application.services.audit import IAuditLogger
from application.services.platforms.registry import PlatformAdapterRegistry
from .answer_resolver import AnswerResolver
from .cancellation import CancellationToken
from .progress import ProgressCallback, report_progress
from .review import ReviewDecision


class SessionController:
    """State machine driver for application sessions"""

    def __init__(
        self,
        registry: PlatformAdapterRegistry,
        answer_resolver: AnswerResolver,
        audit_logger: IAuditLogger,
    ):
        self.registry = registry
        self.answer_resolver = answer_resolver
        self.audit_logger = audit_logger

    async def prepare(
        self,
        job: Job,
        user_profile: str,
        job_description: str = "",
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ApplicationSession:
        """
        Detect the job's application form and draft answers for review

        Raises:
            PlatformNotSupportedException: no adapter for job.platform
            AdapterBusyException: the adapter is already running a flow
        """
        adapter = self.registry.get(job.platform)

        with job_context(job.platform.value, job.external_job_id):
            session = await adapter.prepare_application(job, progress, cancel)
            if session is None:
                session = ApplicationSession.for_job(job)
                session.fail("Browser not ready")

            # A cancel that lands after detection finished keeps the draft for review
            cancelled = cancel is not None and cancel.is_cancelled
            if cancelled and session.status == ApplicationSessionStatus.FAILED:
                await adapter.cancel_application(session)

            if session.status == ApplicationSessionStatus.READY_FOR_REVIEW:
                report_progress(progress, "Generating application message and answers...")
                await self.answer_resolver.resolve(session, user_profile, job_description or job.description or "")
                report_progress(progress, "Ready for review")

            if session.is_terminal:
                self._audit(session)
        return session

    def approve(
        self,
        session: ApplicationSession,
        message: Optional[str] = None,
        answers: Optional[Dict[str, str]] = None,
    ) -> ApplicationSession:
        """
        Commit the reviewer's edits and approve the session

        Args:
            message: Edited application message (None keeps the draft)
            answers: Edited answers keyed by question id; pre-filled
                questions are ignored
        """
        self._require(session, ApplicationSessionStatus.READY_FOR_REVIEW, ApplicationSessionStatus.APPROVED)

        edited = 0
        if message is not None and message != session.application_message:
            session.set_message(message)
            edited += 1
        for question_id, answer in (answers or {}).items():
            question = session.find_question(question_id)
            if question is None or question.answer == answer:
                continue
            if session.set_answer(question_id, answer):
                edited += 1
        if edited:
            session.log_action(ActionType.EDIT, f"Reviewer edited {edited} field(s)")

        missing = session.unanswered_questions(required_only=True)
        if missing:
            labels = ", ".join(q.question_text for q in missing)
            logger.warning(f"Session {session.session_id} approved with unanswered required questions: {labels}")
            session.log_action(
                ActionType.APPROVE,
                f"{len(missing)} required question(s) left unanswered",
                success=False,
                details=labels,
            )

        session.transition_to(ApplicationSessionStatus.APPROVED)
        session.log_action(ActionType.APPROVE, "Application approved by reviewer")
        logger.info(f"Session {session.session_id} approved")
        return session

    async def cancel(self, session: ApplicationSession) -> ApplicationSession:
        """Reject a drafted application and close its form"""
        self._require(session, ApplicationSessionStatus.READY_FOR_REVIEW, ApplicationSessionStatus.CANCELLED)

        adapter = self.registry.get(session.platform)
        await adapter.cancel_application(session)

        session.log_action(ActionType.CANCEL, "Application cancelled by reviewer")
        session.transition_to(ApplicationSessionStatus.CANCELLED)
        logger.info(f"Session {session.session_id} cancelled")
        self._audit(session)
        return session

    async def submit(
        self,
        session: ApplicationSession,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """Hand an Approved session to its adapter for submission"""
        if session.status != ApplicationSessionStatus.APPROVED:
            logger.warning(
                f"Submit rejected for session {session.session_id}: status is {session.status.value}"
            )
            return False

        adapter = self.registry.get(session.platform)
        with job_context(session.platform.value, session.external_job_id):
            try:
                submitted = await adapter.submit_application(session, progress, cancel)
            except Exception as e:
                logger.exception(f"Adapter raised during submit of session {session.session_id}")
                if not session.is_terminal:
                    self._force_fail(session, f"Submission error: {e}")
                submitted = False

            if not session.is_terminal:
                self._force_fail(session, "Submission ended without a result")
                submitted = False

            if cancel is not None and cancel.is_cancelled and session.status == ApplicationSessionStatus.FAILED:
                await adapter.cancel_application(session)

            self._audit(session)
        return submitted and session.status == ApplicationSessionStatus.SUBMITTED

    async def apply_decision(self, session: ApplicationSession, decision: ReviewDecision) -> ApplicationSession:
        """Dispatch a reviewer decision to approve or cancel"""
        if decision.approved:
            return self.approve(session, decision.message, decision.answers)
        return await self.cancel(session)

    # ---------------------------------------------------------------- helpers

    @staticmethod
    def _require(
        session: ApplicationSession,
        expected: ApplicationSessionStatus,
        target: ApplicationSessionStatus,
    ) -> None:
        if session.status != expected:
            raise InvalidTransitionException(session.status.value, target.value)

    @staticmethod
    def _force_fail(session: ApplicationSession, reason: str) -> None:
        """Fail a session the adapter left in a non-terminal state"""
        if session.status == ApplicationSessionStatus.APPROVED:
            session.transition_to(ApplicationSessionStatus.SUBMITTING)
        session.fail(reason)

    def _audit(self, session: ApplicationSession) -> None:
        try:
            self.audit_logger.record(session)
        except Exception as e:
            logger.error(f"Audit logging failed for session {session.session_id}: {e}")
