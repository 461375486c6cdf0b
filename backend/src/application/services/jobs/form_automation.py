"""
Form Automation
Shared Prepare/Submit flow run by every platform adapter over its surface
"""
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from loguru import logger

from core.config import settings
from core.exceptions import (
    AdapterBusyException,
    FormRenderTimeoutException,
    NavigationException,
    OperationCancelledException,
)
from domain.entities import ApplicationSession, Job, Question
from domain.enums import (
    ActionType,
    ApplicationSessionStatus,
    JobPlatform,
    NavigationControl,
    QuestionType,
)
from application.services.platforms.surface import IApplicationSurface
from .cancellation import CancellationToken, pause
from .form_inspector import FormInspector, is_affirmative, is_negative
from .pacing_governor import PacingGovernor
from .progress import ProgressCallback, report_progress


def match_option(options: List[str], answer: str) -> Optional[str]:
    """Exact (case-insensitive) match first, then substring either way."""
    wanted = (answer or "").strip().lower()
    if not wanted:
        return None
    for option in options:
        if option.strip().lower() == wanted:
            return option
    for option in options:
        lowered = option.strip().lower()
        if lowered and (wanted in lowered or lowered in wanted):
            return option
    return None


def answer_polarity(answer: str) -> Optional[bool]:
    """True for yes-like answers, False for no-like answers, None otherwise."""
    words = (answer or "").strip().lower().replace(",", " ").replace(".", " ").split()
    if not words:
        return None
    if is_affirmative(words[0]):
        return True
    if is_negative(words[0]):
        return False
    return None


class FormAutomation:
    """
    Drives one application surface through Prepare and Submit.

    One instance belongs to one adapter and one browser page, so only a
    single flow may run at a time; a concurrent call raises
    AdapterBusyException before any session is created.

    The page holds at most one open form. open_session_id names the
    session whose form it is; submitting any other session first re-opens
    that session's form and checks it still asks the reviewed questions.
    """

    def __init__(
        self,
        platform: JobPlatform,
        surface: IApplicationSurface,
        inspector: Optional[FormInspector] = None,
        governor: Optional[PacingGovernor] = None,
        render_timeout_ms: Optional[int] = None,
        confirmation_wait_ms: Optional[int] = None,
    ):
        self.platform = platform
        self.surface = surface
        self.inspector = inspector or FormInspector()
        self.governor = governor or PacingGovernor.from_settings()
        self.render_timeout_ms = render_timeout_ms if render_timeout_ms is not None else settings.FORM_RENDER_TIMEOUT_MS
        self.confirmation_wait_ms = (
            confirmation_wait_ms if confirmation_wait_ms is not None else settings.SUBMIT_CONFIRMATION_WAIT_MS
        )
        self._busy = False
        self.open_session_id: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return self._busy

    @asynccontextmanager
    async def exclusive(self):
        if self._busy:
            raise AdapterBusyException(self.platform.value)
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def holds_form(self, session_id: str) -> bool:
        return self.open_session_id == session_id

    def forget_form(self) -> None:
        """The page left the open form (dismissed, submitted or navigated away)"""
        self.open_session_id = None

    # ---------------------------------------------------------------- prepare

    async def prepare(
        self,
        job: Job,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ApplicationSession:
        """Open the form, detect every page without filling, rewind to page one."""
        session = ApplicationSession.for_job(job)
        self.forget_form()
        logger.info(f"Preparing {job.platform.value} application {session.session_id} for '{job.title}' at {job.company}")

        try:
            report_progress(progress, f"Opening job page: {job.title}")
            session.log_action(ActionType.NAVIGATE, f"Opening {job.job_url}")
            if not await self.surface.open_entry_point(job):
                raise NavigationException("Application entry point not found")

            report_progress(progress, "Waiting for application form...")
            if not await self.surface.wait_for_form(self.render_timeout_ms):
                raise FormRenderTimeoutException(self.render_timeout_ms)
            session.log_action(ActionType.OPEN_FORM, "Application form opened")
            await self.governor.pause(cancel, label="form opened")

            async def on_page(page_index: int, questions: List[Question], control: NavigationControl) -> None:
                session.log_action(
                    ActionType.DETECT,
                    f"Page {page_index + 1}: detected {len(questions)} question(s)",
                    details=f"navigation={control.value}",
                )
                report_progress(progress, f"Analyzing form page {page_index + 1}...")
                if control.advances:
                    session.log_action(ActionType.NEXT_PAGE, f"Advancing past page {page_index + 1} ({control.value})")

            result = await self.inspector.traverse(self.surface, self.governor, cancel, on_page)
            session.set_questions(result.questions, result.total_pages)

            if result.total_pages > 1:
                clicks = await self.surface.rewind_to_first_page(self.inspector.max_pages)
                session.log_action(ActionType.REWIND, f"Returned to first page ({clicks} back click(s))")
            session.current_page = 0

            session.transition_to(ApplicationSessionStatus.READY_FOR_REVIEW)
            self.open_session_id = session.session_id
            report_progress(progress, f"Found {len(session.questions)} question(s) across {session.total_pages} page(s)")
            logger.info(
                f"Session {session.session_id} ready for review: "
                f"{len(session.questions)} questions, {session.total_pages} pages"
            )
        except NavigationException as e:
            self._fail(session, str(e))
        except OperationCancelledException:
            logger.info(f"Preparation of session {session.session_id} cancelled")
            self._fail(session, "Preparation cancelled")
        except Exception as e:
            logger.exception(f"Preparation of session {session.session_id} failed")
            self._fail(session, f"Preparation error: {e}")

        return session

    # ----------------------------------------------------------------- submit

    async def submit(
        self,
        session: ApplicationSession,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> bool:
        """Fill every answered question page by page, click Submit, check the outcome."""
        if session.status != ApplicationSessionStatus.APPROVED:
            logger.warning(
                f"Refusing to submit session {session.session_id} in status {session.status.value}"
            )
            return False

        session.transition_to(ApplicationSessionStatus.SUBMITTING)
        message_filled = False

        try:
            if not self.holds_form(session.session_id):
                await self._reopen(session, progress, cancel)

            page_index = 0
            while True:
                self._check(cancel)
                session.current_page = page_index
                report_progress(progress, f"Filling page {page_index + 1}...")

                for question in session.questions_on_page(page_index):
                    if not question.should_fill:
                        continue
                    await self.governor.pause(cancel, label=f"fill {question.question_text[:30]}")
                    started = time.monotonic()
                    filled = await self.fill_question(question, cancel)
                    session.log_action(
                        ActionType.FILL,
                        question.question_text,
                        success=filled,
                        details=question.type.value,
                        duration_ms=int((time.monotonic() - started) * 1000),
                    )

                if not message_filled and session.application_message:
                    message_filled = await self._fill_message(session, cancel)

                control = await self.surface.probe_navigation()

                if control == NavigationControl.SUBMIT:
                    await self.governor.pause(cancel, label="before submit")
                    self._check(cancel)
                    break

                if control.advances and page_index + 1 < self.inspector.max_pages:
                    await self.governor.pause(cancel, label="next page")
                    if not await self.surface.click_navigation(control):
                        self._fail(session, f"Could not click {control.value} button")
                        return False
                    session.log_action(ActionType.NEXT_PAGE, f"Advanced past page {page_index + 1} ({control.value})")
                    page_index += 1
                    continue

                self._fail(session, "Submit button not found")
                return False
        except NavigationException as e:
            self._fail(session, str(e))
            return False
        except OperationCancelledException:
            logger.info(f"Submission of session {session.session_id} cancelled before submit click")
            self._fail(session, "Submission cancelled")
            return False
        except Exception as e:
            logger.exception(f"Filling session {session.session_id} failed")
            self._fail(session, f"Submission error: {e}")
            return False

        # Past this point the click is irreversible and cancellation is ignored
        self.forget_form()
        return await self._click_submit_and_confirm(session, progress)

    async def _reopen(
        self,
        session: ApplicationSession,
        progress: Optional[ProgressCallback],
        cancel: Optional[CancellationToken],
    ) -> None:
        """
        Open the session's form again after the page moved on to another job.

        Every fillable reviewed question must be found again on the same page
        under the same label; its field_ref is rebound to the fresh form.

        Raises:
            NavigationException: entry point missing, form not rendered, or
                the form no longer asks a reviewed question
        """
        logger.info(f"Form of session {session.session_id} is not open, re-opening {session.job_url}")
        report_progress(progress, f"Re-opening application form: {session.job_title}")
        session.log_action(ActionType.NAVIGATE, f"Re-opening {session.job_url}")
        self.forget_form()

        if not await self.surface.open_entry_point(session.to_job()):
            raise NavigationException("Application entry point not found")
        if not await self.surface.wait_for_form(self.render_timeout_ms):
            raise FormRenderTimeoutException(self.render_timeout_ms)
        session.log_action(ActionType.OPEN_FORM, "Application form re-opened")
        await self.governor.pause(cancel, label="form re-opened")

        result = await self.inspector.traverse(self.surface, self.governor, cancel)
        if result.total_pages > 1:
            await self.surface.rewind_to_first_page(self.inspector.max_pages)

        detected = {(q.page_index, q.question_text.lower()): q for q in result.questions}
        for question in session.questions:
            if not question.should_fill:
                continue
            fresh = detected.get((question.page_index, question.question_text.lower()))
            if fresh is None:
                raise NavigationException(
                    f"Application form changed since review: '{question.question_text}' not found"
                )
            question.field_ref = fresh.field_ref

        self.open_session_id = session.session_id

    async def _click_submit_and_confirm(
        self,
        session: ApplicationSession,
        progress: Optional[ProgressCallback],
    ) -> bool:
        try:
            report_progress(progress, "Submitting application...")
            clicked = await self.surface.click_navigation(NavigationControl.SUBMIT)
            session.log_action(ActionType.SUBMIT, "Clicked submit", success=clicked)
            if not clicked:
                self._fail(session, "Could not click submit button")
                return False

            await pause(self.confirmation_wait_ms / 1000.0)
            outcome = await self.surface.read_outcome()
        except Exception as e:
            logger.exception(f"Submit click for session {session.session_id} failed")
            self._fail(session, f"Submission error: {e}")
            return False

        if outcome.success:
            session.transition_to(ApplicationSessionStatus.SUBMITTED)
            report_progress(progress, "Application submitted successfully")
            logger.info(f"Session {session.session_id} submitted")
            return True

        if outcome.error_text:
            self._fail(session, f"Form validation error: {outcome.error_text}")
        else:
            self._fail(session, "Submission could not be confirmed")
        return False

    # ------------------------------------------------------------------ fills

    async def fill_question(self, question: Question, cancel: Optional[CancellationToken] = None) -> bool:
        """Write one answer with the operation its type calls for."""
        ref = question.field_ref or ""
        answer = question.answer.strip()

        if question.type.is_text_entry:
            text = question.answer
            if question.max_length:
                text = text[:question.max_length]
            return await self._type_into(ref, text, cancel)

        if question.type == QuestionType.SELECT:
            option = match_option(question.options, answer) or answer
            return await self.surface.select_option(ref, option)

        if question.type == QuestionType.YES_NO:
            polarity = answer_polarity(answer)
            option = None
            if polarity is not None:
                check = is_affirmative if polarity else is_negative
                option = next((o for o in question.options if check(o)), None)
            option = option or match_option(question.options, answer)
            if option is None:
                logger.warning(f"No yes/no option matches '{answer}' for '{question.question_text}'")
                return False
            return await self.surface.choose_option(ref, option)

        if question.type == QuestionType.RADIO:
            option = match_option(question.options, answer)
            if option is None:
                logger.warning(f"No radio option matches '{answer}' for '{question.question_text}'")
                return False
            return await self.surface.choose_option(ref, option)

        if question.type == QuestionType.CHECKBOX:
            option = match_option(question.options, answer) if question.options else None
            if option is not None:
                return await self.surface.set_checked(ref, option, True)
            polarity = answer_polarity(answer)
            if polarity is None:
                return False
            return await self.surface.set_checked(ref, None, polarity)

        if question.type == QuestionType.FILE_UPLOAD:
            # Resumes are expected to be pre-attached on the platform profile
            logger.debug(f"Skipping file upload '{question.question_text}'")
            return True

        return False

    async def _fill_message(self, session: ApplicationSession, cancel: Optional[CancellationToken]) -> bool:
        ref = await self.surface.message_field_ref()
        if ref is None:
            return False
        await self.governor.pause(cancel, label="application message")
        started = time.monotonic()
        filled = await self._type_into(ref, session.application_message, cancel)
        session.log_action(
            ActionType.FILL_MESSAGE,
            "Application message",
            success=filled,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return filled

    async def _type_into(self, ref: str, text: str, cancel: Optional[CancellationToken]) -> bool:
        if not await self.surface.clear_field(ref):
            return False
        await self.governor.type_text(
            text,
            lambda char: self.surface.type_character(ref, char),
            cancel,
        )
        return True

    # ---------------------------------------------------------------- helpers

    @staticmethod
    def _check(cancel: Optional[CancellationToken]) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()

    @staticmethod
    def _fail(session: ApplicationSession, reason: str) -> None:
        if session.is_terminal:
            return
        logger.warning(f"Session {session.session_id} failed: {reason}")
        session.fail(reason)
