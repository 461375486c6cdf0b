"""
Shared fixtures: in-memory application surface, browser and collaborators
"""
from typing import Dict, List, Optional, Tuple

import pytest

from application.services.ai import ApplicationMessageResult, IApplicationAIService
from application.services.audit import IAuditLogger
from application.services.jobs.answer_resolver import AnswerResolver
from application.services.jobs.form_inspector import FormInspector
from application.services.jobs.pacing_governor import PacingGovernor
from application.services.jobs.session_controller import SessionController
from application.services.platforms.registry import PlatformAdapterRegistry
from application.services.platforms.surface import (
    ControlSnapshot,
    FieldGroupSnapshot,
    IApplicationSurface,
    SubmissionOutcome,
)
from core.exceptions import AIServiceException
from domain.entities import ApplicationSession, Job, Question
from domain.enums import JobPlatform, NavigationControl
from domain.value_objects import ConfidenceScore
from infrastructure.platforms.base_adapter import PlaywrightPlatformAdapter


def text_group(label: str, ref: str, value: str = "", input_type: str = "text", required: bool = False) -> FieldGroupSnapshot:
    return FieldGroupSnapshot(
        label=label,
        ref=ref,
        controls=[ControlSnapshot(tag="input", input_type=input_type, value=value, required=required)],
    )


def radio_group(label: str, ref: str, options: List[str], checked: Optional[str] = None) -> FieldGroupSnapshot:
    return FieldGroupSnapshot(
        label=label,
        ref=ref,
        controls=[
            ControlSnapshot(tag="input", input_type="radio", option_label=o, checked=(o == checked))
            for o in options
        ],
    )


def select_group(label: str, ref: str, options: List[str], selected: str = "Select an option") -> FieldGroupSnapshot:
    return FieldGroupSnapshot(
        label=label,
        ref=ref,
        controls=[ControlSnapshot(tag="select", options=["Select an option"] + options, selected_text=selected)],
    )


class FakeSurface(IApplicationSurface):
    """
    Scripted form: one (groups, control) pair per page.

    Records every low-level operation so tests can assert on what the
    automation did to the page.
    """

    def __init__(
        self,
        pages: Optional[List[Tuple[List[FieldGroupSnapshot], NavigationControl]]] = None,
        entry_point: bool = True,
        form_renders: bool = True,
        outcome: Optional[SubmissionOutcome] = None,
        has_message_field: bool = False,
        ready: bool = True,
        logged_in: bool = True,
        connects_balance: Optional[int] = None,
    ):
        self.pages = pages or [([], NavigationControl.SUBMIT)]
        self.entry_point = entry_point
        self.form_renders = form_renders
        self.outcome = outcome or SubmissionOutcome(success=True)
        self.has_message_field = has_message_field
        self.ready = ready
        self.logged_in = logged_in
        self.connects_balance = connects_balance

        self.current_page = 0
        self.typed: Dict[str, str] = {}
        self.selected: Dict[str, str] = {}
        self.chosen: Dict[str, str] = {}
        self.checked: Dict[str, Tuple[Optional[str], bool]] = {}
        self.clicks: List[NavigationControl] = []
        self.dismiss_count = 0
        self.on_submit_click = None
        self.login_checks = 0
        # Job ids in the order their forms were opened, and whose form got the submit click
        self.opened_jobs: List[str] = []
        self.submitted_jobs: List[str] = []

    @property
    def is_ready(self) -> bool:
        return self.ready

    async def check_logged_in(self) -> bool:
        self.login_checks += 1
        return self.logged_in

    async def read_connects_balance(self) -> Optional[int]:
        return self.connects_balance

    @property
    def current_job(self) -> Optional[str]:
        return self.opened_jobs[-1] if self.opened_jobs else None

    async def open_entry_point(self, job: Job) -> bool:
        self.opened_jobs.append(job.external_job_id)
        self.current_page = 0
        return self.entry_point

    async def wait_for_form(self, timeout_ms: int) -> bool:
        return self.form_renders

    async def collect_field_groups(self) -> List[FieldGroupSnapshot]:
        return list(self.pages[self.current_page][0])

    async def probe_navigation(self) -> NavigationControl:
        return self.pages[self.current_page][1]

    async def click_navigation(self, control: NavigationControl) -> bool:
        self.clicks.append(control)
        if control == NavigationControl.SUBMIT:
            self.submitted_jobs.append(self.current_job)
            if self.on_submit_click is not None:
                self.on_submit_click()
            return True
        if self.current_page + 1 < len(self.pages):
            self.current_page += 1
        return True

    async def rewind_to_first_page(self, max_pages: int) -> int:
        clicks = self.current_page
        self.current_page = 0
        return clicks

    async def clear_field(self, field_ref: str) -> bool:
        self.typed[field_ref] = ""
        return True

    async def type_character(self, field_ref: str, char: str) -> None:
        self.typed[field_ref] += char

    async def select_option(self, field_ref: str, option: str) -> bool:
        self.selected[field_ref] = option
        return True

    async def choose_option(self, field_ref: str, option: str) -> bool:
        self.chosen[field_ref] = option
        return True

    async def set_checked(self, field_ref: str, option: Optional[str], checked: bool) -> bool:
        self.checked[field_ref] = (option, checked)
        return True

    async def message_field_ref(self) -> Optional[str]:
        return "message" if self.has_message_field else None

    async def read_outcome(self) -> SubmissionOutcome:
        return self.outcome

    async def dismiss(self) -> None:
        self.dismiss_count += 1


class FakeBrowser:
    """Stands in for BrowserSession"""

    def __init__(self, can_start: bool = True):
        self.can_start = can_start
        self.is_open = False
        self.page = None
        self.closed = False

    async def start(self) -> bool:
        self.is_open = self.can_start
        return self.can_start

    async def close(self) -> None:
        self.closed = True
        self.is_open = False


class FakeAdapter(PlaywrightPlatformAdapter):
    """Playwright adapter base running over the fakes"""

    def __init__(self, surface: FakeSurface, browser: Optional[FakeBrowser] = None, platform: JobPlatform = JobPlatform.LINKEDIN, **kwargs):
        self._platform = platform
        self.cancel_calls = 0
        super().__init__(browser=browser or FakeBrowser(), surface=surface, **kwargs)
        self.automation.confirmation_wait_ms = 0

    @property
    def platform(self) -> JobPlatform:
        return self._platform

    async def search_jobs(self, search_filter, progress=None, cancel=None):
        return []

    async def fetch_job_details(self, job_url):
        return None

    async def cancel_application(self, session: Optional[ApplicationSession] = None) -> None:
        self.cancel_calls += 1
        await super().cancel_application(session)


class FakeAIService(IApplicationAIService):
    """Canned AI replies; pass fail_* to raise AIServiceException"""

    def __init__(
        self,
        message: str = "I build reliable backend systems.",
        answers: Optional[Dict[str, str]] = None,
        confidence: int = 85,
        fail_message: bool = False,
        fail_answers: bool = False,
    ):
        self.message = message
        self.answers = answers or {}
        self.confidence = confidence
        self.fail_message = fail_message
        self.fail_answers = fail_answers
        self.answer_requests: List[List[Question]] = []

    async def generate_application_message(self, job_description, job_title, company, user_profile):
        if self.fail_message:
            raise AIServiceException("message model unavailable")
        return ApplicationMessageResult(
            message=self.message,
            matching_skills=["Python"],
            addressed_requirements=["Backend experience"],
            confidence=ConfidenceScore(self.confidence),
        )

    async def generate_question_answers(self, questions, user_profile, job_description):
        self.answer_requests.append(list(questions))
        if self.fail_answers:
            raise AIServiceException("answer model unavailable")
        return dict(self.answers)


class RecordingAuditLogger(IAuditLogger):
    def __init__(self):
        self.records: List[ApplicationSession] = []

    def record(self, session: ApplicationSession) -> bool:
        self.records.append(session)
        return True


def instant_governor() -> PacingGovernor:
    return PacingGovernor(
        min_action_ms=0,
        max_action_ms=0,
        hesitation_probability=0.0,
        hesitation_min_ms=0,
        hesitation_max_ms=0,
        keystroke_min_ms=0,
        keystroke_max_ms=0,
    )


@pytest.fixture
def governor():
    return instant_governor()


@pytest.fixture
def inspector():
    return FormInspector(min_label_length=3, max_pages=10)


@pytest.fixture
def job():
    return Job(
        platform=JobPlatform.LINKEDIN,
        external_job_id="4329656579",
        title="Backend Engineer",
        company="Acme",
        location="Remote",
        job_url="https://www.linkedin.com/jobs/view/4329656579/",
        description="Python, FastAPI and PostgreSQL experience required.",
    )


@pytest.fixture
def two_page_surface():
    """Page 1: name + phone (pre-filled) then Next; page 2: yes/no + select then Submit"""
    return FakeSurface(
        pages=[
            (
                [
                    text_group("Full name*", "group:0"),
                    text_group("Mobile phone number", "group:1", value="+1 555 0100", input_type="tel"),
                ],
                NavigationControl.NEXT,
            ),
            (
                [
                    radio_group("Are you authorized to work in the US?", "group:0", ["Yes", "No"]),
                    select_group("Years of Python experience", "group:1", ["0-2", "3-5", "6+"]),
                ],
                NavigationControl.SUBMIT,
            ),
        ],
        has_message_field=True,
    )


def make_controller(surface: FakeSurface, ai_service: Optional[FakeAIService] = None, **adapter_kwargs):
    adapter = FakeAdapter(surface, governor=instant_governor(), **adapter_kwargs)
    registry = PlatformAdapterRegistry()
    registry.register(adapter)
    audit = RecordingAuditLogger()
    controller = SessionController(
        registry=registry,
        answer_resolver=AnswerResolver(ai_service or FakeAIService()),
        audit_logger=audit,
    )
    return controller, adapter, audit
