"""
Application Surface Interface
Adapter-private binding to one rendered application form.

Surfaces report what the page shows as plain snapshots and carry out
single low-level operations. Detection rules, pacing and the page loop
live in the application layer so they can run against any surface.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from domain.entities import Job
from domain.enums import NavigationControl


@dataclass
class ControlSnapshot:
    """One input/textarea/select element inside a field group"""
    tag: str  # input, textarea, select
    input_type: str = ""  # text, tel, email, number, date, radio, checkbox, file
    value: str = ""
    checked: bool = False
    # Visible label of a radio/checkbox option
    option_label: str = ""
    # Option texts of a <select>
    options: List[str] = field(default_factory=list)
    selected_text: str = ""
    required: bool = False
    aria_required: bool = False
    max_length: Optional[int] = None


@dataclass
class FieldGroupSnapshot:
    """Label plus controls of one form-field container"""
    label: str
    ref: str
    controls: List[ControlSnapshot] = field(default_factory=list)
    has_attached_file: bool = False
    is_message_field: bool = False


@dataclass
class SubmissionOutcome:
    """What the page shows after the submit click"""
    success: bool
    error_text: Optional[str] = None


class IApplicationSurface(ABC):
    """Browser binding for one platform's application form"""

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """True when a browser page is available"""
        pass

    @abstractmethod
    async def check_logged_in(self) -> bool:
        """True when the browser holds an authenticated platform session"""
        pass

    @abstractmethod
    async def open_entry_point(self, job: Job) -> bool:
        """
        Navigate to the job and trigger its application entry point

        Returns:
            False if the entry point (e.g. an Easy Apply button) is missing
        """
        pass

    @abstractmethod
    async def wait_for_form(self, timeout_ms: int) -> bool:
        """Wait until the application form renders; False on timeout"""
        pass

    @abstractmethod
    async def collect_field_groups(self) -> List[FieldGroupSnapshot]:
        """Snapshot every field group on the current page, in DOM order"""
        pass

    @abstractmethod
    async def probe_navigation(self) -> NavigationControl:
        """Classify the page's footer control (Submit > Review > Next)"""
        pass

    @abstractmethod
    async def click_navigation(self, control: NavigationControl) -> bool:
        pass

    @abstractmethod
    async def rewind_to_first_page(self, max_pages: int) -> int:
        """Go back to the first page; returns the number of Back clicks"""
        pass

    @abstractmethod
    async def clear_field(self, field_ref: str) -> bool:
        """Focus and empty a text control; False if it cannot be found"""
        pass

    @abstractmethod
    async def type_character(self, field_ref: str, char: str) -> None:
        pass

    @abstractmethod
    async def select_option(self, field_ref: str, option: str) -> bool:
        pass

    @abstractmethod
    async def choose_option(self, field_ref: str, option: str) -> bool:
        """Click the radio option whose label is `option`"""
        pass

    @abstractmethod
    async def set_checked(self, field_ref: str, option: Optional[str], checked: bool) -> bool:
        """Set a checkbox; `option` picks one box of a group, None means the first"""
        pass

    @abstractmethod
    async def message_field_ref(self) -> Optional[str]:
        """Locator of the free-text message/cover-letter field, if the form has one"""
        pass

    @abstractmethod
    async def read_outcome(self) -> SubmissionOutcome:
        pass

    @abstractmethod
    async def dismiss(self) -> None:
        """Close the application form, confirming any discard dialog. Never raises."""
        pass
