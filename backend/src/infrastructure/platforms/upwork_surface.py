"""
Upwork proposal surface
Single-page proposal form: cover letter, bid and screening questions
"""
import re
from typing import Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from core.config import settings
from domain.enums import NavigationControl
from .playwright_surface import PlaywrightApplicationSurface


class UpworkProposalSurface(PlaywrightApplicationSurface):
    """Proposal form opened from an Upwork job page"""

    FORM_GROUP_SELECTOR = (
        "[data-test='bid-input'], "
        "[data-test='question'], .screening-question, .additional-question"
    )
    LABEL_SELECTOR = "label, legend, .question-title, h4, h5"
    FORM_READY_SELECTOR = "[data-test='cover-letter'], textarea[name='coverLetter'], .proposal-form"
    ENTRY_POINT_SELECTORS = (
        "button:has-text('Apply Now')",
        "button:has-text('Submit a Proposal')",
        "a:has-text('Apply Now')",
    )
    SUBMIT_SELECTORS = (
        "button:has-text('Submit proposal')",
        "button:has-text('Send for')",
        "button[type='submit']",
    )
    SUCCESS_SELECTOR = "[data-test='proposal-submitted'], .success-message, h1:has-text('submitted')"
    ERROR_SELECTOR = "[data-test='error-message'], .error-message, .alert-danger"
    DISMISS_SELECTOR = "[data-test='modal-close'], button[aria-label='Close'], .modal-close"
    MESSAGE_FIELD_SELECTOR = "[data-test='cover-letter'] textarea, textarea[name='coverLetter']"
    CONNECTS_BALANCE_SELECTOR = "[data-test='connects-balance'], .connects-balance, span:has-text('Connects')"

    HOME_URL = f"{settings.UPWORK_BASE_URL}/nx/find-work/"
    LOGIN_URL_MARKERS = ("/login", "/ab/account-security")
    AUTHENTICATED_URL_MARKERS = (
        "/nx/find-work",
        "/freelancers/~",
        "/ab/proposals",
        "/nx/search/jobs",
        "/messages",
    )
    SIGNED_IN_SELECTORS = (
        "[data-test='nav-user-avatar']",
        "[data-qa='user-avatar']",
        ".nav-avatar",
        ".up-avatar",
        ".nav-d-user-menu",
        "[data-cy='nav-user-menu']",
        ".air3-avatar",
    )
    SIGNED_OUT_SELECTORS = (
        "a[href*='/ab/account-security/login']",
        "a[data-qa='login']",
        "button:has-text('Log In')",
        "[data-test='login-link']",
    )

    async def read_connects_balance(self) -> Optional[int]:
        """Available Connects shown in the page header, None when not displayed"""
        if not self.is_ready:
            return None
        try:
            element = self.page.locator(self.CONNECTS_BALANCE_SELECTOR).first
            if await element.count() == 0:
                return None
            text = await element.inner_text()
        except PlaywrightError as e:
            logger.warning(f"Reading Connects balance failed: {e}")
            return None
        match = re.search(r"\d+", text or "")
        return int(match.group()) if match else None

    async def probe_navigation(self) -> NavigationControl:
        # Single page: the proposal form only ever offers Submit
        if await self._find_visible(self.SUBMIT_SELECTORS) is not None:
            return NavigationControl.SUBMIT
        return NavigationControl.NONE

    async def rewind_to_first_page(self, max_pages: int) -> int:
        return 0

    async def dismiss(self) -> None:
        if not self.is_ready:
            return
        await super().dismiss()
        try:
            await self.page.go_back()
        except PlaywrightError as e:
            logger.debug(f"Navigating back from proposal form failed: {e}")
