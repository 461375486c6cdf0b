"""
Playwright Application Surface
Shared Playwright implementation of IApplicationSurface; platforms supply selectors
"""
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlsplit

from loguru import logger
from playwright.async_api import (
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from application.services.platforms.surface import (
    ControlSnapshot,
    FieldGroupSnapshot,
    IApplicationSurface,
    SubmissionOutcome,
)
from domain.entities import Job
from domain.enums import NavigationControl
from application.services.jobs.form_inspector import classify_navigation
from .browser_session import BrowserSession


MESSAGE_REF = "message"
GROUP_REF_PREFIX = "group:"

TEXT_CONTROL_SELECTOR = (
    "input:not([type='hidden']):not([type='radio']):not([type='checkbox']):not([type='file']), textarea"
)

# Visible text or aria-label of each footer button
BUTTON_TEXTS_JS = """
(buttons) => buttons
    .filter((b) => b.offsetParent !== null)
    .map((b) => (b.getAttribute('aria-label') || b.innerText || '').trim())
"""

# One evaluate per page: label + raw control state of every field group
COLLECT_GROUPS_JS = """
(args) => Array.from(document.querySelectorAll(args.groupSelector)).map((el) => {
    const labelEl = el.querySelector(args.labelSelector) || el.querySelector('legend');
    const optionLabel = (c) => {
        const lab = (c.labels && c.labels.length) ? c.labels[0].innerText
            : (c.parentElement ? c.parentElement.innerText : '');
        return (lab || '').trim();
    };
    const controls = Array.from(el.querySelectorAll('input, textarea, select'))
        .filter((c) => (c.getAttribute('type') || '').toLowerCase() !== 'hidden')
        .map((c) => {
            const tag = c.tagName.toLowerCase();
            const type = tag === 'input' ? (c.getAttribute('type') || 'text').toLowerCase() : '';
            const choice = type === 'radio' || type === 'checkbox';
            return {
                tag: tag,
                type: type,
                value: (tag === 'select' || choice || type === 'file') ? '' : (c.value || ''),
                checked: !!c.checked,
                optionLabel: choice ? optionLabel(c) : '',
                options: tag === 'select' ? Array.from(c.options).map((o) => o.text.trim()) : [],
                selectedText: (tag === 'select' && c.selectedIndex >= 0) ? c.options[c.selectedIndex].text.trim() : '',
                required: !!c.required,
                ariaRequired: c.getAttribute('aria-required') === 'true',
                maxLength: (c.maxLength && c.maxLength > 0) ? c.maxLength : null,
            };
        });
    return {
        label: labelEl ? labelEl.innerText.trim() : '',
        controls: controls,
        hasFile: args.attachedFileSelector ? !!el.querySelector(args.attachedFileSelector) : false,
        isMessage: args.messageSelector
            ? (el.matches(args.messageSelector) || !!el.querySelector(args.messageSelector))
            : false,
    };
})
"""

OPTION_LABEL_JS = (
    "el => ((el.labels && el.labels.length) ? el.labels[0].innerText "
    ": (el.parentElement ? el.parentElement.innerText : '')) || ''"
)


class PlaywrightApplicationSurface(IApplicationSurface):
    """
    Playwright binding over one page.

    Field refs are "group:<n>", the position of the group among the
    current page's FORM_GROUP_SELECTOR matches, or "message" for the
    free-text message field.
    """

    FORM_GROUP_SELECTOR = ""
    LABEL_SELECTOR = "label"
    FORM_READY_SELECTOR = ""
    ENTRY_POINT_SELECTORS: Sequence[str] = ()
    SUBMIT_SELECTORS: Sequence[str] = ()
    REVIEW_SELECTORS: Sequence[str] = ()
    NEXT_SELECTORS: Sequence[str] = ()
    BACK_SELECTOR = ""
    SUCCESS_SELECTOR = ""
    ERROR_SELECTOR = ""
    DISMISS_SELECTOR = ""
    DISCARD_SELECTOR = ""
    MESSAGE_FIELD_SELECTOR = ""
    FOOTER_BUTTON_SELECTOR = ""
    ATTACHED_FILE_SELECTOR = ""

    # Login detection
    HOME_URL = ""
    LOGIN_URL_MARKERS: Sequence[str] = ("/login",)
    AUTHENTICATED_URL_MARKERS: Sequence[str] = ()
    SIGNED_IN_SELECTORS: Sequence[str] = ()
    SIGNED_OUT_SELECTORS: Sequence[str] = ()

    def __init__(self, browser: BrowserSession):
        self.browser = browser

    @property
    def page(self) -> Optional[Page]:
        return self.browser.page

    @property
    def is_ready(self) -> bool:
        return self.browser.is_open

    async def check_logged_in(self) -> bool:
        """
        Look for signed-in markers on the current page.

        A blank or foreign page is first replaced by HOME_URL. Login and
        checkpoint URLs, or any visible sign-in link, mean logged out.
        """
        if not self.is_ready:
            return False
        try:
            if self.HOME_URL and not self._on_platform(self.page.url):
                await self.page.goto(self.HOME_URL, wait_until="domcontentloaded")
                await self.page.wait_for_timeout(1000)

            url = self.page.url
            if any(marker in url for marker in self.LOGIN_URL_MARKERS):
                return False
            for selector in self.SIGNED_OUT_SELECTORS:
                if await self.page.locator(selector).count() > 0:
                    return False
            for selector in self.SIGNED_IN_SELECTORS:
                if await self.page.locator(selector).count() > 0:
                    return True
            return any(marker in url for marker in self.AUTHENTICATED_URL_MARKERS)
        except PlaywrightError as e:
            logger.warning(f"Login check failed: {e}")
            return False

    def _on_platform(self, url: str) -> bool:
        host = urlsplit(self.HOME_URL).netloc
        return bool(host) and urlsplit(url or "").netloc == host

    # ------------------------------------------------------------ navigation

    async def open_entry_point(self, job: Job) -> bool:
        await self.page.goto(job.job_url, wait_until="domcontentloaded")
        await self.page.wait_for_timeout(2000)

        button = await self._find_visible(self.ENTRY_POINT_SELECTORS)
        if button is None:
            logger.warning(f"No application entry point on {job.job_url}")
            return False
        await button.scroll_into_view_if_needed()
        await button.click()
        return True

    async def wait_for_form(self, timeout_ms: int) -> bool:
        try:
            await self.page.wait_for_selector(self.FORM_READY_SELECTOR, timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    async def collect_field_groups(self) -> List[FieldGroupSnapshot]:
        raw_groups: List[Dict[str, Any]] = await self.page.evaluate(
            COLLECT_GROUPS_JS,
            {
                "groupSelector": self.FORM_GROUP_SELECTOR,
                "labelSelector": self.LABEL_SELECTOR,
                "attachedFileSelector": self.ATTACHED_FILE_SELECTOR,
                "messageSelector": self.MESSAGE_FIELD_SELECTOR,
            },
        )
        return [self._to_snapshot(index, raw) for index, raw in enumerate(raw_groups)]

    @staticmethod
    def _to_snapshot(index: int, raw: Dict[str, Any]) -> FieldGroupSnapshot:
        controls = [
            ControlSnapshot(
                tag=c.get("tag", ""),
                input_type=c.get("type", ""),
                value=c.get("value") or "",
                checked=bool(c.get("checked")),
                option_label=c.get("optionLabel") or "",
                options=list(c.get("options") or []),
                selected_text=c.get("selectedText") or "",
                required=bool(c.get("required")),
                aria_required=bool(c.get("ariaRequired")),
                max_length=c.get("maxLength"),
            )
            for c in raw.get("controls", [])
        ]
        return FieldGroupSnapshot(
            label=raw.get("label") or "",
            ref=f"{GROUP_REF_PREFIX}{index}",
            controls=controls,
            has_attached_file=bool(raw.get("hasFile")),
            is_message_field=bool(raw.get("isMessage")),
        )

    async def probe_navigation(self) -> NavigationControl:
        for control, selectors in self._navigation_selectors():
            if await self._find_visible(selectors) is not None:
                return control
        return await self._classify_footer_buttons()

    async def click_navigation(self, control: NavigationControl) -> bool:
        selectors = dict(self._navigation_selectors()).get(control, ())
        button = await self._find_visible(selectors)
        if button is None:
            button = await self._footer_button_for(control)
        if button is None:
            return False
        try:
            await button.scroll_into_view_if_needed()
            await button.click()
            await self.page.wait_for_timeout(800)
            return True
        except PlaywrightError as e:
            logger.warning(f"Click on {control.value} failed: {e}")
            return False

    def _navigation_selectors(self):
        # Order matters: Submit beats Review beats Next
        return [
            (NavigationControl.SUBMIT, self.SUBMIT_SELECTORS),
            (NavigationControl.REVIEW, self.REVIEW_SELECTORS),
            (NavigationControl.NEXT, self.NEXT_SELECTORS),
        ]

    async def _footer_texts(self) -> List[str]:
        if not self.FOOTER_BUTTON_SELECTOR:
            return []
        try:
            return await self.page.eval_on_selector_all(self.FOOTER_BUTTON_SELECTOR, BUTTON_TEXTS_JS)
        except PlaywrightError:
            return []

    async def _classify_footer_buttons(self) -> NavigationControl:
        # Selectors missed; fall back to the button wording
        texts = await self._footer_texts()
        control = classify_navigation(texts)
        if control != NavigationControl.NONE:
            logger.debug(f"Navigation resolved from button text: {control.value}")
        return control

    async def _footer_button_for(self, control: NavigationControl):
        if not self.FOOTER_BUTTON_SELECTOR:
            return None
        buttons = self.page.locator(self.FOOTER_BUTTON_SELECTOR)
        for i in range(await buttons.count()):
            button = buttons.nth(i)
            try:
                if not await button.is_visible():
                    continue
                text = await button.get_attribute("aria-label") or await button.inner_text()
            except PlaywrightError:
                continue
            if classify_navigation([text]) == control:
                return button
        return None

    async def rewind_to_first_page(self, max_pages: int) -> int:
        if not self.BACK_SELECTOR:
            return 0
        clicks = 0
        for _ in range(max_pages):
            back = await self._find_visible([self.BACK_SELECTOR])
            if back is None:
                break
            await back.click()
            clicks += 1
            await self.page.wait_for_timeout(800)
        return clicks

    # ----------------------------------------------------------------- fills

    def _locate(self, field_ref: str) -> Optional[Locator]:
        if field_ref == MESSAGE_REF:
            return self.page.locator(self.MESSAGE_FIELD_SELECTOR).first
        if field_ref.startswith(GROUP_REF_PREFIX):
            index = int(field_ref[len(GROUP_REF_PREFIX):])
            return self.page.locator(self.FORM_GROUP_SELECTOR).nth(index)
        return None

    async def clear_field(self, field_ref: str) -> bool:
        target = self._locate(field_ref)
        if target is None:
            return False
        control = target if field_ref == MESSAGE_REF else target.locator(TEXT_CONTROL_SELECTOR).first
        try:
            if await control.count() == 0:
                return False
            await control.click()
            await control.fill("")
            return True
        except PlaywrightError as e:
            logger.warning(f"Could not clear {field_ref}: {e}")
            return False

    async def type_character(self, field_ref: str, char: str) -> None:
        # clear_field left the control focused
        await self.page.keyboard.type(char)

    async def select_option(self, field_ref: str, option: str) -> bool:
        group = self._locate(field_ref)
        if group is None:
            return False
        select = group.locator("select").first
        try:
            await select.select_option(label=option)
            return True
        except PlaywrightError:
            try:
                await select.select_option(value=option)
                return True
            except PlaywrightError as e:
                logger.warning(f"Option '{option}' not selectable in {field_ref}: {e}")
                return False

    async def choose_option(self, field_ref: str, option: str) -> bool:
        group = self._locate(field_ref)
        if group is None:
            return False
        radio = await self._find_choice(group.locator("input[type='radio']"), option)
        if radio is None:
            return False
        try:
            await radio.check(force=True)
            return True
        except PlaywrightError as e:
            logger.warning(f"Could not choose '{option}' in {field_ref}: {e}")
            return False

    async def set_checked(self, field_ref: str, option: Optional[str], checked: bool) -> bool:
        group = self._locate(field_ref)
        if group is None:
            return False
        boxes = group.locator("input[type='checkbox']")
        box = await self._find_choice(boxes, option) if option else boxes.first
        if box is None or await box.count() == 0:
            return False
        try:
            await box.set_checked(checked, force=True)
            return True
        except PlaywrightError as e:
            logger.warning(f"Could not set checkbox in {field_ref}: {e}")
            return False

    async def message_field_ref(self) -> Optional[str]:
        if not self.MESSAGE_FIELD_SELECTOR:
            return None
        if await self.page.locator(self.MESSAGE_FIELD_SELECTOR).count() == 0:
            return None
        return MESSAGE_REF

    # --------------------------------------------------------------- outcome

    async def read_outcome(self) -> SubmissionOutcome:
        if await self.page.query_selector(self.SUCCESS_SELECTOR):
            return SubmissionOutcome(success=True)
        error = await self.page.query_selector(self.ERROR_SELECTOR)
        if error is not None:
            text = (await error.inner_text()).strip()
            return SubmissionOutcome(success=False, error_text=text or "unspecified form error")
        return SubmissionOutcome(success=False)

    async def dismiss(self) -> None:
        if not self.is_ready:
            return
        try:
            dismiss = await self._find_visible([self.DISMISS_SELECTOR]) if self.DISMISS_SELECTOR else None
            if dismiss is not None:
                await dismiss.click()
                await self.page.wait_for_timeout(500)
            discard = await self._find_visible([self.DISCARD_SELECTOR]) if self.DISCARD_SELECTOR else None
            if discard is not None:
                await discard.click()
        except PlaywrightError as e:
            logger.debug(f"Dismiss failed: {e}")

    # --------------------------------------------------------------- helpers

    async def _find_visible(self, selectors: Sequence[str]):
        for selector in selectors:
            try:
                handle = await self.page.query_selector(selector)
                if handle is not None and await handle.is_visible():
                    return handle
            except PlaywrightError:
                continue
        return None

    @staticmethod
    async def _find_choice(choices: Locator, option: str) -> Optional[Locator]:
        wanted = (option or "").strip().lower()
        labels = []
        for i in range(await choices.count()):
            text = (await choices.nth(i).evaluate(OPTION_LABEL_JS)).strip().lower()
            labels.append(text)
            if text == wanted:
                return choices.nth(i)
        for i, text in enumerate(labels):
            if wanted and wanted in text:
                return choices.nth(i)
        return None
