"""
LinkedIn Easy Apply surface
Selectors for the multi-page Easy Apply modal
"""
from core.config import settings
from .playwright_surface import PlaywrightApplicationSurface


class LinkedInEasyApplySurface(PlaywrightApplicationSurface):
    """Easy Apply modal on a LinkedIn job page"""

    FORM_GROUP_SELECTOR = (
        ".jobs-easy-apply-modal .fb-form-element, "
        ".jobs-easy-apply-modal .jobs-easy-apply-form-section__grouping, "
        ".jobs-easy-apply-content .fb-form-element"
    )
    LABEL_SELECTOR = "label, .fb-form-element-label, .t-14"
    FORM_READY_SELECTOR = (
        ".jobs-easy-apply-modal, .jobs-easy-apply-content, [data-test-modal-id='easy-apply-modal']"
    )
    ENTRY_POINT_SELECTORS = (
        "button.jobs-apply-button--top-card",
        ".jobs-apply-button",
        "button:has-text('Easy Apply')",
        "[data-job-apply-button]",
        ".jobs-s-apply button",
    )
    SUBMIT_SELECTORS = (
        "button[aria-label='Submit application']",
        "button:has-text('Submit application')",
        "button[data-easy-apply-next-button]:has-text('Submit')",
    )
    REVIEW_SELECTORS = (
        "button:has-text('Review')",
        "button[aria-label='Review your application']",
    )
    NEXT_SELECTORS = (
        "button[aria-label='Continue to next step']",
        "button:has-text('Next')",
        "button[data-easy-apply-next-button]",
    )
    BACK_SELECTOR = "button[aria-label='Back'], button:has-text('Back')"
    SUCCESS_SELECTOR = (
        ".artdeco-modal:has-text('Application sent'), "
        ".artdeco-modal:has-text('application submitted'), "
        "[data-test-modal-id='post-apply-modal'], "
        ".jobs-post-apply-modal"
    )
    ERROR_SELECTOR = ".artdeco-inline-feedback--error, .fb-form-element--error"
    DISMISS_SELECTOR = "button[aria-label='Dismiss'], button[data-test-modal-close-btn], .artdeco-modal__dismiss"
    DISCARD_SELECTOR = "button[data-test-dialog-primary-btn], button:has-text('Discard')"
    ATTACHED_FILE_SELECTOR = ".jobs-document-upload__file-name"
    FOOTER_BUTTON_SELECTOR = ".jobs-easy-apply-modal footer button, .jobs-easy-apply-content footer button"

    HOME_URL = f"{settings.LINKEDIN_BASE_URL}/feed/"
    LOGIN_URL_MARKERS = ("/login", "/checkpoint", "/authwall")
    AUTHENTICATED_URL_MARKERS = ("/feed",)
    SIGNED_IN_SELECTORS = (
        "div.global-nav__me",
        ".nav-item__profile-member-photo",
        "img.global-nav__me-photo",
        "button[data-control-name='nav.settings']",
    )
    SIGNED_OUT_SELECTORS = ("a[href*='login']", "a:has-text('Sign in')")
