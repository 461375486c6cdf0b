"""
LinkedIn Adapter
Job search, job details and Easy Apply automation on LinkedIn
"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from application.services.jobs.cancellation import CancellationToken
from application.services.jobs.form_inspector import FormInspector
from application.services.jobs.job_parser import absolute_url, clean_text, extract_job_id
from application.services.jobs.pacing_governor import PacingGovernor
from application.services.jobs.progress import ProgressCallback, report_progress
from application.services.jobs.search_url_builder import LinkedInURLBuilder
from core.config import settings
from domain.entities import Job, JobDetails, SearchFilter
from domain.enums import JobPlatform
from .base_adapter import PlaywrightPlatformAdapter
from .browser_session import BrowserSession
from .linkedin_surface import LinkedInEasyApplySurface


JOB_CARDS_JS = """
() => Array.from(document.querySelectorAll(
    '.job-card-container, li.jobs-search-results__list-item, .base-card, .job-search-card'
)).map((card) => {
    const text = (sel) => { const el = card.querySelector(sel); return el ? el.innerText.trim() : ''; };
    const link = card.querySelector(
        "a.job-card-list__title, a.job-card-container__link, a.base-card__full-link, a[href*='/jobs/view/']"
    );
    const badge = card.querySelector(
        ".job-card-container__apply-method, .job-card-container__footer-job-state, [class*='easy-apply']"
    );
    const time = card.querySelector('time');
    return {
        title: text('a.job-card-list__title, .job-card-list__title, .artdeco-entity-lockup__title, .base-search-card__title, strong'),
        company: text('.job-card-container__company-name, .job-card-container__primary-description, .artdeco-entity-lockup__subtitle, .base-search-card__subtitle'),
        location: text('.job-card-container__metadata-item, .artdeco-entity-lockup__caption, .job-search-card__location'),
        href: link ? link.getAttribute('href') || '' : '',
        dataJobId: card.getAttribute('data-occludable-job-id') || card.getAttribute('data-job-id')
            || (card.getAttribute('data-entity-urn') || '').split(':').pop() || '',
        badge: badge ? badge.innerText : '',
        datetime: time ? time.getAttribute('datetime') || '' : '',
    };
})
"""

DESCRIPTION_SELECTORS = [
    ".jobs-description-content__text",
    ".jobs-description__content",
    ".jobs-box__html-content",
    ".show-more-less-html__markup",
    ".description__text",
]

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


def parse_linkedin_card(raw: Dict[str, Any]) -> Optional[Job]:
    """Build a Job from one scraped search-result card; None if it has no id"""
    href = (raw.get("href") or "").split("?")[0]
    job_id = (raw.get("dataJobId") or "").strip() or extract_job_id(href)
    if not job_id or not job_id.isdigit():
        return None

    title = clean_text(raw.get("title")) or "Unknown"
    url = absolute_url(href, settings.LINKEDIN_BASE_URL) or f"{settings.LINKEDIN_BASE_URL}/jobs/view/{job_id}/"

    date_posted = None
    if raw.get("datetime"):
        try:
            date_posted = datetime.fromisoformat(raw["datetime"])
        except ValueError:
            date_posted = None

    return Job(
        platform=JobPlatform.LINKEDIN,
        external_job_id=job_id,
        title=title,
        company=clean_text(raw.get("company")) or "Unknown",
        location=clean_text(raw.get("location")) or "Unknown",
        job_url=url,
        has_easy_apply="easy apply" in (raw.get("badge") or "").lower(),
        date_posted=date_posted,
    )


class LinkedInAdapter(PlaywrightPlatformAdapter):
    """LinkedIn job search and Easy Apply"""

    def __init__(
        self,
        browser: Optional[BrowserSession] = None,
        surface: Optional[LinkedInEasyApplySurface] = None,
        governor: Optional[PacingGovernor] = None,
        inspector: Optional[FormInspector] = None,
    ):
        browser = browser or BrowserSession("linkedin")
        super().__init__(
            browser=browser,
            surface=surface or LinkedInEasyApplySurface(browser),
            governor=governor,
            inspector=inspector,
        )

    @property
    def platform(self) -> JobPlatform:
        return JobPlatform.LINKEDIN

    async def search_jobs(
        self,
        search_filter: SearchFilter,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> List[Job]:
        jobs: List[Job] = []
        seen = set()

        async with self.automation.exclusive():
            if not await self.browser.start():
                report_progress(progress, "Browser not open")
                return jobs
            if not await self._ensure_logged_in():
                report_progress(progress, self.not_logged_in_reason)
                return jobs
            self.automation.forget_form()

            page = self.browser.page
            start = 0
            try:
                while len(jobs) < search_filter.max_results:
                    if cancel is not None:
                        cancel.raise_if_cancelled()

                    url = LinkedInURLBuilder.build_search_url(search_filter, start)
                    report_progress(progress, f"Loading LinkedIn results page {start // LinkedInURLBuilder.PAGE_SIZE + 1}...")
                    await page.goto(url, wait_until="domcontentloaded")
                    await self.governor.pause(cancel, label="search results")

                    # Results are lazy-loaded while scrolling
                    for _ in range(5):
                        await page.evaluate("window.scrollBy(0, 800)")
                        await page.wait_for_timeout(400)

                    added = 0
                    for raw in await page.evaluate(JOB_CARDS_JS):
                        job = parse_linkedin_card(raw)
                        if job is None or job.external_job_id in seen:
                            continue
                        seen.add(job.external_job_id)
                        jobs.append(job)
                        added += 1
                        report_progress(progress, f"Found: {job.title}")
                        if len(jobs) >= search_filter.max_results:
                            break

                    if added == 0:
                        break
                    start += LinkedInURLBuilder.PAGE_SIZE
            except PlaywrightError as e:
                logger.error(f"LinkedIn search failed: {e}")
                report_progress(progress, f"Error searching LinkedIn: {e}")

        report_progress(progress, f"Found {len(jobs)} LinkedIn jobs")
        return jobs

    async def fetch_job_details(self, job_url: str) -> Optional[JobDetails]:
        try:
            async with self.automation.exclusive():
                if not await self.browser.start():
                    return None
                if not await self._ensure_logged_in():
                    return None
                self.automation.forget_form()
                page = self.browser.page
                await page.goto(job_url, wait_until="domcontentloaded")
                await self.governor.pause(label="job page")

                show_more = page.locator("button:has-text('Show more'), button:has-text('See more')").first
                if await show_more.count() > 0 and await show_more.is_visible():
                    await show_more.click()
                    await page.wait_for_timeout(500)

                description = ""
                for selector in DESCRIPTION_SELECTORS:
                    element = await page.query_selector(selector)
                    if element is not None:
                        description = (await element.inner_text()).strip()
                        if description:
                            break

                easy_apply = await page.query_selector(
                    "button:has-text('Easy Apply'), .jobs-apply-button--top-card, .jobs-apply-button"
                )
                has_easy_apply = easy_apply is not None and "easy apply" in (await easy_apply.inner_text()).lower()

                external_apply_url = None
                if not has_easy_apply:
                    apply_link = await page.query_selector("a:has-text('Apply')")
                    if apply_link is not None:
                        external_apply_url = await apply_link.get_attribute("href")

                email = EMAIL_PATTERN.search(description)
                return JobDetails(
                    description=description,
                    recruiter_email=email.group(0) if email else None,
                    external_apply_url=external_apply_url,
                    has_easy_apply=has_easy_apply,
                )
        except Exception as e:
            logger.error(f"Could not fetch LinkedIn job details from {job_url}: {e}")
            return None
