"""
Upwork Adapter
Job search, job details and proposal automation on Upwork
"""
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from application.services.jobs.cancellation import CancellationToken
from application.services.jobs.form_inspector import FormInspector
from application.services.jobs.job_parser import (
    absolute_url,
    clean_text,
    extract_upwork_job_id,
    parse_connects_required,
    parse_money_values,
    parse_proposals_count,
)
from application.services.jobs.pacing_governor import PacingGovernor
from application.services.jobs.progress import ProgressCallback, report_progress
from application.services.jobs.search_url_builder import UpworkURLBuilder
from core.config import settings
from domain.entities import Job, JobDetails, SearchFilter
from domain.enums import JobPlatform
from .base_adapter import PlaywrightPlatformAdapter
from .browser_session import BrowserSession
from .upwork_surface import UpworkProposalSurface


JOB_TILES_JS = """
() => Array.from(document.querySelectorAll(
    "article[data-test='JobTile'], section.up-card-list-section, [data-test='job-tile-list'] > section"
)).map((tile) => {
    const link = tile.querySelector("a[data-test='job-tile-title-link'], h2 a, h3 a, a[href*='/jobs/']");
    const budget = tile.querySelector("[data-test='job-type-label'], [data-test='budget'], [data-test='is-fixed-price']");
    return {
        title: link ? link.innerText.trim() : '',
        href: link ? link.getAttribute('href') || '' : '',
        budget: budget ? budget.innerText.trim() : '',
        description: (tile.querySelector("[data-test='UpCLineClamp JobDescription'], [data-test='job-description-text']") || {}).innerText || '',
        connects: ((tile.innerText || "").match(/\\d+\\s*Connects/i) || [""])[0],
    };
})
"""

NEXT_PAGE_SELECTOR = "button[data-test='pagination-next']:not([disabled])"

DESCRIPTION_SELECTORS = [
    "[data-test='Description']",
    "[data-test='job-description']",
    ".job-description",
    "section.air3-card-section .text-body",
]
BUDGET_SELECTOR = "[data-test='BudgetAmount'], [data-test='budget'], [data-cy='clock-hourly'] ~ div, .budget"
PROPOSALS_SELECTOR = "[data-test='proposals-tier'], li:has-text('Proposals') .value, .client-activity-items li:first-child"
SKILLS_SELECTOR = "[data-test='Skill'] a, .skills-list .air3-token, .air3-token-container .air3-token"
EXPERIENCE_SELECTOR = "[data-test='experience-level'] strong, li:has-text('Experience Level') strong"
CONNECTS_REQUIRED_SELECTOR = "[data-test='connects-required'], [data-test='ConnectsAuction'], .connects-required"


def parse_upwork_card(raw: Dict[str, Any]) -> Optional[Job]:
    """Build a Job from one scraped job tile; None if it has no ciphertext"""
    href = raw.get("href") or ""
    job_id = extract_upwork_job_id(href)
    if not job_id:
        return None

    # Upwork hides the client name on the listing; every proposal is in-platform
    return Job(
        platform=JobPlatform.UPWORK,
        external_job_id=job_id,
        title=clean_text(raw.get("title")) or "Unknown",
        company="Upwork Client",
        location="Remote",
        job_url=absolute_url(href.split("?")[0], settings.UPWORK_BASE_URL),
        description=clean_text(raw.get("description")) or None,
        has_easy_apply=True,
        connects_required=parse_connects_required(raw.get("connects") or ""),
    )


def apply_budget(details: JobDetails, budget_text: str) -> None:
    """Fill hourly range or fixed price from the budget label"""
    values = parse_money_values(budget_text)
    if not values:
        return
    if "hr" in budget_text.lower() or "hourly" in budget_text.lower():
        details.hourly_rate_min = values[0]
        details.hourly_rate_max = values[1] if len(values) > 1 else values[0]
    else:
        details.fixed_price = values[0]


class UpworkAdapter(PlaywrightPlatformAdapter):
    """Upwork job search and proposal submission"""

    def __init__(
        self,
        browser: Optional[BrowserSession] = None,
        surface: Optional[UpworkProposalSurface] = None,
        governor: Optional[PacingGovernor] = None,
        inspector: Optional[FormInspector] = None,
    ):
        browser = browser or BrowserSession("upwork")
        super().__init__(
            browser=browser,
            surface=surface or UpworkProposalSurface(browser),
            governor=governor,
            inspector=inspector,
        )

    @property
    def platform(self) -> JobPlatform:
        return JobPlatform.UPWORK

    async def get_connects_balance(self) -> Optional[int]:
        """Connects available to the signed-in freelancer; None when unknown"""
        if not self.browser.is_open:
            return None
        balance = await self.surface.read_connects_balance()
        logger.debug(f"Upwork Connects balance: {balance}")
        return balance

    async def has_enough_connects(self, connects_required: int) -> bool:
        balance = await self.get_connects_balance()
        return balance is not None and balance >= connects_required

    async def _preflight(self, job: Job) -> Optional[str]:
        if job.connects_required is None:
            return None
        balance = await self.get_connects_balance()
        if balance is None:
            logger.warning(
                f"Connects balance unknown, preparing {job.external_job_id} "
                f"({job.connects_required} Connects required)"
            )
            return None
        if balance < job.connects_required:
            return f"Not enough Connects: need {job.connects_required}, have {balance}"
        return None

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
            try:
                await page.goto(UpworkURLBuilder.build_search_url(search_filter), wait_until="domcontentloaded")
                page_number = 1
                while len(jobs) < search_filter.max_results:
                    if cancel is not None:
                        cancel.raise_if_cancelled()

                    report_progress(progress, f"Reading Upwork results page {page_number}...")
                    await self.governor.pause(cancel, label="search results")

                    for raw in await page.evaluate(JOB_TILES_JS):
                        job = parse_upwork_card(raw)
                        if job is None or job.external_job_id in seen:
                            continue
                        seen.add(job.external_job_id)
                        jobs.append(job)
                        report_progress(progress, f"Found: {job.title}")
                        if len(jobs) >= search_filter.max_results:
                            break

                    if len(jobs) >= search_filter.max_results:
                        break
                    next_button = await page.query_selector(NEXT_PAGE_SELECTOR)
                    if next_button is None:
                        break
                    await next_button.click()
                    await page.wait_for_load_state("domcontentloaded")
                    page_number += 1
            except PlaywrightError as e:
                logger.error(f"Upwork search failed: {e}")
                report_progress(progress, f"Error searching Upwork: {e}")

        report_progress(progress, f"Found {len(jobs)} Upwork jobs")
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

                details = JobDetails(has_easy_apply=True)
                for selector in DESCRIPTION_SELECTORS:
                    element = await page.query_selector(selector)
                    if element is not None:
                        details.description = (await element.inner_text()).strip()
                        if details.description:
                            break

                budget = await page.query_selector(BUDGET_SELECTOR)
                if budget is not None:
                    apply_budget(details, await budget.inner_text())

                proposals = await page.query_selector(PROPOSALS_SELECTOR)
                if proposals is not None:
                    details.proposals_count = parse_proposals_count(await proposals.inner_text())

                for skill in await page.query_selector_all(SKILLS_SELECTOR):
                    name = clean_text(await skill.inner_text())
                    if name and name not in details.required_skills:
                        details.required_skills.append(name)

                experience = await page.query_selector(EXPERIENCE_SELECTOR)
                if experience is not None:
                    details.experience_level = clean_text(await experience.inner_text()) or None

                connects = await page.query_selector(CONNECTS_REQUIRED_SELECTOR)
                if connects is not None:
                    details.connects_required = parse_connects_required(await connects.inner_text())

                return details
        except Exception as e:
            logger.error(f"Could not fetch Upwork job details from {job_url}: {e}")
            return None
