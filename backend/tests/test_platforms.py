"""
Tests for the adapter registry, search URL builders and scraped-card parsing
"""
import pytest

from application.services.jobs.job_parser import (
    extract_job_id,
    extract_platform_job_id,
    extract_upwork_job_id,
    parse_connects_required,
    parse_money_values,
    parse_proposals_count,
)
from application.services.jobs.search_url_builder import LinkedInURLBuilder, UpworkURLBuilder
from application.services.platforms.registry import PlatformAdapterRegistry
from core.exceptions import PlatformNotSupportedException
from domain.entities import Job, JobDetails, SearchFilter
from domain.enums import ApplicationSessionStatus, JobPlatform
from infrastructure.platforms.linkedin_adapter import parse_linkedin_card
from infrastructure.platforms.upwork_adapter import UpworkAdapter, apply_budget, parse_upwork_card

from conftest import FakeAdapter, FakeBrowser, FakeSurface, instant_governor


class TestRegistry:

    def test_register_and_get(self):
        registry = PlatformAdapterRegistry()
        adapter = FakeAdapter(FakeSurface(), platform=JobPlatform.UPWORK)
        registry.register(adapter)
        assert registry.get(JobPlatform.UPWORK) is adapter
        assert registry.is_supported(JobPlatform.UPWORK)
        assert not registry.is_supported(JobPlatform.LINKEDIN)

    def test_unknown_platform_raises(self):
        with pytest.raises(PlatformNotSupportedException):
            PlatformAdapterRegistry().get(JobPlatform.LINKEDIN)

    @pytest.mark.asyncio
    async def test_close_all_closes_every_browser(self):
        registry = PlatformAdapterRegistry()
        browsers = [FakeBrowser(), FakeBrowser()]
        registry.register(FakeAdapter(FakeSurface(), browser=browsers[0], platform=JobPlatform.LINKEDIN))
        registry.register(FakeAdapter(FakeSurface(), browser=browsers[1], platform=JobPlatform.UPWORK))
        await registry.close_all()
        assert all(b.closed for b in browsers)


class TestJobParser:

    @pytest.mark.parametrize("url,expected", [
        ("https://www.linkedin.com/jobs/search/?currentJobId=4329656579&geoId=1", "4329656579"),
        ("https://www.linkedin.com/jobs/view/4329656579/", "4329656579"),
        ("https://example.com/", None),
        ("", None),
    ])
    def test_extract_linkedin_id(self, url, expected):
        assert extract_job_id(url) == expected

    def test_extract_upwork_id(self):
        assert extract_upwork_job_id("https://www.upwork.com/jobs/~01abc123?source=rss") == "01abc123"
        assert extract_platform_job_id("https://www.upwork.com/jobs/~01abc123", JobPlatform.UPWORK) == "01abc123"

    def test_money_values(self):
        assert parse_money_values("$25.00 - $50.00 /hr") == [25.0, 50.0]
        assert parse_money_values("Fixed-price $1,500") == [1500.0]
        assert parse_money_values("") == []

    @pytest.mark.parametrize("text,expected", [("Less than 5", 0), ("10 to 15", 10), ("50+", 50), ("", None)])
    def test_proposals_count(self, text, expected):
        assert parse_proposals_count(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("Send a proposal for: 16 Connects", 16),
        ("6connects to apply", 6),
        ("Connects", None),
        ("", None),
    ])
    def test_connects_required(self, text, expected):
        assert parse_connects_required(text) == expected


class TestSearchUrlBuilders:

    def test_linkedin_url_with_filters(self):
        url = LinkedInURLBuilder.build_search_url(SearchFilter(
            job_title="Software Engineer",
            locations=["Germany"],
            remote_only=True,
            experience_levels=["Mid-Senior level", "Director", "Senior"],
        ))
        assert url.endswith("/jobs/search/?keywords=Software+Engineer&location=Germany&f_WT=2&f_E=4,5")

    def test_linkedin_defaults_location_and_pages(self):
        url = LinkedInURLBuilder.build_search_url(SearchFilter(job_title="Dev"), start=25)
        assert "location=United+States" in url
        assert url.endswith("&start=25")

    def test_upwork_url(self):
        url = UpworkURLBuilder.build_search_url(SearchFilter(job_title="python dev", experience_levels=["Entry", "Senior"]))
        assert url.endswith("/nx/search/jobs/?q=python%20dev&sort=recency&contractor_tier=1,3")


class TestCardParsing:

    def test_linkedin_card(self):
        job = parse_linkedin_card({
            "title": "  Backend   Engineer ",
            "company": "Acme",
            "location": "Berlin",
            "href": "/jobs/view/4329656579/?refId=abc",
            "dataJobId": "",
            "badge": "Easy Apply",
            "datetime": "2026-10-01",
        })
        assert job.external_job_id == "4329656579"
        assert job.title == "Backend Engineer"
        assert job.job_url.endswith("/jobs/view/4329656579/")
        assert job.has_easy_apply
        assert job.date_posted.year == 2026

    def test_linkedin_card_without_id_is_dropped(self):
        assert parse_linkedin_card({"title": "Promo", "href": "/premium"}) is None

    def test_upwork_card(self):
        job = parse_upwork_card({
            "title": "Build a scraper",
            "href": "/jobs/Build-scraper_~01abc123/?referrer=search",
            "description": "Need Python",
            "connects": "16 Connects",
        })
        assert job.platform == JobPlatform.UPWORK
        assert job.external_job_id == "01abc123"
        assert job.company == "Upwork Client"
        assert job.location == "Remote"
        assert job.has_easy_apply
        assert job.connects_required == 16

    def test_budget_parsing(self):
        hourly = JobDetails()
        apply_budget(hourly, "$25.00 - $50.00 /hr")
        assert (hourly.hourly_rate_min, hourly.hourly_rate_max, hourly.fixed_price) == (25.0, 50.0, None)

        fixed = JobDetails()
        apply_budget(fixed, "Fixed-price $1,500")
        assert fixed.fixed_price == 1500.0


class TestUpworkConnects:

    @staticmethod
    def upwork_job(connects_required):
        return Job(
            platform=JobPlatform.UPWORK,
            external_job_id="01abc123",
            title="Build a scraper",
            company="Upwork Client",
            job_url="https://www.upwork.com/jobs/~01abc123",
            connects_required=connects_required,
        )

    @staticmethod
    def adapter(balance):
        surface = FakeSurface(connects_balance=balance)
        return UpworkAdapter(browser=FakeBrowser(), surface=surface, governor=instant_governor()), surface

    @pytest.mark.asyncio
    async def test_short_balance_refuses_prepare(self):
        adapter, surface = self.adapter(balance=4)
        session = await adapter.prepare_application(self.upwork_job(16))
        assert session.status == ApplicationSessionStatus.FAILED
        assert session.error_message == "Not enough Connects: need 16, have 4"
        assert surface.opened_jobs == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("balance,required", [(80, 16), (16, 16), (None, 16), (0, None)])
    async def test_prepare_proceeds(self, balance, required):
        adapter, surface = self.adapter(balance=balance)
        session = await adapter.prepare_application(self.upwork_job(required))
        assert session.status == ApplicationSessionStatus.READY_FOR_REVIEW
        assert surface.opened_jobs == ["01abc123"]

    @pytest.mark.asyncio
    async def test_has_enough_connects(self):
        adapter, _ = self.adapter(balance=10)
        await adapter.browser.start()
        assert await adapter.has_enough_connects(10)
        assert not await adapter.has_enough_connects(11)

        unknown, _ = self.adapter(balance=None)
        await unknown.browser.start()
        assert not await unknown.has_enough_connects(1)

    @pytest.mark.asyncio
    async def test_logged_out_search_returns_nothing(self):
        adapter, surface = self.adapter(balance=10)
        surface.logged_in = False
        assert await adapter.search_jobs(SearchFilter(job_title="python")) == []
        assert await adapter.fetch_job_details("https://www.upwork.com/jobs/~01abc123") is None
