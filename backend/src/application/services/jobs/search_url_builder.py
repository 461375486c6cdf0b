"""
Search URL Builders
Generate platform job search URLs from a SearchFilter
"""
from typing import List
from urllib.parse import quote, quote_plus
from loguru import logger

from core.config import settings
from domain.entities import SearchFilter


class LinkedInURLBuilder:
    """
    Build LinkedIn public job search URLs.
    The trailing slash before the query string is required, otherwise
    LinkedIn redirects to the auth wall.
    """

    # Experience level to LinkedIn filter code mapping
    EXPERIENCE_LEVEL_MAP = {
        "internship": "1",
        "entry level": "2",
        "entry": "2",
        "associate": "3",
        "mid-senior level": "4",
        "mid-senior": "4",
        "mid": "4",
        "senior": "4",
        "director": "5",
        "executive": "6"
    }

    REMOTE_WORK_TYPE = "2"
    DEFAULT_LOCATION = "United States"
    PAGE_SIZE = 25

    @staticmethod
    def experience_codes(levels: List[str]) -> List[str]:
        codes: List[str] = []
        for level in levels:
            code = LinkedInURLBuilder.EXPERIENCE_LEVEL_MAP.get(level.strip().lower())
            if code is None:
                logger.warning(f"Unknown experience level: {level}")
                continue
            if code not in codes:
                codes.append(code)
        return codes

    @staticmethod
    def build_search_url(search_filter: SearchFilter, start: int = 0) -> str:
        """
        Build a LinkedIn job search URL with filters embedded.

        Example:
            >>> LinkedInURLBuilder.build_search_url(SearchFilter(
            ...     job_title="Software Engineer",
            ...     locations=["Germany"],
            ...     remote_only=True,
            ...     experience_levels=["Mid-Senior level", "Director"],
            ... ))
            'https://www.linkedin.com/jobs/search/?keywords=Software+Engineer&location=Germany&f_WT=2&f_E=4,5'
        """
        url = f"{settings.LINKEDIN_BASE_URL}/jobs/search/?"

        # Location is required for the public search; default when none given
        location = search_filter.locations[0] if search_filter.locations else LinkedInURLBuilder.DEFAULT_LOCATION
        params = [
            f"keywords={quote_plus(search_filter.job_title.strip())}",
            f"location={quote_plus(location.strip())}",
        ]

        if search_filter.remote_only:
            params.append(f"f_WT={LinkedInURLBuilder.REMOTE_WORK_TYPE}")

        codes = LinkedInURLBuilder.experience_codes(search_filter.experience_levels)
        if codes:
            params.append(f"f_E={','.join(codes)}")

        if start > 0:
            params.append(f"start={start}")

        url += "&".join(params)
        logger.debug(f"Built LinkedIn search URL: {url}")
        return url


class UpworkURLBuilder:
    """Build Upwork job search URLs (results sorted by recency)."""

    # Experience level to Upwork contractor tier
    CONTRACTOR_TIER_MAP = {
        "internship": "1",
        "entry level": "1",
        "entry": "1",
        "associate": "2",
        "mid-senior level": "2",
        "mid": "2",
        "senior": "3",
        "director": "3",
        "executive": "3",
    }

    @staticmethod
    def build_search_url(search_filter: SearchFilter) -> str:
        params = []
        if search_filter.job_title.strip():
            params.append(f"q={quote(search_filter.job_title.strip())}")
        params.append("sort=recency")

        tiers: List[str] = []
        for level in search_filter.experience_levels:
            tier = UpworkURLBuilder.CONTRACTOR_TIER_MAP.get(level.strip().lower())
            if tier and tier not in tiers:
                tiers.append(tier)
        if tiers:
            params.append(f"contractor_tier={','.join(tiers)}")

        return f"{settings.UPWORK_BASE_URL}/nx/search/jobs/?{'&'.join(params)}"
