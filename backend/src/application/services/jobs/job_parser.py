"""
Job Parsing Utilities
Extract identifiers and numbers from scraped job pages
"""
import re
from typing import List, Optional

from loguru import logger

from domain.enums import JobPlatform


def extract_job_id(url: str) -> Optional[str]:
    """
    Extract LinkedIn job ID from URL

    Examples:
    - https://www.linkedin.com/jobs/search/?currentJobId=4329656579&...
    - Returns: "4329656579"
    """
    if not url:
        return None

    # Pattern: currentJobId=(\d+)
    match = re.search(r'currentJobId=(\d+)', url)
    if match:
        return match.group(1)

    # Alternative: /jobs/view/(\d+)
    match = re.search(r'/jobs/view/(\d+)', url)
    if match:
        return match.group(1)

    return None


def extract_upwork_job_id(url: str) -> Optional[str]:
    """
    Extract Upwork job ciphertext from URL

    Examples:
    - https://www.upwork.com/jobs/~01234567890abcdef
    - https://www.upwork.com/ab/proposals/job/~01234567890abcdef/apply
    - Returns: "01234567890abcdef"
    """
    if not url:
        return None
    match = re.search(r'~([a-zA-Z0-9]+)', url)
    return match.group(1) if match else None


def extract_platform_job_id(url: str, platform: JobPlatform) -> Optional[str]:
    """Dispatch to the platform's job-id format"""
    if platform == JobPlatform.UPWORK:
        return extract_upwork_job_id(url)
    return extract_job_id(url)


def absolute_url(href: str, base_url: str) -> str:
    if not href:
        return ""
    if href.startswith("http"):
        return href
    return f"{base_url.rstrip('/')}/{href.lstrip('/')}"


def parse_money_values(text: str) -> List[float]:
    """
    Extract dollar amounts in order of appearance

    Examples:
    - "$25.00 - $50.00 /hr" -> [25.0, 50.0]
    - "Fixed-price $1,500" -> [1500.0]
    """
    if not text:
        return []
    values = []
    for raw in re.findall(r'\$([\d,]+(?:\.\d+)?)', text):
        try:
            values.append(float(raw.replace(",", "")))
        except ValueError:
            logger.debug(f"Unparsable amount: {raw}")
    return values


def parse_proposals_count(text: str) -> Optional[int]:
    """
    Lower bound of Upwork's proposals indicator

    Examples:
    - "Less than 5" -> 0
    - "10 to 15" -> 10
    - "50+" -> 50
    """
    if not text:
        return None
    if re.search(r'less than', text, re.IGNORECASE):
        return 0
    match = re.search(r'(\d+)', text)
    return int(match.group(1)) if match else None


def parse_connects_required(text: str) -> Optional[int]:
    """
    Connects an Upwork proposal costs

    Examples:
    - "Send a proposal for: 16 Connects" -> 16
    - "Connects" -> None
    """
    if not text:
        return None
    match = re.search(r'(\d+)\s*connects', text, re.IGNORECASE)
    return int(match.group(1)) if match else None


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace of scraped text"""
    if not text:
        return ""
    return " ".join(text.split())
