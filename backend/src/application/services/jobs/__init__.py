"""
Jobs Service Package
"""
from .job_parser import (
    extract_job_id,
    extract_upwork_job_id,
    extract_platform_job_id,
    parse_money_values,
    parse_proposals_count,
)

__all__ = [
    "extract_job_id",
    "extract_upwork_job_id",
    "extract_platform_job_id",
    "parse_money_values",
    "parse_proposals_count",
]
