"""
Tests for job-scoped log context
"""
from loguru import logger

from core.logging_config import job_context


class TestJobContext:

    def test_lines_inside_block_carry_job(self):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="INFO")
        try:
            with job_context("linkedin", "4329656579"):
                logger.info("inside")
            logger.info("outside")
        finally:
            logger.remove(sink_id)

        inside, outside = records[-2:]
        assert inside["extra"]["job"] == "linkedin:4329656579"
        assert outside["extra"].get("job", "-") == "-"

    def test_missing_job_id_is_marked(self):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="INFO")
        try:
            with job_context("upwork", ""):
                logger.info("no id")
        finally:
            logger.remove(sink_id)

        assert records[-1]["extra"]["job"] == "upwork:?"
