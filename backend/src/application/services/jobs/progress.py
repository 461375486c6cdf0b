"""
Fire-and-forget progress reporting.
"""
from typing import Callable, Optional

from loguru import logger


ProgressCallback = Callable[[str], None]


def report_progress(progress: Optional[ProgressCallback], message: str) -> None:
    """Invoke the callback; its failures are logged and never reach the flow."""
    logger.debug(f"[PROGRESS] {message}")
    if progress is None:
        return
    try:
        progress(message)
    except Exception as e:
        logger.warning(f"Progress callback raised: {e}")
