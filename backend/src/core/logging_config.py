"""
Structured Logging Configuration
Console + rotating file sinks, stdlib logging routed into Loguru.
Lines logged inside job_context() carry the platform:job id they belong to.
"""
import sys
import logging
from contextlib import contextmanager
from typing import Iterator

from loguru import logger

from .config import settings


NO_JOB = "-"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[job]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
PLAIN_FORMAT = "{time} | {level} | {extra[job]} | {name}:{function}:{line} | {message}"

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


@contextmanager
def job_context(platform: str, job_id: str) -> Iterator[None]:
    """Tag every log line emitted in this block (and its tasks) with platform:job_id"""
    with logger.contextualize(job=f"{platform}:{job_id or '?'}"):
        yield


def configure_logging(file_sink: bool = True):
    """Configure Loguru logging"""

    logger.remove()
    logger.configure(extra={"job": NO_JOB})

    if settings.LOG_JSON_FORMAT and settings.ENVIRONMENT == "production":
        logger.add(sys.stdout, format=PLAIN_FORMAT, level=settings.LOG_LEVEL, serialize=True)
    else:
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=settings.LOG_LEVEL, colorize=True)

    if file_sink:
        logger.add(
            f"{settings.LOG_DIR}/app_{{time:YYYY-MM-DD}}.log",
            rotation="00:00",
            retention="30 days",
            level=settings.LOG_LEVEL,
            format=PLAIN_FORMAT,
            serialize=settings.LOG_JSON_FORMAT,
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers = [InterceptHandler()]
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging configured: level={settings.LOG_LEVEL}, json={settings.LOG_JSON_FORMAT}")
