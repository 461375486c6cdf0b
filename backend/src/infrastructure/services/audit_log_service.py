"""
JSON Audit Log Service
One human-readable JSON file per finished application session
"""
import json
import re
from pathlib import Path
from typing import Optional, Set

from application.services.audit import IAuditLogger
from core.config import settings
from core.logging_config import logger
from domain.entities import ApplicationSession


class JsonAuditLogService(IAuditLogger):
    """Writes terminal sessions to AUDIT_LOG_DIR, at most once per session"""

    def __init__(self, log_dir: Optional[str] = None):
        self.log_dir = Path(log_dir or settings.AUDIT_LOG_DIR)
        self._written: Set[str] = set()

    def file_name(self, session: ApplicationSession) -> str:
        job_id = re.sub(r"[^A-Za-z0-9_-]", "_", session.external_job_id or "unknown")
        return (
            f"{session.started_at.strftime('%Y%m%d_%H%M%S')}_"
            f"{session.platform.value}_{job_id}_{session.session_id}.json"
        )

    def record(self, session: ApplicationSession) -> bool:
        if not session.is_terminal:
            logger.warning(f"Audit skipped for non-terminal session {session.session_id} ({session.status.value})")
            return False
        if session.session_id in self._written:
            logger.debug(f"Audit record for session {session.session_id} already written")
            return False

        path = self.log_dir / self.file_name(session)
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(session.to_dict(), f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write audit record for session {session.session_id}: {e}")
            return False

        self._written.add(session.session_id)
        logger.info(f"Audit record written: {path}")
        return True
