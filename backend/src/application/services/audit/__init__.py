"""
Audit Logger Interface
Persists one record per finished application session
"""
from abc import ABC, abstractmethod

from domain.entities import ApplicationSession


class IAuditLogger(ABC):
    """Audit logger interface"""

    @abstractmethod
    def record(self, session: ApplicationSession) -> bool:
        """
        Persist a terminal session

        Returns:
            True if a record was written; False for non-terminal sessions,
            repeat calls for the same session, or write failures
        """
        pass
