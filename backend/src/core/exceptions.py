"""
Custom Exception Hierarchy
Domain and application-level exceptions
"""


class DomainException(Exception):
    """Base exception for all domain errors"""
    pass


class InvalidTransitionException(DomainException):
    """Session status change outside the legal edges"""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Illegal session transition: {current} -> {requested}")


class SessionLockedException(DomainException):
    """Session content can no longer be edited in its current status"""

    def __init__(self, session_id: str, status: str, what: str = "session"):
        self.session_id = session_id
        self.status = status
        super().__init__(f"Cannot modify {what} of session {session_id} in status {status}")


class SessionNotFoundException(DomainException):
    """Requested session not found"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Application session not found: {session_id}")


class PlatformNotSupportedException(DomainException):
    """No adapter registered for the requested platform"""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"No adapter registered for platform: {platform}")


class AdapterBusyException(DomainException):
    """Adapter already runs a Prepare/Submit flow on its browser surface"""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"{platform} adapter is already running an application flow")


class AIServiceException(DomainException):
    """AI collaborator call failed or returned unusable output"""
    pass


class OperationCancelledException(DomainException):
    """Cooperative cancellation was requested"""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message)


class NavigationException(DomainException):
    """Browser surface could not reach or find an expected element"""
    pass


class FormRenderTimeoutException(NavigationException):
    """Application form did not render within the bounded wait"""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Application form did not appear within {timeout_ms}ms")
