"""
Dependency Injection Container
Manages service and adapter instances
"""
from application.services.ai import IApplicationAIService
from application.services.audit import IAuditLogger
from application.services.jobs.answer_resolver import AnswerResolver
from application.services.jobs.session_controller import SessionController
from application.services.platforms.registry import PlatformAdapterRegistry
from infrastructure.platforms.linkedin_adapter import LinkedInAdapter
from infrastructure.platforms.upwork_adapter import UpworkAdapter
from infrastructure.services.audit_log_service import JsonAuditLogService
from infrastructure.services.openrouter_application_ai_service import OpenRouterApplicationAIService
from infrastructure.services.session_store import InMemorySessionStore


# Singleton instances
_registry: PlatformAdapterRegistry | None = None
_ai_service: IApplicationAIService | None = None
_audit_logger: IAuditLogger | None = None
_session_controller: SessionController | None = None
_session_store: InMemorySessionStore | None = None


def get_platform_registry() -> PlatformAdapterRegistry:
    """Get platform adapter registry (singleton, adapters start lazily)"""
    global _registry
    if _registry is None:
        _registry = PlatformAdapterRegistry()
        _registry.register(LinkedInAdapter())
        _registry.register(UpworkAdapter())
    return _registry


def get_ai_service() -> IApplicationAIService:
    """Get AI drafting service instance (singleton)"""
    global _ai_service
    if _ai_service is None:
        _ai_service = OpenRouterApplicationAIService()
    return _ai_service


def get_audit_logger() -> IAuditLogger:
    """Get audit logger instance (singleton)"""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = JsonAuditLogService()
    return _audit_logger


def get_session_controller() -> SessionController:
    """Get session controller instance (singleton)"""
    global _session_controller
    if _session_controller is None:
        _session_controller = SessionController(
            registry=get_platform_registry(),
            answer_resolver=AnswerResolver(get_ai_service()),
            audit_logger=get_audit_logger(),
        )
    return _session_controller


def get_session_store() -> InMemorySessionStore:
    """Get session store instance (singleton)"""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
    return _session_store


async def shutdown() -> None:
    """Close every adapter's browser if the registry was ever built"""
    if _registry is not None:
        await _registry.close_all()
