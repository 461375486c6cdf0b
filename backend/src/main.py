"""Main FastAPI Application

ASGI app for the human-gated application flow. This module wires
middleware, global exception handlers, and includes API routers from
`presentation`.

Run locally for development with:

    uvicorn main:app --reload

Keep application logic in `application`, `core`, and
`infrastructure` to preserve a clean architecture.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from core.config import settings
from core.logging_config import configure_logging
from core.exceptions import (
    AdapterBusyException,
    DomainException,
    InvalidTransitionException,
    PlatformNotSupportedException,
    SessionLockedException,
    SessionNotFoundException,
)
from presentation.api.v1 import container
from presentation.api.v1.endpoints import applications_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    configure_logging()
    logger.info(f"🚀 Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    yield

    # Shutdown
    logger.info("👋 Shutting down gracefully...")
    await container.shutdown()
    logger.info("✅ Browser sessions closed")


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Human-gated job application automation",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global Exception Handler
@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException):
    """Handle domain-level exceptions"""
    logger.warning(f"Domain exception: {str(exc)}")

    if isinstance(exc, SessionNotFoundException):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (InvalidTransitionException, SessionLockedException, AdapterBusyException)):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, PlatformNotSupportedException):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc)}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler"""
    logger.opt(exception=exc).error(f"Unhandled exception: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Application review endpoints
app.include_router(
    applications_router,
    prefix="/api/v1",
    tags=["Applications"]
)


@app.get("/health")
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    registry = container.get_platform_registry()
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "1.0.0",
        "platforms": [adapter.platform.value for adapter in registry.all()],
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
