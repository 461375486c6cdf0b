"""
Application Review Endpoints
Prepare an application, let a human review and approve it, then submit.
Domain exceptions propagate to the app-level handler in main.py.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from application.services.jobs.session_controller import SessionController
from domain.enums import ApplicationSessionStatus
from infrastructure.services.session_store import InMemorySessionStore
from presentation.api.v1.container import get_session_controller, get_session_store
from presentation.api.v1.schemas.applications import (
    ApplicationReviewResponse,
    ApproveApplicationRequest,
    PrepareApplicationRequest,
    SessionStatusResponse,
)


router = APIRouter()


@router.post(
    "/applications/prepare",
    response_model=ApplicationReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def prepare_application(
    request: PrepareApplicationRequest,
    controller: SessionController = Depends(get_session_controller),
    store: InMemorySessionStore = Depends(get_session_store),
):
    """
    Open the job's application form, detect its questions and draft answers.

    The returned session is either ready_for_review or failed; nothing is
    submitted until the reviewer approves and calls submit.
    """
    job = request.job.to_entity()
    logger.info(f"Preparing {job.platform.value} application for '{job.title}' ({job.external_job_id})")

    session = await controller.prepare(job, request.user_profile, request.job_description)
    store.add(session)
    return ApplicationReviewResponse.from_session(session)


@router.get("/applications/{session_id}", response_model=ApplicationReviewResponse)
async def get_application(
    session_id: str,
    store: InMemorySessionStore = Depends(get_session_store),
):
    """Review view of one session"""
    return ApplicationReviewResponse.from_session(store.get(session_id))


@router.post("/applications/{session_id}/approve", response_model=ApplicationReviewResponse)
async def approve_application(
    session_id: str,
    request: ApproveApplicationRequest,
    controller: SessionController = Depends(get_session_controller),
    store: InMemorySessionStore = Depends(get_session_store),
):
    """Commit reviewer edits and approve the session for submission"""
    session = store.get(session_id)
    controller.approve(session, request.application_message, request.answers)
    return ApplicationReviewResponse.from_session(session)


@router.post("/applications/{session_id}/cancel", response_model=SessionStatusResponse)
async def cancel_application(
    session_id: str,
    controller: SessionController = Depends(get_session_controller),
    store: InMemorySessionStore = Depends(get_session_store),
):
    """Reject the drafted application; the open form is dismissed"""
    session = store.get(session_id)
    await controller.cancel(session)
    return SessionStatusResponse.from_session(session)


@router.post("/applications/{session_id}/submit", response_model=SessionStatusResponse)
async def submit_application(
    session_id: str,
    controller: SessionController = Depends(get_session_controller),
    store: InMemorySessionStore = Depends(get_session_store),
):
    """Fill and submit an approved application"""
    session = store.get(session_id)

    # The controller only logs a refused submit; surface it as a conflict here
    if session.status != ApplicationSessionStatus.APPROVED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Session {session_id} is {session.status.value}; approve it before submitting",
        )

    submitted = await controller.submit(session)
    logger.info(f"Session {session_id} finished as {session.status.value}")
    return SessionStatusResponse.from_session(session, submitted=submitted)
