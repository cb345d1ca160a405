"""Checklist submission and supervisor validation routes.

The validation endpoints are deliberately unauthenticated: supervisors
reach them from an emailed one-time link.
"""
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlmodel import Session

from app.core.auth import get_current_user
from app.core.config import settings
from app.core.database import get_session
from app.models import User
from app.schemas.submission import ValidationSubmit
from app.submissions.intake import submit_checklist
from app.submissions.mailer import get_mailer
from app.submissions.storage import SubmissionStore, get_store
from app.submissions.validation import (
    SubmissionError,
    open_validation_link,
    submit_validation,
)

router = APIRouter(tags=["submissions"])


@router.post("/submit-form")
async def submit_form(
    form: dict = Body(...),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    store: SubmissionStore = Depends(get_store),
    mailer=Depends(get_mailer),
):
    """
    Submit a completed checklist.

    Stores the form with a random sample of items for the supervisor to
    re-check, completes the user's assignment for the checklist, and
    emails the supervisor a one-time validation link. An email failure is
    reported in the response but does not reject the submission.
    """
    try:
        return submit_checklist(
            session, store, current_user, form, settings.base_url, send_email=mailer
        )
    except SubmissionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/api/validate/{file_id}")
async def get_validation_payload(
    file_id: str,
    store: SubmissionStore = Depends(get_store),
):
    """
    Fetch a submission for validation. Works exactly once per link.

    Returns 410 once the link has been used or the submission validated.
    """
    try:
        return open_validation_link(store, file_id)
    except SubmissionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post("/api/validate/{file_id}")
async def post_validation(
    file_id: str,
    body: ValidationSubmit,
    session: Session = Depends(get_session),
    store: SubmissionStore = Depends(get_store),
):
    """Record the supervisor's corrections and validate the assignment."""
    corrections = [c.model_dump() for c in body.validated_checkboxes]
    try:
        return submit_validation(session, store, file_id, body.supervisor_name, corrections)
    except SubmissionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
