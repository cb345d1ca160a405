"""Employee-facing assignment routes."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from app.assignments.engine import assign_next_checklist, complete_assignment
from app.core.auth import get_current_user
from app.core.database import get_session
from app.models import Assignment, AssignmentStatus, User
from app.schemas.assignment import AssignmentOut, CompleteChecklistRequest

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.get("/current")
async def current_assignment(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Return the user's active assignment, rotating one in if they have none.

    Returns {"assignment": null} for admins and when no checklist is
    available today.
    """
    assignment = assign_next_checklist(session, current_user)
    return {
        "assignment": (
            AssignmentOut.model_validate(assignment).model_dump(mode="json")
            if assignment
            else None
        )
    }


@router.get("/mine", response_model=list[AssignmentOut])
async def my_assignments(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List the user's incomplete, non-cancelled assignments, newest first."""
    statement = (
        select(Assignment)
        .where(Assignment.user_id == current_user.id)
        .where(Assignment.completed_at == None)  # noqa: E711
        .where(Assignment.status == AssignmentStatus.assigned)
        .order_by(Assignment.assigned_at.desc())
    )
    return session.exec(statement).all()


@router.post("/complete-checklist")
async def complete_checklist(
    body: CompleteChecklistRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Mark the user's active assignment for a checklist as completed.

    The next checklist is rotated in straight away and returned alongside.
    Returns 404 if the user has no active assignment for that checklist.
    """
    if not body.checklist_filename:
        raise HTTPException(status_code=400, detail="Checklist filename is required")

    result = complete_assignment(session, current_user, body.checklist_filename)
    if not result:
        raise HTTPException(
            status_code=404, detail="No active assignment found for this checklist"
        )

    return {
        "message": "Assignment marked as completed successfully",
        "assignment_id": str(result.completed.id),
        "next_assignment": (
            AssignmentOut.model_validate(result.next_assignment).model_dump(mode="json")
            if result.next_assignment
            else None
        ),
    }
