"""Admin routes for managing users and assignments."""
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from app.assignments.engine import (
    get_assignable_users,
    get_current_assignments,
    manually_assign_checklist,
)
from app.assignments.errors import AssignmentError
from app.core.auth import get_current_admin
from app.core.database import get_session
from app.models import Assignment, AssignmentStatus, User
from app.routes.auth import create_user
from app.schemas.assignment import (
    AssignmentOut,
    ManualAssignRequest,
    ManualAssignResponse,
    UserSummary,
)
from app.schemas.auth import RegisterRequest, UserOut
from app.submissions.storage import SubmissionStore, file_id_from_filename, get_store

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/users", response_model=UserOut, status_code=201)
async def create_employee(
    body: RegisterRequest,
    admin: User = Depends(get_current_admin),
    session: Session = Depends(get_session),
):
    """Create a new employee account. First and last name are required."""
    if not body.first_name.strip() or not body.last_name.strip():
        raise HTTPException(status_code=400, detail="First and last name are required.")
    return create_user(session, body)


@router.get("/users/assignable", response_model=list[UserSummary])
async def assignable_users(
    admin: User = Depends(get_current_admin),
    session: Session = Depends(get_session),
):
    """List users that can receive assignments (non-admins)."""
    return get_assignable_users(session)


@router.post("/assignments/assign", response_model=ManualAssignResponse)
async def assign_checklist(
    body: ManualAssignRequest,
    admin: User = Depends(get_current_admin),
    session: Session = Depends(get_session),
):
    """
    Manually assign a checklist to a user.

    Without ``override_existing`` the request is rejected (409) when the
    user already has an active assignment or completed the same checklist
    in the last 24 hours; the response detail describes the blocking
    assignment. With it, the active assignment is cancelled and its
    checklist returned to the rotation queue.
    """
    try:
        result = manually_assign_checklist(
            session,
            user_id=body.user_id,
            checklist_id=body.checklist_id,
            admin_user_id=admin.id,
            override_existing=body.override_existing,
        )
    except AssignmentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())

    return ManualAssignResponse(
        message=result.message,
        override_performed=result.override_performed,
        assignment=AssignmentOut.model_validate(result.assignment),
    )


@router.get("/assignments", response_model=list[AssignmentOut])
async def list_assignments(
    status: AssignmentStatus | None = None,
    user_id: UUID | None = None,
    active_only: bool = False,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    admin: User = Depends(get_current_admin),
    session: Session = Depends(get_session),
):
    """
    List assignments of non-admin users, newest first.

    ``search`` matches (case-insensitively) the user's names, username or
    the checklist title.
    """
    assignments = get_current_assignments(
        session,
        user_id=user_id,
        status=status,
        active_only=active_only,
        date_from=date_from,
        date_to=date_to,
    )
    term = (search or "").strip().lower()
    if term:
        assignments = [
            a
            for a in assignments
            if term in a.user.first_name.lower()
            or term in a.user.last_name.lower()
            or term in a.user.username.lower()
            or term in a.checklist.title.lower()
        ]
    return assignments


@router.get("/assignments/submission-data/{filename}")
async def submission_data(
    filename: str,
    admin: User = Depends(get_current_admin),
    session: Session = Depends(get_session),
    store: SubmissionStore = Depends(get_store),
):
    """Show a stored submission together with the assignment it completed."""
    file_id = file_id_from_filename(filename)
    if not file_id:
        raise HTTPException(status_code=400, detail="Invalid submission file format.")

    assignment = session.exec(
        select(Assignment).where(Assignment.submission_data_file_path == filename)
    ).first()
    if not assignment:
        raise HTTPException(
            status_code=404, detail="Assignment not found for this submission file."
        )

    data = store.read_json(file_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Submission data file not found.")

    return {
        "filename": filename,
        "assignment": AssignmentOut.model_validate(assignment).model_dump(mode="json"),
        "submission": data,
    }
