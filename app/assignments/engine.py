"""Checklist assignment engine.

Decides which checklist a user works on next and keeps the assignment
table consistent:

- a user holds at most one active ("assigned") assignment,
- admins never receive assignments,
- cancelling an assignment returns its checklist to the rotation queue.

Rotation is fairness ordered on ``Checklist.last_assigned_at``: checklists
that were never assigned (or were re-queued) go first, then the one handed
out longest ago. A checklist stamped today is not handed out again until
tomorrow.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, or_, select

from app.assignments.errors import (
    ActiveAssignmentConflict,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
    RecentCompletionConflict,
    SelfAssignmentError,
)
from app.core.clock import end_of_day, start_of_day, utcnow
from app.models import (
    Assignment,
    AssignmentStatus,
    Checklist,
    ChecklistType,
    User,
)

logger = logging.getLogger(__name__)

RECENT_COMPLETION_WINDOW = timedelta(hours=24)


@dataclass
class ManualAssignmentResult:
    assignment: Assignment
    message: str
    override_performed: bool


@dataclass
class CompletionResult:
    completed: Assignment
    next_assignment: Assignment | None


def get_active_assignment(session: Session, user_id: UUID) -> Assignment | None:
    """Return the user's active assignment, most recent first."""
    statement = (
        select(Assignment)
        .where(Assignment.user_id == user_id)
        .where(Assignment.status == AssignmentStatus.assigned)
        .order_by(Assignment.assigned_at.desc())
    )
    return session.exec(statement).first()


def _next_rotation_candidate(session: Session, now: datetime) -> Checklist | None:
    statement = (
        select(Checklist)
        .where(Checklist.type == ChecklistType.daily)
        .where(
            or_(
                Checklist.last_assigned_at == None,  # noqa: E711
                Checklist.last_assigned_at < start_of_day(now),
            )
        )
        .order_by(Checklist.last_assigned_at.asc().nulls_first(), Checklist.order)
    )
    return session.exec(statement).first()


def assign_next_checklist(session: Session, user: User) -> Assignment | None:
    """
    Return the user's active assignment, creating one by rotation if needed.

    Safe to call on every login: an existing active assignment is returned
    unchanged. Returns None for admins and when no daily checklist is
    eligible today.
    """
    if user.is_admin:
        logger.debug(f"User {user.username} is an admin, skipping checklist assignment")
        return None

    existing = get_active_assignment(session, user.id)
    if existing:
        logger.debug(
            f"User {user.username} already has an active assignment ({existing.id})"
        )
        return existing

    now = utcnow()
    checklist = _next_rotation_candidate(session, now)
    if not checklist:
        logger.info(f"No available checklists to assign to user {user.username}")
        return None

    assignment = Assignment(
        user_id=user.id,
        checklist_id=checklist.id,
        status=AssignmentStatus.assigned,
        assigned_at=now,
    )
    checklist.last_assigned_at = now
    checklist.updated_at = now
    session.add(assignment)
    session.add(checklist)
    try:
        session.commit()
    except IntegrityError:
        # Another request created the active assignment first
        session.rollback()
        logger.warning(
            f"Concurrent assignment detected for user {user.username}, using existing one"
        )
        return get_active_assignment(session, user.id)

    session.refresh(assignment)
    logger.info(
        f'New assignment created for user {user.username}: checklist "{checklist.title}" '
        f"({assignment.id})"
    )
    return assignment


def _parse_id(value, name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidRequestError(f"Invalid {name} format")


def _assignment_summary(assignment: Assignment) -> dict:
    return {
        "id": str(assignment.id),
        "checklist_title": assignment.checklist.title if assignment.checklist else None,
        "assigned_at": assignment.assigned_at.isoformat(),
    }


def manually_assign_checklist(
    session: Session,
    user_id,
    checklist_id,
    admin_user_id,
    override_existing: bool = False,
) -> ManualAssignmentResult:
    """
    Assign a specific checklist to a specific user on behalf of an admin.

    Checks run in a fixed order and the first failure raises: identifier
    format, self-assignment, acting admin, target user, checklist, then
    the conflicts (active assignment, recent completion) which
    ``override_existing`` bypasses. When overriding, the previous active
    assignment is cancelled and its checklist re-queued in the same commit
    that creates the new assignment.
    """
    if not user_id or not checklist_id or not admin_user_id:
        raise InvalidRequestError(
            "Missing required parameters: user_id, checklist_id and admin_user_id are required"
        )
    user_id = _parse_id(user_id, "user_id")
    checklist_id = _parse_id(checklist_id, "checklist_id")
    admin_user_id = _parse_id(admin_user_id, "admin_user_id")

    if user_id == admin_user_id:
        raise SelfAssignmentError("Administrators cannot assign checklists to themselves")

    admin = session.get(User, admin_user_id)
    if not admin:
        raise NotFoundError("Admin user not found")
    if not admin.is_admin:
        raise PermissionDeniedError("User does not have admin privileges")

    target = session.get(User, user_id)
    if not target:
        raise NotFoundError("Target user not found")
    if target.is_admin:
        raise PermissionDeniedError("Cannot assign checklists to admin users")

    checklist = session.get(Checklist, checklist_id)
    if not checklist:
        raise NotFoundError("Checklist not found")

    existing = get_active_assignment(session, user_id)
    if existing and not override_existing:
        title = existing.checklist.title
        if existing.checklist_id == checklist_id:
            raise ActiveAssignmentConflict(
                f'User already has this exact checklist assigned: "{title}". No action needed.',
                existing_assignment=_assignment_summary(existing),
                same_checklist=True,
            )
        raise ActiveAssignmentConflict(
            f'User already has an active assignment: "{title}". '
            "Use the override option to replace it.",
            existing_assignment=_assignment_summary(existing),
            same_checklist=False,
        )

    now = utcnow()
    if not override_existing:
        recent = session.exec(
            select(Assignment)
            .where(Assignment.user_id == user_id)
            .where(Assignment.checklist_id == checklist_id)
            .where(
                Assignment.status.in_(
                    [AssignmentStatus.completed, AssignmentStatus.validated]
                )
            )
            .where(Assignment.completed_at >= now - RECENT_COMPLETION_WINDOW)
            .order_by(Assignment.completed_at.desc())
        ).first()
        if recent:
            raise RecentCompletionConflict(
                f'User recently completed this checklist "{checklist.title}" on '
                f"{recent.completed_at:%Y-%m-%d}. Consider assigning a different "
                "checklist or use the override option.",
                recent_completion={
                    "id": str(recent.id),
                    "checklist_title": checklist.title,
                    "completed_at": recent.completed_at.isoformat(),
                },
            )

    if existing:
        existing.status = AssignmentStatus.cancelled
        existing.cancelled_at = now
        existing.cancelled_by_user_id = admin.id
        existing.updated_at = now
        requeued = existing.checklist
        requeued.last_assigned_at = None
        requeued.updated_at = now
        session.add(existing)
        session.add(requeued)
        # Flush the cancellation before inserting so the active index stays unique
        session.flush()
        logger.info(
            f"Admin {admin.username} cancelled assignment {existing.id} for user "
            f'{target.username}; checklist "{requeued.title}" returned to the queue'
        )

    assignment = Assignment(
        user_id=target.id,
        checklist_id=checklist.id,
        status=AssignmentStatus.assigned,
        assigned_at=now,
        assigned_by_user_id=admin.id,
    )
    checklist.last_assigned_at = now
    checklist.updated_at = now
    session.add(assignment)
    session.add(checklist)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ActiveAssignmentConflict(
            "User received another assignment while this one was being created"
        )

    session.refresh(assignment)
    logger.info(
        f"Manual assignment created by admin {admin.username}: user {target.username} "
        f'assigned checklist "{checklist.title}" ({assignment.id})'
    )
    return ManualAssignmentResult(
        assignment=assignment,
        message=f'Successfully assigned "{checklist.title}" to {target.full_name}',
        override_performed=existing is not None,
    )


def complete_assignment(
    session: Session,
    user: User,
    checklist_filename: str,
    submission_file: str | None = None,
) -> CompletionResult | None:
    """
    Mark the user's active assignment for a checklist as completed.

    Must only be called once the submission file (if any) has been written.
    Immediately rotates the user onto their next checklist. Returns None
    and logs a warning when there is no matching active assignment.
    """
    checklist = session.exec(
        select(Checklist).where(Checklist.filename == checklist_filename)
    ).first()
    if not checklist:
        logger.warning(f"Checklist not found with filename: {checklist_filename}")
        return None

    assignment = session.exec(
        select(Assignment)
        .where(Assignment.user_id == user.id)
        .where(Assignment.checklist_id == checklist.id)
        .where(Assignment.completed_at == None)  # noqa: E711
        .where(Assignment.status == AssignmentStatus.assigned)
        .order_by(Assignment.assigned_at.desc())
    ).first()
    if not assignment:
        logger.warning(
            f"No active assignment found for user {user.username} and checklist "
            f"{checklist_filename}"
        )
        return None

    now = utcnow()
    assignment.status = AssignmentStatus.completed
    assignment.completed_at = now
    assignment.updated_at = now
    if submission_file:
        assignment.submission_data_file_path = submission_file
    session.add(assignment)
    session.commit()
    session.refresh(assignment)
    logger.info(f"Assignment {assignment.id} marked as completed for user {user.username}")

    next_assignment = assign_next_checklist(session, user)
    return CompletionResult(completed=assignment, next_assignment=next_assignment)


def get_assignable_users(session: Session) -> list[User]:
    """Non-admin users, ordered by name."""
    statement = (
        select(User)
        .where(User.is_admin == False)  # noqa: E712
        .order_by(User.first_name, User.last_name)
    )
    return list(session.exec(statement).all())


def get_available_checklists(
    session: Session, checklist_type: ChecklistType | None = None
) -> list[Checklist]:
    statement = select(Checklist).order_by(Checklist.type, Checklist.order)
    if checklist_type:
        statement = statement.where(Checklist.type == checklist_type)
    return list(session.exec(statement).all())


def get_current_assignments(
    session: Session,
    user_id: UUID | None = None,
    status: AssignmentStatus | None = None,
    active_only: bool = False,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[Assignment]:
    """
    Assignments of non-admin users, newest first.

    ``active_only`` overrides ``status``. The date range filters on
    ``assigned_at`` and includes both end days.
    """
    statement = (
        select(Assignment)
        .join(User, Assignment.user_id == User.id)
        .where(User.is_admin == False)  # noqa: E712
        .order_by(Assignment.assigned_at.desc())
    )
    if user_id:
        statement = statement.where(Assignment.user_id == user_id)
    if active_only:
        statement = statement.where(Assignment.status == AssignmentStatus.assigned)
    elif status:
        statement = statement.where(Assignment.status == status)
    if date_from:
        statement = statement.where(Assignment.assigned_at >= start_of_day(date_from))
    if date_to:
        statement = statement.where(Assignment.assigned_at <= end_of_day(date_to))
    return list(session.exec(statement).all())
