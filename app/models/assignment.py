"""Assignment model binding one user to one checklist.

This module defines the Assignment model, the record the rotation engine
creates and moves through its lifecycle:

    assigned -> completed -> validated
    assigned -> cancelled          (admin override)

Rows are never deleted so the full history stays auditable.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, Relationship, SQLModel

from app.core.clock import utcnow

if TYPE_CHECKING:
    from app.models.checklist import Checklist
    from app.models.user import User


class AssignmentStatus(str, Enum):
    assigned = "assigned"
    completed = "completed"
    validated = "validated"
    overdue = "overdue"
    cancelled = "cancelled"


class ValidationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


ACTIVE_ONLY = text("status = 'assigned'")


class Assignment(SQLModel, table=True):
    """A checklist handed to a user.

    A user holds at most one assignment with status "assigned" at a time.
    The partial unique index below enforces that at the database level, so
    two racing requests cannot both create an active assignment.

    Attributes:
        id: Unique identifier (UUID).
        user_id: The assignee.
        checklist_id: The assigned checklist.
        status: Lifecycle state (see AssignmentStatus).
        assigned_at: When the assignment was created.
        completed_at: When the user submitted the checklist.
        validated_at: When a supervisor validated the submission.
        validation_status: Supervisor verdict, once validated.
        submission_data_file_path: Filename of the stored submission JSON.
        assigned_by_user_id: Admin who assigned it manually, or None for
            automatic rotation.
        validated_by_user_id: Admin matched to the validating supervisor,
            if one could be resolved.
        cancelled_at: When an admin override cancelled the assignment.
        cancelled_by_user_id: Admin who cancelled it.
    """
    __table_args__ = (
        Index(
            "uq_assignment_active_user",
            "user_id",
            unique=True,
            sqlite_where=ACTIVE_ONLY,
            postgresql_where=ACTIVE_ONLY,
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    checklist_id: UUID = Field(foreign_key="checklist.id", index=True)
    status: AssignmentStatus = Field(default=AssignmentStatus.assigned, index=True)
    assigned_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None
    validated_at: datetime | None = None
    validation_status: ValidationStatus | None = None
    submission_data_file_path: str | None = Field(default=None, index=True)
    assigned_by_user_id: UUID | None = Field(default=None, foreign_key="user.id")
    validated_by_user_id: UUID | None = Field(default=None, foreign_key="user.id")
    cancelled_at: datetime | None = None
    cancelled_by_user_id: UUID | None = Field(default=None, foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationships
    user: Optional["User"] = Relationship(
        back_populates="assignments",
        sa_relationship_kwargs={"foreign_keys": "Assignment.user_id"},
    )
    checklist: Optional["Checklist"] = Relationship(back_populates="assignments")
    validator: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "Assignment.validated_by_user_id"},
    )
    assigned_by: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "Assignment.assigned_by_user_id"},
    )
    cancelled_by: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "Assignment.cancelled_by_user_id"},
    )
