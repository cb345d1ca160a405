"""Checklist model for the sanitation checklist catalogue.

This module defines the Checklist model which represents one named,
ordered checklist template (an HTML form served to employees). Checklists
are seeded from the checklist directory and rotated between users by the
assignment engine.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

from app.core.clock import utcnow

if TYPE_CHECKING:
    from app.models.assignment import Assignment


class ChecklistType(str, Enum):
    """How often a checklist is meant to be worked through."""
    daily = "daily"
    weekly = "weekly"
    quarterly = "quarterly"


class Checklist(SQLModel, table=True):
    """A checklist template that can be assigned to employees.

    The rotation engine only looks at ``last_assigned_at`` to decide which
    checklist is handed out next: never-assigned (null) checklists go
    first, then the one assigned longest ago. Cancelling an assignment
    clears the field again so the checklist returns to the queue.

    Attributes:
        id: Unique identifier (UUID).
        filename: Stable filename of the checklist form (unique).
        title: Human-readable title shown to users and supervisors.
        type: One of "daily", "weekly" or "quarterly".
        order: Display position within its type.
        last_assigned_at: When the checklist was last handed out, or None
            if it was never assigned or has been re-queued.
        created_at: Row creation timestamp.
        updated_at: Last modification timestamp.
        assignments: Every assignment ever made for this checklist.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    filename: str = Field(index=True, unique=True)
    title: str
    type: ChecklistType = Field(index=True)
    order: int = Field(default=0)
    last_assigned_at: datetime | None = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationships
    assignments: list["Assignment"] = Relationship(back_populates="checklist")
