"""User model for employees and administrators.

Employees log in, receive rotated checklists and submit them. Admins
manage users and assignments and are never assignment targets themselves.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

from app.core.clock import utcnow

if TYPE_CHECKING:
    from app.models.assignment import Assignment


class User(SQLModel, table=True):
    """An account that can log in.

    Credentials are stored only as bcrypt hashes. Two security questions
    (chosen from a fixed list) allow self-service password recovery; failed
    recovery attempts are counted for lockout.

    Attributes:
        id: Unique identifier (UUID).
        username: Login name, 3-30 characters (unique).
        first_name: Given name; also used to match supervisor names.
        last_name: Family name.
        password_hash: bcrypt hash of the password.
        security_question_1_id: Id of the first chosen security question.
        security_answer_1_hash: bcrypt hash of the normalised first answer.
        security_question_2_id: Id of the second chosen security question.
        security_answer_2_hash: bcrypt hash of the normalised second answer.
        password_reset_attempt_count: Consecutive failed recovery attempts.
        last_password_reset_attempt: When the last failed attempt happened.
        is_admin: Admins manage assignments and never receive them.
        assignments: Assignments where this user is the assignee.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(index=True, unique=True, min_length=3, max_length=30)
    first_name: str = ""
    last_name: str = ""
    password_hash: str
    security_question_1_id: int
    security_answer_1_hash: str
    security_question_2_id: int
    security_answer_2_hash: str
    password_reset_attempt_count: int = Field(default=0)
    last_password_reset_attempt: datetime | None = None
    is_admin: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationships
    assignments: list["Assignment"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"foreign_keys": "Assignment.user_id"},
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
