from app.models.assignment import Assignment, AssignmentStatus, ValidationStatus
from app.models.checklist import Checklist, ChecklistType
from app.models.reset_token import PasswordResetToken
from app.models.user import User

__all__ = [
    "Assignment",
    "AssignmentStatus",
    "ValidationStatus",
    "Checklist",
    "ChecklistType",
    "PasswordResetToken",
    "User",
]
