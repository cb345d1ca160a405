"""Errors raised by the assignment engine.

Each error carries a human-readable message and a ``context`` dict with
whatever the caller needs to decide what to do next (for example the
existing assignment that blocks a manual assignment).
"""


class AssignmentError(Exception):
    """Base class for assignment engine failures."""

    status_code = 400

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_detail(self) -> dict:
        detail = {"message": self.message}
        detail.update(self.context)
        return detail


class InvalidRequestError(AssignmentError):
    """Missing or malformed identifiers."""


class SelfAssignmentError(AssignmentError):
    """An admin tried to assign a checklist to themselves."""


class PermissionDeniedError(AssignmentError):
    status_code = 403


class NotFoundError(AssignmentError):
    status_code = 404


class ActiveAssignmentConflict(AssignmentError):
    """The target user already holds an active assignment."""

    status_code = 409


class RecentCompletionConflict(AssignmentError):
    """The target user completed the same checklist within the last day."""

    status_code = 409
