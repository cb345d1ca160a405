"""Supervisor validation of submitted checklists.

A supervisor receives a one-time link per submission. Opening the link
returns the submission's checkboxes and the sampled items to re-verify,
and marks the link as used before anything is returned, so the same link
cannot be worked on from two tabs. Posting corrections records the
supervisor's verdict in the submission file and moves the matching
assignment to "validated".
"""
import logging
from collections.abc import Iterable, Mapping

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.clock import utcnow
from app.models import Assignment, AssignmentStatus, User, ValidationStatus
from app.submissions.storage import SubmissionStore, filename_for, is_valid_file_id

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Base class for submission and validation failures."""

    status_code = 400

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_detail(self) -> dict:
        detail = {"message": self.message}
        detail.update(self.context)
        return detail


class InvalidSubmissionError(SubmissionError):
    pass


class SubmissionNotFoundError(SubmissionError):
    status_code = 404


class LinkAlreadyUsedError(SubmissionError):
    status_code = 410


class AlreadyValidatedError(SubmissionError):
    status_code = 410


def _load(store: SubmissionStore, file_id: str) -> dict:
    if not is_valid_file_id(file_id):
        raise SubmissionNotFoundError("Checklist not found.")
    record = store.read_json(file_id)
    if record is None:
        raise SubmissionNotFoundError("Checklist not found.")
    return record


def _already_validated(record: dict) -> AlreadyValidatedError:
    validation = record["supervisorValidation"]
    return AlreadyValidatedError(
        "This checklist has already been validated.",
        already_validated=True,
        validated_by=validation.get("supervisorName"),
        validated_at=validation.get("validatedAt"),
    )


def open_validation_link(store: SubmissionStore, file_id: str) -> dict:
    """
    Return the data a supervisor needs to validate a submission, once.

    The record is stamped ``validationLinkAccessed`` and written back
    before the payload is returned. A second call raises
    LinkAlreadyUsedError without disclosing any checkbox data.
    """
    record = _load(store, file_id)

    if record.get("validationLinkAccessed"):
        raise LinkAlreadyUsedError(
            "This validation link has already been used and is no longer valid.",
            already_used=True,
        )
    if record.get("supervisorValidation"):
        raise _already_validated(record)
    if not isinstance(record.get("randomCheckboxes"), list):
        raise InvalidSubmissionError("Random checkboxes not found in the checklist data.")

    record["validationLinkAccessed"] = True
    record["validationLinkAccessedAt"] = utcnow().isoformat()
    store.write_json(file_id, record)
    logger.info(f"Validation link for submission {file_id} opened")

    return {
        "fileId": file_id,
        "title": record.get("title"),
        "checkboxes": record.get("checkboxes", {}),
        "randomCheckboxes": record["randomCheckboxes"],
    }


def apply_corrections(record: dict, corrections: Iterable[Mapping]) -> list[str]:
    """
    Overwrite ``checked`` for each corrected item, under whichever heading
    holds it. Returns the ids that matched no item.
    """
    checkboxes = record.get("checkboxes") or {}
    unmatched = []
    for correction in corrections:
        item_id = correction["id"]
        for items in checkboxes.values():
            if isinstance(items, dict) and isinstance(items.get(item_id), dict):
                items[item_id]["checked"] = correction["checked"]
                break
        else:
            logger.warning(
                f"Validated checkbox id {item_id} not found in checklist data under any heading"
            )
            unmatched.append(item_id)
    return unmatched


def find_supervisor(session: Session, supervisor_name: str) -> User | None:
    """Best-effort match of a supervisor name to an admin by first name."""
    first_name = (supervisor_name or "").strip().split(" ")[0]
    if not first_name:
        return None
    statement = (
        select(User)
        .where(User.is_admin == True)  # noqa: E712
        .where(func.lower(User.first_name) == first_name.lower())
    )
    return session.exec(statement).first()


def mark_assignment_validated(
    session: Session, file_id: str, supervisor_name: str
) -> Assignment | None:
    """
    Move the completed assignment linked to a submission to "validated".

    Returns None, after logging, if no completed assignment references the
    submission or the database update fails. The supervisor may resolve to
    no user, in which case the validator is left unset.
    """
    filename = filename_for(file_id)
    try:
        assignment = session.exec(
            select(Assignment)
            .where(Assignment.submission_data_file_path == filename)
            .where(Assignment.status == AssignmentStatus.completed)
        ).first()
        if not assignment:
            logger.warning(f"No completed assignment found for submission file {filename}")
            return None

        supervisor = find_supervisor(session, supervisor_name)
        now = utcnow()
        assignment.status = AssignmentStatus.validated
        assignment.validated_at = now
        assignment.validated_by_user_id = supervisor.id if supervisor else None
        assignment.validation_status = ValidationStatus.approved
        assignment.updated_at = now
        session.add(assignment)
        session.commit()
        session.refresh(assignment)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error updating assignment validation status for {filename}: {e}")
        return None

    logger.info(
        f"Assignment {assignment.id} marked as validated by supervisor: {supervisor_name}"
    )
    return assignment


def submit_validation(
    session: Session,
    store: SubmissionStore,
    file_id: str,
    supervisor_name: str,
    corrections: Iterable[Mapping],
) -> dict:
    """
    Record a supervisor's corrections for a submission.

    Rejects a submission that already carries a supervisor validation.
    The file is written before the assignment bookkeeping, which is
    best-effort. Returns a summary with any unmatched item ids.
    """
    record = _load(store, file_id)
    if record.get("supervisorValidation"):
        raise _already_validated(record)

    corrections = list(corrections or [])
    unmatched = apply_corrections(record, corrections)
    record["supervisorValidation"] = {
        "supervisorName": supervisor_name,
        "validatedAt": utcnow().isoformat(),
        "validatedCheckboxes": {c["id"]: c["checked"] for c in corrections},
    }
    store.write_json(file_id, record)

    assignment = mark_assignment_validated(session, file_id, supervisor_name)
    return {
        "message": "Validation completed successfully.",
        "unmatched_ids": unmatched,
        "assignment_id": str(assignment.id) if assignment else None,
    }
