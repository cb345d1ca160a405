"""Accept a completed checklist from an employee."""
import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.assignments.engine import complete_assignment
from app.models import User
from app.submissions.mailer import send_validation_request
from app.submissions.sampling import select_random_checkboxes
from app.submissions.storage import SubmissionStore, filename_for
from app.submissions.validation import InvalidSubmissionError

logger = logging.getLogger(__name__)

# Keys written by the server over a submission's lifetime; never taken from the form
SERVER_KEYS = frozenset(
    {
        "userId",
        "randomCheckboxes",
        "validationLinkAccessed",
        "validationLinkAccessedAt",
        "supervisorValidation",
    }
)


def validation_url(base_url: str, file_id: str) -> str:
    return f"{base_url.rstrip('/')}/app/validate-checklist/{file_id}"


def submit_checklist(
    session: Session,
    store: SubmissionStore,
    user: User,
    form: dict,
    base_url: str,
    send_email: Callable[[str, str, str, str], bool] = send_validation_request,
) -> dict:
    """
    Persist a submission, complete the assignment and notify the supervisor.

    Order matters: the file is written first, then the assignment is
    completed (which rotates the user onto their next checklist), then the
    supervisor is emailed. Failures after the file write are logged and
    reported but do not fail the submission.
    """
    if not form.get("title"):
        raise InvalidSubmissionError("Page title is missing from the submission.")
    if not isinstance(form.get("checkboxes"), dict):
        raise InvalidSubmissionError("Checkboxes data is missing or invalid.")
    if not form.get("supervisorEmail"):
        raise InvalidSubmissionError("Supervisor email is required")

    file_id = store.new_file_id()
    filename = filename_for(file_id)
    record = {key: value for key, value in form.items() if key not in SERVER_KEYS}
    record["userId"] = str(user.id)
    record["randomCheckboxes"] = select_random_checkboxes(form["checkboxes"])
    store.write_json(file_id, record)
    logger.info(f"Submission {filename} saved for user {user.username}")

    assignment_id = None
    next_assignment_id = None
    checklist_filename = form.get("checklistFilename")
    if checklist_filename:
        try:
            result = complete_assignment(session, user, checklist_filename, filename)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Error completing assignment for submission {filename}: {e}")
            result = None
        if result:
            assignment_id = str(result.completed.id)
            if result.next_assignment:
                next_assignment_id = str(result.next_assignment.id)
    else:
        logger.warning(f"No checklist filename provided in submission {filename}")

    email_sent = send_email(
        form["supervisorEmail"], validation_url(base_url, file_id), filename, form["title"]
    )
    if not email_sent:
        logger.error(f"Failed to email supervisor for submission {filename}")

    return {
        "message": (
            "Form submitted and email sent!"
            if email_sent
            else "Form submitted, but the supervisor email could not be sent."
        ),
        "file_id": file_id,
        "filename": filename,
        "email_sent": email_sent,
        "assignment_id": assignment_id,
        "next_assignment_id": next_assignment_id,
    }
