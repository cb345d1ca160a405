"""Input checks for account creation and recovery.

Each check returns an error message, or None when the input is valid.
"""
from app.core.security import get_security_question

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 8


def validate_username(username: str | None) -> str | None:
    length = len((username or "").strip())
    if length < USERNAME_MIN_LENGTH or length > USERNAME_MAX_LENGTH:
        return f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters long."
    return None


def validate_password(password: str | None) -> str | None:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."
    return None


def validate_security_answers(answers) -> str | None:
    """Exactly two answers, to two different known questions, non-blank."""
    if not isinstance(answers, list) or len(answers) != 2:
        return "Exactly two security answers are required."
    question_ids = {a.get("question_id") for a in answers}
    if len(question_ids) != 2:
        return "Security questions must be unique."
    for answer in answers:
        text = answer.get("answer")
        if (
            not get_security_question(answer.get("question_id"))
            or not isinstance(text, str)
            or not text.strip()
        ):
            return "Invalid security question or answer provided."
    return None
