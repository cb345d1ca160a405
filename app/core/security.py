"""Password hashing, security questions and session tokens."""
import logging
from datetime import timedelta

import bcrypt
from jose import JWTError, jwt

from app.core.clock import utcnow
from app.core.config import settings

logger = logging.getLogger(__name__)

SECURITY_QUESTIONS = [
    {"id": 1, "text": "What was your first pet's name?"},
    {"id": 2, "text": "What is your mother's maiden name?"},
    {"id": 3, "text": "What was the name of your elementary school?"},
    {"id": 4, "text": "In what city were you born?"},
]


def get_security_questions() -> list[dict]:
    return [dict(q) for q in SECURITY_QUESTIONS]


def get_security_question(question_id) -> dict | None:
    """Look up a security question by id; accepts ints or numeric strings."""
    try:
        question_id = int(question_id)
    except (TypeError, ValueError):
        return None
    for question in SECURITY_QUESTIONS:
        if question["id"] == question_id:
            return dict(question)
    return None


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def normalize_answer(answer) -> str:
    """Trim and lowercase a security answer so casing never matters."""
    if not isinstance(answer, str):
        return ""
    return answer.strip().lower()


def hash_answer(answer: str) -> str:
    return hash_password(normalize_answer(answer))


def verify_answer(answer: str, answer_hash: str) -> bool:
    return verify_password(normalize_answer(answer), answer_hash)


def create_access_token(user, expires_minutes: int | None = None) -> str:
    """Issue a signed session token for ``user``."""
    expires = utcnow() + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "exp": expires,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Return the token payload, or None if it is invalid or expired."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
