"""Expiring password reset tokens backed by the database."""
import logging
import secrets
from datetime import timedelta

from sqlmodel import Session, select

from app.core.clock import utcnow
from app.core.config import settings
from app.models import PasswordResetToken

logger = logging.getLogger(__name__)


def issue_reset_token(session: Session, username: str) -> str:
    """Create a fresh token for ``username``, replacing any earlier one."""
    existing = session.exec(
        select(PasswordResetToken).where(PasswordResetToken.username == username)
    ).first()
    if existing:
        session.delete(existing)
        session.flush()

    token = secrets.token_hex(32)
    session.add(
        PasswordResetToken(
            username=username,
            token=token,
            expires_at=utcnow() + timedelta(minutes=settings.reset_token_ttl_minutes),
        )
    )
    session.commit()
    logger.info(f"Password reset token issued for user {username}")
    return token


def consume_reset_token(session: Session, username: str, token: str) -> bool:
    """
    Check a token and invalidate it.

    The stored token is deleted whether or not it matched, so a guessed
    token cannot be retried against the same issue.
    """
    stored = session.exec(
        select(PasswordResetToken).where(PasswordResetToken.username == username)
    ).first()
    if not stored:
        return False

    valid = secrets.compare_digest(stored.token, token) and not stored.is_expired()
    session.delete(stored)
    session.commit()
    return valid


def purge_expired_tokens(session: Session) -> int:
    """Delete every expired token. Returns the number removed."""
    expired = session.exec(
        select(PasswordResetToken).where(PasswordResetToken.expires_at < utcnow())
    ).all()
    for token in expired:
        session.delete(token)
    session.commit()
    return len(expired)
