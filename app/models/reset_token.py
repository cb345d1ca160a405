"""Password reset token model.

This module defines the PasswordResetToken model which stores the short
lived token issued after a user answers their security questions. Tokens
live in the database so they survive restarts and are shared between
workers; expired rows are purged by the background scheduler.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from app.core.clock import as_utc, utcnow


class PasswordResetToken(SQLModel, table=True):
    """A one-time token allowing a password change.

    Only one token exists per username; issuing a new one replaces the
    old. The token is deleted as soon as it is used, fails to match, or is
    found to be expired.

    Attributes:
        id: Unique identifier (UUID).
        username: Account the token was issued for.
        token: Random hex string handed to the client.
        expires_at: After this moment the token is rejected.
        created_at: When the token was issued.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(index=True, unique=True)
    token: str
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > as_utc(self.expires_at)
