"""Password reset token issuance and verification.

Only the SHA-256 digest of a reset token is stored. The plaintext leaves the
process once, through the mailer, and is presented back by the user in the
reset link.
"""

import hashlib
import secrets
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.user import User


def hash_reset_token(token: str) -> str:
    """Deterministic one-way digest used for storage and lookup."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_reset_token(db: Session, user: User) -> str:
    """Store a fresh token digest and expiry on the user. Returns the plaintext token.

    A previously pending token is overwritten.
    """
    settings = get_settings()
    token = secrets.token_hex(32)
    user.password_reset_token = hash_reset_token(token)
    user.password_reset_expires_at = datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
    db.commit()
    return token


def find_user_by_reset_token(db: Session, token: str) -> User | None:
    """Find the user holding this token, if it has not expired.

    Unknown and expired tokens are indistinguishable to the caller.
    """
    return (
        db.query(User)
        .filter(
            User.password_reset_token == hash_reset_token(token),
            User.password_reset_expires_at > datetime.utcnow(),
        )
        .first()
    )


def consume_reset_token(db: Session, user: User, token: str, password_hash: str) -> bool:
    """Set the new password hash and clear the reset fields in one conditional update.

    Returns False when the token was used or expired since it was looked up.
    """
    updated = (
        db.query(User)
        .filter(
            User.id == user.id,
            User.password_reset_token == hash_reset_token(token),
            User.password_reset_expires_at > datetime.utcnow(),
        )
        .update(
            {
                User.password_hash: password_hash,
                User.password_reset_token: None,
                User.password_reset_expires_at: None,
                User.updated_at: datetime.utcnow(),
            },
            synchronize_session=False,
        )
    )
    db.commit()
    if updated:
        db.refresh(user)
    return updated == 1


def clear_reset_token(db: Session, user: User) -> None:
    """Drop a pending token, e.g. after its delivery failed."""
    user.password_reset_token = None
    user.password_reset_expires_at = None
    db.commit()
