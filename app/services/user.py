"""User account service.

Every check runs before any write. The only path that writes and then undoes
is the reset request, which clears the token again if delivery fails.
"""

import logging
import secrets
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import AuthError, ConflictError, NotFoundError, ServerError, ValidationError
from app.models.user import User
from app.schemas.user import RegisterRequest, UpdateUserRequest
from app.services.mailer import Mailer
from app.services.password import hash_password, verify_password
from app.services.reset_token import clear_reset_token, consume_reset_token, find_user_by_reset_token, issue_reset_token

logger = logging.getLogger("user_accounts")

DEFAULT_BIO = "A happiness machine..."
RESET_SENT_MSG = "A mail with the reset link has been sent if there is an account associated with that email!"
INVALID_RESET_TOKEN_MSG = "The token seems to be invalid or expired, please generate a new password reset link!"


def normalize_email(email: str) -> str:
    return email.lower().strip()


@lru_cache
def _dummy_password_hash() -> str:
    """Hash checked against when the email is unknown, so both paths cost one bcrypt round."""
    return hash_password(secrets.token_hex(16))


class UserService:
    """Registration, credentials and profile management."""

    def get_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    def get_by_id(self, db: Session, user_id: int) -> User | None:
        return db.get(User, user_id)

    def list_users(self, db: Session) -> list[User]:
        """All users, oldest first."""
        return db.query(User).order_by(User.id).all()

    def register(self, db: Session, data: RegisterRequest) -> User:
        """Create a user. Raises ConflictError if the email is taken."""
        if self.get_by_email(db, data.email):
            raise ConflictError("User already exists")

        email = normalize_email(data.email)
        user = User(
            # Unnamed accounts go by the local part of their email
            name=(data.name or "").strip() or email.split("@", 1)[0],
            email=email,
            password_hash=hash_password(data.password),
            date_of_birth=data.date_of_birth,
            gender=data.gender,
            bio=data.bio or DEFAULT_BIO,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("User already exists") from None
        db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, db: Session, email: str, password: str) -> User:
        """Return the user matching the credentials. Raises AuthError otherwise."""
        user = self.get_by_email(db, email)
        if not user:
            verify_password(password, _dummy_password_hash())
            raise AuthError("Invalid credentials")
        if not verify_password(password, user.password_hash):
            raise AuthError("Invalid credentials")
        return user

    def request_password_reset(self, db: Session, email: str, mailer: Mailer, reset_url_prefix: str) -> None:
        """Issue a reset token and deliver the link built from ``reset_url_prefix``.

        Unknown emails raise NotFoundError carrying the same message a
        successful request returns.
        """
        user = self.get_by_email(db, email)
        if not user:
            raise NotFoundError(RESET_SENT_MSG)

        token = issue_reset_token(db, user)
        try:
            mailer.send_reset_link(user.email, f"{reset_url_prefix}/{token}")
        except Exception as e:
            clear_reset_token(db, user)
            raise ServerError(e) from e

    def reset_password(self, db: Session, token: str, password: str | None) -> User:
        """Set a new password using a reset token. The token is spent on success."""
        if not password:
            raise ValidationError("Please provide a valid password!")

        user = find_user_by_reset_token(db, token)
        if not user:
            raise ValidationError(INVALID_RESET_TOKEN_MSG)

        if verify_password(password, user.password_hash):
            raise ConflictError("Please enter a password that was not previously used!")

        if not consume_reset_token(db, user, token, hash_password(password)):
            raise ValidationError(INVALID_RESET_TOKEN_MSG)

        logger.info("Password reset completed for user %s", user.id)
        return user

    def change_password(self, db: Session, user_id: int, current_password: str, new_password: str) -> User:
        """Change the password of a logged-in user."""
        user = self.get_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found!")

        if not verify_password(current_password, user.password_hash):
            raise AuthError("Current password is not correct!")

        if verify_password(new_password, user.password_hash):
            raise ConflictError("Please enter a password that you haven't used before!")

        user.password_hash = hash_password(new_password)
        db.commit()

        logger.info("Password changed for user %s", user.id)
        return user

    def update_profile(self, db: Session, user_id: int, data: UpdateUserRequest) -> User:
        """Update profile fields. Empty name or bio keeps the stored value."""
        if data.password:
            raise ValidationError("This route is not for updating password! Please use changePassword!")

        user = self.get_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")

        changes = data.model_dump(exclude_unset=True, exclude={"password"})
        if "email" in changes:
            if changes["email"] is None:
                del changes["email"]
            else:
                changes["email"] = normalize_email(changes["email"])
                other = self.get_by_email(db, changes["email"])
                if other and other.id != user.id:
                    raise ConflictError("Email is already in use")
        for field in ("name", "bio"):
            if field in changes and not (changes[field] or "").strip():
                del changes[field]

        for field, value in changes.items():
            setattr(user, field, value)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email is already in use") from None
        db.refresh(user)
        return user

    def delete_user(self, db: Session, user_id: int) -> None:
        """Delete the user's own account."""
        user = self.get_by_id(db, user_id)
        if not user:
            raise NotFoundError("No such user exists!")

        db.delete(user)
        db.commit()
        logger.info("Deleted user %s", user_id)


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
