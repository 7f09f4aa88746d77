"""User account API endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.rate_limit import limiter
from app.schemas.auth import MessageResponse, TokenResponse
from app.schemas.user import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateUserRequest,
    UserResponse,
)
from app.services.jwt import get_jwt_service
from app.services.mailer import Mailer, get_mailer
from app.services.user import RESET_SENT_MSG, get_user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


def _token_response(user_id: int) -> TokenResponse:
    return TokenResponse(token=get_jwt_service().create_token(user_id))


@router.get("", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db)) -> list[UserResponse]:
    """List all users without credentials."""
    users = get_user_service().list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.post("", response_model=TokenResponse)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Register a new user and return a session token."""
    user = get_user_service().register(db, body)
    return _token_response(user.id)


@router.post("/forgotPassword", response_model=MessageResponse)
@limiter.limit("3/minute")
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
) -> MessageResponse:
    """Send a password reset link to the account's email."""
    reset_url_prefix = f"{str(request.base_url).rstrip('/')}{router.prefix}/resetPassword"
    get_user_service().request_password_reset(db, body.email, mailer, reset_url_prefix)
    return MessageResponse(msg=RESET_SENT_MSG)


@router.post("/resetPassword/{reset_token}", response_model=TokenResponse)
@limiter.limit("5/minute")
def reset_password(
    request: Request,
    reset_token: str,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Set a new password with a reset token. Returns a session token for auto-login."""
    user = get_user_service().reset_password(db, reset_token, body.password)
    return _token_response(user.id)


@router.patch("/changePassword", response_model=TokenResponse)
def change_password(
    body: ChangePasswordRequest,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Change the password of the logged-in user."""
    user = get_user_service().change_password(db, current.user_id, body.current_password, body.new_password)
    return _token_response(user.id)


@router.patch("", response_model=UserResponse)
def update_user(
    body: UpdateUserRequest,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Update the logged-in user's profile."""
    user = get_user_service().update_profile(db, current.user_id, body)
    return UserResponse.model_validate(user)


@router.delete("", status_code=204)
def delete_user(
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """Delete the logged-in user's account."""
    get_user_service().delete_user(db, current.user_id)
    return Response(status_code=204)
