"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.rate_limit import limiter
from app.schemas.auth import LoginRequest, TokenResponse
from app.services.jwt import get_jwt_service
from app.services.user import get_user_service

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Authenticate and receive a JWT token."""
    user = get_user_service().authenticate(db, body.email, body.password)
    return TokenResponse(token=get_jwt_service().create_token(user.id))
