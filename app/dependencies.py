"""Authentication dependencies for FastAPI routes."""

from dataclasses import dataclass

from fastapi import Request

from app.exceptions import AuthError
from app.services.jwt import get_jwt_service

TOKEN_HEADER_NAME = "x-auth-token"


@dataclass
class CurrentUser:
    """Authenticated user context."""

    user_id: int


def get_token_from_request(request: Request) -> str | None:
    """Bearer token from the Authorization header, else the x-auth-token header."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.headers.get(TOKEN_HEADER_NAME)


def get_current_user(request: Request) -> CurrentUser:
    """Extract and validate the session token. Raises 401 if missing or invalid."""
    token = get_token_from_request(request)
    if not token:
        raise AuthError("No token, authorization denied")

    jwt_service = get_jwt_service()
    payload = jwt_service.decode_token(token)
    if not payload or not str(payload.get("sub", "")).isdigit():
        raise AuthError("Token is not valid")

    return CurrentUser(user_id=int(payload["sub"]))
