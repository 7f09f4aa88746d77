"""JWT Token Service."""

from datetime import datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import JWTConfig, get_settings


class JWTService:
    """Issues and validates stateless session tokens."""

    def __init__(self, config: JWTConfig) -> None:
        self.secret_key = config.secret_key
        self.algorithm = config.algorithm
        self.expire_minutes = config.expire_minutes

    def create_token(self, user_id: int) -> str:
        """Create a JWT carrying only the user id."""
        expire = datetime.utcnow() + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": str(user_id),
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Decode and validate a JWT token. Returns None if invalid."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService(get_settings().jwt_config())
    return _jwt_service
