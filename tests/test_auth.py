"""Tests for login and bearer token handling."""

from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.config import JWTConfig
from app.services.jwt import JWTService, get_jwt_service


class TestLogin:
    """Tests for user login."""

    def test_login_success(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/login", json={"email": "test@example.com", "password": "password123"})
        assert response.status_code == 200
        token = response.json()["token"]
        assert get_jwt_service().decode_token(token)["sub"] == str(test_user["user_id"])

    def test_login_wrong_password(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/login", json={"email": "test@example.com", "password": "wrongpassword"})
        assert response.status_code == 401
        assert response.json() == {"msg": "Invalid credentials"}

    def test_login_unknown_email(self, client: TestClient):
        """Unknown email fails the same way as a wrong password."""
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "password123"})
        assert response.status_code == 401
        assert response.json() == {"msg": "Invalid credentials"}

    def test_login_case_insensitive(self, client: TestClient, test_user: dict):
        response = client.post("/api/auth/login", json={"email": "Test@Example.com", "password": "password123"})
        assert response.status_code == 200

    def test_login_multibyte_password_over_72_bytes(self, client: TestClient, test_user: dict):
        """A password bcrypt could never have hashed is a failed login, not a server error."""
        response = client.post("/api/auth/login", json={"email": "test@example.com", "password": "é" * 60})
        assert response.status_code == 401
        assert response.json() == {"msg": "Invalid credentials"}

    def test_login_unknown_email_still_checks_a_hash(self, client: TestClient):
        """Unknown emails pay for one bcrypt check so timing does not reveal registration."""
        with patch("app.services.user.verify_password", return_value=False) as verify:
            response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "password123"})
        assert response.status_code == 401
        verify.assert_called_once()
        assert verify.call_args[0][0] == "password123"


class TestBearerToken:
    """Tests for the authenticated-route dependency."""

    def test_missing_token(self, client: TestClient):
        response = client.delete("/api/users")
        assert response.status_code == 401
        assert response.json() == {"msg": "No token, authorization denied"}

    def test_invalid_token(self, client: TestClient):
        response = client.delete("/api/users", headers={"Authorization": "Bearer invalid.token.here"})
        assert response.status_code == 401
        assert response.json() == {"msg": "Token is not valid"}

    def test_x_auth_token_header(self, client: TestClient, test_user: dict):
        response = client.patch("/api/users", json={"bio": "via header"}, headers={"x-auth-token": test_user["token"]})
        assert response.status_code == 200
        assert response.json()["bio"] == "via header"

    def test_expired_token(self, client: TestClient, test_user: dict):
        service = get_jwt_service()
        expired = JWTService(
            JWTConfig(secret_key=service.secret_key, algorithm=service.algorithm, expire_minutes=-1)
        ).create_token(test_user["user_id"])
        response = client.delete("/api/users", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401

    def test_token_signed_with_other_key(self, client: TestClient, test_user: dict):
        forged = JWTService(JWTConfig(secret_key="other-key", algorithm="HS256", expire_minutes=5)).create_token(
            test_user["user_id"]
        )
        response = client.delete("/api/users", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401


class TestJWTService:
    """Tests for the session token issuer."""

    def test_token_carries_only_user_id(self):
        service = JWTService(JWTConfig(secret_key="k", algorithm="HS256", expire_minutes=60))
        payload = service.decode_token(service.create_token(42))
        assert set(payload) == {"sub", "exp"}
        assert payload["sub"] == "42"

    def test_expiry_from_config(self):
        service = JWTService(JWTConfig(secret_key="k", algorithm="HS256", expire_minutes=30))
        payload = service.decode_token(service.create_token(1))
        other = service.decode_token(
            JWTService(JWTConfig(secret_key="k", algorithm="HS256", expire_minutes=90)).create_token(1)
        )
        assert timedelta(seconds=other["exp"] - payload["exp"]) >= timedelta(minutes=59)

    def test_decode_garbage(self):
        service = JWTService(JWTConfig(secret_key="k", algorithm="HS256", expire_minutes=60))
        assert service.decode_token("not-a-token") is None


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client: TestClient):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["app"] == "user-accounts"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
