"""Pydantic schemas for user account endpoints.

JSON keys are camelCase; snake_case names are accepted on input too.
"""

from datetime import date, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.services.password import MAX_PASSWORD_BYTES

PASSWORD_MIN_LENGTH = 6
# Characters; the byte limit is checked separately
PASSWORD_MAX_LENGTH = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


# A password that will be hashed
NewPassword = Annotated[
    str,
    Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH),
    AfterValidator(_check_password_bytes),
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    name: str | None = Field(default=None, max_length=256)
    email: EmailStr
    password: NewPassword
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=32)
    bio: str | None = None


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    # Optional so a missing password gets the dedicated message
    password: NewPassword | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)
    new_password: NewPassword


class UpdateUserRequest(CamelModel):
    name: str | None = Field(default=None, max_length=256)
    email: EmailStr | None = None
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=32)
    bio: str | None = None
    # Accepted only to be rejected with a pointer to changePassword
    password: str | None = None


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    date_of_birth: date | None
    gender: str | None
    bio: str
    created_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
