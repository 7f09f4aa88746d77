"""Pydantic schemas for credential endpoints."""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    msg: str
