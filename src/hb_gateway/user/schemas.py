"""Auth request/response bodies. Routers wrap every response in ApiResponse."""

import re

from pydantic import BaseModel, EmailStr, Field, field_validator

_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"\d")


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def letters_and_digits(cls, v: str) -> str:
        if not _LETTER.search(v):
            raise ValueError("Password must contain at least one letter")
        if not _DIGIT.search(v):
            raise ValueError("Password must contain at least one digit")
        return v


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class UserInfo(BaseModel):
    user_id: str
    username: str
    email: str
    is_admin: bool = False
    last_login_at: str | None = None


class RegisterResponse(BaseModel):
    user_id: str
    username: str
    email: str
    is_admin: bool
    created_at: str


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds until access_token expires
    user: UserInfo


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int
