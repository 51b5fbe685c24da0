from datetime import datetime
from typing import Optional

from ninja import Schema
from pydantic import EmailStr, Field, field_validator


class RegisterSchema(Schema):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1, max_length=150)
    last_name: str = Field(..., min_length=1, max_length=150)

    class Config:
        extra = "forbid"

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class LoginSchema(Schema):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class UserResponseSchema(Schema):
    """Public view of an account"""
    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: str
    date_joined: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(Schema):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserResponseSchema


class MeResponse(Schema):
    user: UserResponseSchema


class MessageResponse(Schema):
    message: str
