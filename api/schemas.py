"""
Pydantic schemas for signup API request/response models.
"""

from typing import Any

from pydantic import BaseModel, EmailStr, Field


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] | None = None


class SignupRequest(BaseModel):
    name: str = Field(default="", max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    confirm_password: str = Field(min_length=6, max_length=128)


class ResendRequest(BaseModel):
    email: EmailStr


class VerifyRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=1, max_length=12)


class SignupUser(BaseModel):
    id: int | None = None
    email: EmailStr
    name: str | None = None
