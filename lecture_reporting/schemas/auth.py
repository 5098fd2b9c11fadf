"""
lecture_reporting/schemas/auth.py
Signup/login payloads and the public user projection.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SignupRequest(BaseModel):
    """
    Registration payload.

    Fields are optional at the schema level so the service can report the
    first missing one in a stable order.
    """
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[str] = Field(None, description="Lecturer, Program Leader, Principal Lecturer or Student")
    faculty_id: Optional[int] = None
    program_id: Optional[int] = Field(None, description="Required for students")


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    faculty_id: Optional[int] = None
    program_id: Optional[int] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
