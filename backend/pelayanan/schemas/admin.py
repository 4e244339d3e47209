"""Schemas for the administrator login endpoint."""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    # Optional so blank credentials surface as a 400 from the service
    username: Optional[str] = Field(default=None, description="Username or email")
    password: Optional[str] = Field(default=None)


class AdminInfo(BaseModel):
    id: uuid.UUID
    username: str
    email: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login berhasil"
    admin: AdminInfo
    access_token: str
    token_type: str = "bearer"
