from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

# admin approves and retires products, warehouse_staff drafts and submits them
Role = Literal["user", "warehouse_staff", "admin"]


class UserBase(BaseModel):
    username: str = Field(min_length=3, max_length=150, pattern=r"^[A-Za-z0-9_.-]+$")
    email: Optional[EmailStr] = None


class UserCreate(UserBase):
    password: str = Field(min_length=6, max_length=128)


class RoleUpdate(BaseModel):
    role: Role


class UserResponse(UserBase):
    id: int
    role: Role
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenData(BaseModel):
    username: Optional[str] = None
    role: Optional[Role] = None
