from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


def _normalize_code(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().upper()
    return value or None


class CategoryBase(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    code: Optional[str] = Field(default=None, max_length=10)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v):
        return _normalize_code(v)


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    code: Optional[str] = Field(default=None, max_length=10)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v):
        return _normalize_code(v)


class CategoryResponse(CategoryBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
