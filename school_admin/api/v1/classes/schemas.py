from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    year_level: int = Field(..., ge=1, le=3)


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    year_level: Optional[int] = Field(None, ge=1, le=3)


class ClassResponse(BaseModel):
    id: UUID
    name: str
    year_level: int
    student_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
