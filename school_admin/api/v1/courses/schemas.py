from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    year_level: int = Field(..., ge=1, le=3)


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    year_level: Optional[int] = Field(None, ge=1, le=3)


class CourseResponse(BaseModel):
    id: UUID
    name: str
    code: Optional[str] = None
    year_level: int
    created_at: datetime

    class Config:
        from_attributes = True
