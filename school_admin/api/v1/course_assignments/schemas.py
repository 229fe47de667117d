from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CourseAssignmentCreate(BaseModel):
    class_id: UUID
    course_id: UUID
    teacher_id: Optional[UUID] = None
    academic_year: Optional[int] = Field(None, ge=2000, le=2100, description="Defaults to the current calendar year")


class SetTeacherRequest(BaseModel):
    teacher_id: UUID


class CourseAssignmentResponse(BaseModel):
    id: UUID
    class_id: UUID
    course_id: UUID
    teacher_id: Optional[UUID] = None
    academic_year: int
    is_active: bool
    created_at: datetime
    class_name: Optional[str] = None
    course_name: Optional[str] = None
    teacher_name: Optional[str] = None
