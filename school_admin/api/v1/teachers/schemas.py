from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from school_admin.core.enums import UserRole


class TeacherCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: UserRole = UserRole.TEACHER


class TeacherResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
