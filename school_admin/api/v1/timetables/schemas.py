from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from school_admin.core.enums import DayOfWeek, PeriodType


class TimetableCreate(BaseModel):
    academic_year: str = Field(..., description="YYYY-YYYY, e.g. 2025-2026")
    class_id: UUID
    term: int = Field(..., ge=1, le=3)


class AssignSlotRequest(BaseModel):
    roster_id: UUID
    assignment_id: UUID


class ClearSlotRequest(BaseModel):
    roster_id: UUID


class RosterSlotResponse(BaseModel):
    id: UUID
    timetable_id: UUID
    class_id: UUID
    day_of_week: DayOfWeek
    period: int
    course_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class TimetableResponse(BaseModel):
    id: UUID
    class_id: UUID
    academic_year: str
    year: int
    term: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TimetableDetailResponse(TimetableResponse):
    slots: List[RosterSlotResponse] = Field(default_factory=list)


class GridCell(BaseModel):
    """One period of one day in the class timetable view."""

    roster_id: Optional[UUID] = None
    period: int
    time: str
    type: PeriodType
    subject: str = ""
    teacher: str = ""
    course_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None


class GridDay(BaseModel):
    day: DayOfWeek
    periods: List[GridCell]


class ClassTimetableResponse(BaseModel):
    timetable_id: UUID
    class_id: UUID
    academic_year: str
    term: int
    days: List[GridDay]


class TeacherScheduleItem(BaseModel):
    roster_id: UUID
    timetable_id: UUID
    class_id: UUID
    class_name: Optional[str] = None
    course_id: Optional[UUID] = None
    course_name: Optional[str] = None
    day_of_week: DayOfWeek
    period: int
    time: str


class PeriodResponse(BaseModel):
    number: int
    time: str
    type: PeriodType
