from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from school_admin.core.enums import PeriodStatus, PermissionStatus, ResubmissionPolicy


class AttendanceSubmitRequest(BaseModel):
    roster_id: UUID
    attendance: Dict[UUID, bool] = Field(
        default_factory=dict,
        description="student_id -> present. Students missing from the map are recorded absent.",
    )
    policy: Optional[ResubmissionPolicy] = Field(
        None, description="Override the configured resubmission policy for this request"
    )


class AttendanceSubmitResponse(BaseModel):
    record_id: UUID
    present: int
    absent: int
    total: int


class PeriodStatusResponse(BaseModel):
    roster_id: UUID
    period_date: date
    status: PeriodStatus


class AttendanceEntryResponse(BaseModel):
    student_id: UUID
    student_name: Optional[str] = None
    is_present: bool


class AttendanceRecordResponse(BaseModel):
    id: UUID
    roster_id: UUID
    class_id: UUID
    day_of_week: str
    period: int
    course_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    recorded_by: Optional[UUID] = None
    record_date: date
    recording_status: str
    created_at: datetime
    present: int
    absent: int
    total: int
    entries: List[AttendanceEntryResponse] = Field(default_factory=list)


class StudentAttendanceHistoryItem(BaseModel):
    record_id: UUID
    record_date: date
    period: int
    course_id: Optional[UUID] = None
    course_name: Optional[str] = None
    is_present: bool


class PendingAttendanceItem(BaseModel):
    roster_id: UUID
    class_id: UUID
    class_name: str
    course_id: Optional[UUID] = None
    course_name: Optional[str] = None
    period: int
    time: str


class PermissionRequestCreate(BaseModel):
    roster_id: UUID
    period_date: date
    reason_category: str = Field(..., min_length=1, max_length=50)
    reason_notes: Optional[str] = Field(None, max_length=1000)


class PermissionApproveRequest(BaseModel):
    comments: Optional[str] = Field(None, max_length=1000)


class PermissionRequestResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    roster_id: UUID
    class_id: UUID
    period_date: date
    period_number: int
    reason_category: str
    reason_notes: Optional[str] = None
    status: PermissionStatus
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    admin_comments: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
