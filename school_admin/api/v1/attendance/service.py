"""Per-period attendance: submission, status resolution, history and late-entry permissions."""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_admin.core import clock
from school_admin.core.config import settings
from school_admin.core.enums import PeriodStatus, PermissionStatus, ResubmissionPolicy
from school_admin.core.exceptions import (
    BusinessRuleError,
    DuplicateAttendance,
    NotFoundError,
    SlotNotFound,
)
from school_admin.core.models import (
    AttendanceEntry,
    AttendancePermissionRequest,
    AttendanceRecord,
    Student,
    Timetable,
    TimetableRoster,
)
from school_admin.core.period_status import resolve_period_status
from school_admin.core.periods import get_period_info

from .schemas import (
    AttendanceEntryResponse,
    AttendanceRecordResponse,
    AttendanceSubmitResponse,
    PendingAttendanceItem,
    PeriodStatusResponse,
    PermissionRequestCreate,
    PermissionRequestResponse,
    StudentAttendanceHistoryItem,
)

logger = logging.getLogger(__name__)


def _record_to_response(record: AttendanceRecord, with_entries: bool = True) -> AttendanceRecordResponse:
    present = sum(1 for e in record.entries if e.is_present)
    entries = []
    if with_entries:
        entries = [
            AttendanceEntryResponse(
                student_id=e.student_id,
                student_name=f"{e.student.first_name} {e.student.last_name}" if e.student else None,
                is_present=e.is_present,
            )
            for e in record.entries
        ]
    return AttendanceRecordResponse(
        id=record.id,
        roster_id=record.roster_id,
        class_id=record.roster.class_id,
        day_of_week=record.roster.day_of_week,
        period=record.roster.period,
        course_id=record.roster.course_id,
        teacher_id=record.roster.teacher_id,
        recorded_by=record.recorded_by,
        record_date=record.record_date,
        recording_status=record.recording_status,
        created_at=record.created_at,
        present=present,
        absent=len(record.entries) - present,
        total=len(record.entries),
        entries=entries,
    )


async def _record_ids_for_day(db: AsyncSession, roster_id: UUID, day: date) -> List[UUID]:
    result = await db.execute(
        select(AttendanceRecord.id).where(
            AttendanceRecord.roster_id == roster_id,
            AttendanceRecord.record_date == day,
        )
    )
    return list(result.scalars().all())


async def submit_course_attendance(
    db: AsyncSession,
    roster_id: UUID,
    attendance: Dict[UUID, bool],
    user_id: Optional[UUID],
    now: Optional[datetime] = None,
    policy: Optional[ResubmissionPolicy] = None,
) -> AttendanceSubmitResponse:
    """Record one attendance event for a slot: an entry for every active student of the class."""
    if now is None:
        now = clock.now()
    if policy is None:
        policy = settings.attendance_resubmission_policy

    slot = await db.get(TimetableRoster, roster_id)
    if not slot:
        raise SlotNotFound()

    students_result = await db.execute(
        select(Student.id).where(Student.class_id == slot.class_id, Student.is_active.is_(True))
    )
    student_ids = list(students_result.scalars().all())

    day = now.date()
    previous = await _record_ids_for_day(db, roster_id, day)
    if previous and policy == ResubmissionPolicy.REJECT:
        logger.warning("Rejected duplicate attendance for slot %s on %s", roster_id, day)
        raise DuplicateAttendance()
    if previous and policy == ResubmissionPolicy.OVERWRITE:
        await db.execute(delete(AttendanceEntry).where(AttendanceEntry.record_id.in_(previous)))
        await db.execute(delete(AttendanceRecord).where(AttendanceRecord.id.in_(previous)))

    record = AttendanceRecord(
        id=uuid.uuid4(),
        roster_id=roster_id,
        recorded_by=user_id,
        record_date=day,
        recording_status="on_time",
    )
    db.add(record)
    entries = [
        AttendanceEntry(record_id=record.id, student_id=sid, is_present=bool(attendance.get(sid, False)))
        for sid in student_ids
    ]
    db.add_all(entries)
    await db.commit()

    present = sum(1 for e in entries if e.is_present)
    logger.info(
        "Attendance for slot %s on %s: %d present, %d absent (policy=%s, replaced=%d)",
        roster_id, day, present, len(entries) - present, policy.value,
        len(previous) if policy == ResubmissionPolicy.OVERWRITE else 0,
    )
    return AttendanceSubmitResponse(
        record_id=record.id,
        present=present,
        absent=len(entries) - present,
        total=len(student_ids),
    )


async def get_period_status(
    db: AsyncSession,
    roster_id: UUID,
    query_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> PeriodStatusResponse:
    if now is None:
        now = clock.now()
    if query_date is None:
        query_date = now.date()

    slot = await db.get(TimetableRoster, roster_id)
    if not slot:
        return PeriodStatusResponse(roster_id=roster_id, period_date=query_date, status=PeriodStatus.UNKNOWN)

    has_record = bool(await _record_ids_for_day(db, roster_id, query_date))
    status = resolve_period_status(slot.period, query_date, now, has_record)
    return PeriodStatusResponse(roster_id=roster_id, period_date=query_date, status=status)


async def get_attendance_by_class_and_date(
    db: AsyncSession,
    class_id: UUID,
    day: date,
) -> List[AttendanceRecordResponse]:
    result = await db.execute(
        select(AttendanceRecord)
        .join(TimetableRoster, AttendanceRecord.roster_id == TimetableRoster.id)
        .options(
            selectinload(AttendanceRecord.roster),
            selectinload(AttendanceRecord.entries).selectinload(AttendanceEntry.student),
        )
        .where(TimetableRoster.class_id == class_id, AttendanceRecord.record_date == day)
        .order_by(TimetableRoster.period, AttendanceRecord.created_at)
        .execution_options(populate_existing=True)
    )
    return [_record_to_response(r) for r in result.scalars().all()]


async def list_records(db: AsyncSession, limit: int = 100) -> List[AttendanceRecordResponse]:
    """Most recent records first, without per-student entries."""
    result = await db.execute(
        select(AttendanceRecord)
        .options(selectinload(AttendanceRecord.roster), selectinload(AttendanceRecord.entries))
        .order_by(AttendanceRecord.created_at.desc())
        .execution_options(populate_existing=True)
        .limit(limit)
    )
    return [_record_to_response(r, with_entries=False) for r in result.scalars().all()]


async def get_student_attendance_history(
    db: AsyncSession,
    student_id: UUID,
    start_date: date,
    end_date: date,
) -> List[StudentAttendanceHistoryItem]:
    if end_date < start_date:
        raise BusinessRuleError("end_date must not be before start_date")
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    result = await db.execute(
        select(AttendanceEntry)
        .join(AttendanceRecord, AttendanceEntry.record_id == AttendanceRecord.id)
        .options(selectinload(AttendanceEntry.record).selectinload(AttendanceRecord.roster).selectinload(
            TimetableRoster.course
        ))
        .where(
            AttendanceEntry.student_id == student_id,
            AttendanceRecord.record_date >= start_date,
            AttendanceRecord.record_date <= end_date,
        )
        .order_by(AttendanceRecord.record_date.desc(), AttendanceRecord.created_at.desc())
    )
    items = []
    for entry in result.scalars().all():
        roster = entry.record.roster
        items.append(
            StudentAttendanceHistoryItem(
                record_id=entry.record_id,
                record_date=entry.record.record_date,
                period=roster.period,
                course_id=roster.course_id,
                course_name=roster.course.name if roster.course else None,
                is_present=entry.is_present,
            )
        )
    return items


async def get_teacher_pending_attendance(
    db: AsyncSession,
    teacher_id: UUID,
    now: Optional[datetime] = None,
) -> List[PendingAttendanceItem]:
    """Today's slots of a teacher in active timetables that have no attendance record yet."""
    if now is None:
        now = clock.now()
    today = now.date()
    slots_result = await db.execute(
        select(TimetableRoster)
        .join(Timetable, TimetableRoster.timetable_id == Timetable.id)
        .options(selectinload(TimetableRoster.school_class), selectinload(TimetableRoster.course))
        .where(
            TimetableRoster.teacher_id == teacher_id,
            TimetableRoster.day_of_week == clock.weekday_name(today),
            Timetable.is_active.is_(True),
        )
        .order_by(TimetableRoster.period)
    )
    slots = slots_result.scalars().all()
    if not slots:
        return []
    recorded_result = await db.execute(
        select(AttendanceRecord.roster_id).where(
            AttendanceRecord.roster_id.in_([s.id for s in slots]),
            AttendanceRecord.record_date == today,
        )
    )
    recorded = set(recorded_result.scalars().all())
    pending = []
    for slot in slots:
        if slot.id in recorded:
            continue
        info = get_period_info(slot.period)
        pending.append(
            PendingAttendanceItem(
                roster_id=slot.id,
                class_id=slot.class_id,
                class_name=slot.school_class.name if slot.school_class else "Unknown",
                course_id=slot.course_id,
                course_name=slot.course.name if slot.course else None,
                period=slot.period,
                time=info.time_window if info else "Unknown",
            )
        )
    return pending


# ----- Permission requests -----
async def request_permission(
    db: AsyncSession,
    teacher_id: UUID,
    payload: PermissionRequestCreate,
) -> PermissionRequestResponse:
    slot = await db.get(TimetableRoster, payload.roster_id)
    if not slot:
        raise SlotNotFound()
    obj = AttendancePermissionRequest(
        teacher_id=teacher_id,
        roster_id=slot.id,
        class_id=slot.class_id,
        period_date=payload.period_date,
        period_number=slot.period,
        reason_category=payload.reason_category,
        reason_notes=payload.reason_notes,
        status=PermissionStatus.pending.value,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Teacher %s requested attendance permission for slot %s on %s", teacher_id, slot.id, obj.period_date)
    return PermissionRequestResponse.model_validate(obj)


async def list_pending_permission_requests(db: AsyncSession) -> List[PermissionRequestResponse]:
    result = await db.execute(
        select(AttendancePermissionRequest)
        .where(AttendancePermissionRequest.status == PermissionStatus.pending.value)
        .order_by(AttendancePermissionRequest.created_at.desc())
    )
    return [PermissionRequestResponse.model_validate(r) for r in result.scalars().all()]


async def approve_permission(
    db: AsyncSession,
    request_id: UUID,
    admin_id: UUID,
    comments: Optional[str] = None,
) -> PermissionRequestResponse:
    obj = await db.get(AttendancePermissionRequest, request_id)
    if not obj:
        raise NotFoundError("Permission request not found")
    if obj.status != PermissionStatus.pending.value:
        raise BusinessRuleError("Permission request is not pending")
    obj.status = PermissionStatus.approved.value
    obj.approved_by = admin_id
    obj.approved_at = datetime.now(timezone.utc)
    obj.admin_comments = comments
    await db.commit()
    await db.refresh(obj)
    logger.info("Permission request %s approved by %s", obj.id, admin_id)
    return PermissionRequestResponse.model_validate(obj)
