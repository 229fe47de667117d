"""Timetable grid creation, slot assignment rules and activation."""

import logging
import uuid
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from school_admin.core import clock
from school_admin.core.academic_year import validate_academic_year
from school_admin.core.enums import WEEKDAYS
from school_admin.core.exceptions import (
    AssignmentNotFound,
    BusinessRuleError,
    ClassMismatch,
    ConflictError,
    DuplicateTimetable,
    InvalidAcademicYear,
    InvalidPeriodType,
    NotFoundError,
    SlotNotFound,
    TeacherDoubleBooked,
    TimetableLocked,
    TimetableNotFound,
)
from school_admin.core.models import (
    AttendanceRecord,
    ClassCourseAssignment,
    SchoolClass,
    Timetable,
    TimetableRoster,
)
from school_admin.core.periods import PERIODS_PER_DAY, get_all_periods, get_period_info, is_lesson_period

from .schemas import (
    ClassTimetableResponse,
    GridCell,
    GridDay,
    RosterSlotResponse,
    TeacherScheduleItem,
    TimetableDetailResponse,
    TimetableResponse,
)

logger = logging.getLogger(__name__)


def _to_response(t: Timetable) -> TimetableResponse:
    return TimetableResponse(
        id=t.id,
        class_id=t.class_id,
        academic_year=t.academic_year,
        year=t.year,
        term=t.term,
        is_active=t.is_active,
        created_at=t.created_at,
    )


def _slot_sort_key(slot: TimetableRoster):
    return WEEKDAYS.index(slot.day_of_week), slot.period


def _slot_to_response(slot: TimetableRoster) -> RosterSlotResponse:
    return RosterSlotResponse.model_validate(slot)


async def _load_slot(db: AsyncSession, roster_id: UUID) -> TimetableRoster:
    result = await db.execute(
        select(TimetableRoster)
        .options(selectinload(TimetableRoster.timetable))
        .where(TimetableRoster.id == roster_id)
        .execution_options(populate_existing=True)
    )
    slot = result.scalar_one_or_none()
    if not slot:
        raise SlotNotFound()
    return slot


async def create_timetable(
    db: AsyncSession,
    academic_year: str,
    class_id: UUID,
    term: int,
) -> TimetableDetailResponse:
    """Create an inactive timetable and its 5 x 11 grid of empty slots in one transaction."""
    validation = validate_academic_year(academic_year)
    if not validation.valid:
        raise InvalidAcademicYear(validation.message or "Invalid academic year")
    cl = await db.get(SchoolClass, class_id)
    if not cl:
        raise NotFoundError("Class not found")
    existing = await db.execute(
        select(Timetable.id).where(
            Timetable.class_id == class_id,
            Timetable.academic_year == academic_year,
            Timetable.term == term,
        )
    )
    if existing.scalar_one_or_none():
        raise DuplicateTimetable()

    timetable = Timetable(
        id=uuid.uuid4(),
        class_id=class_id,
        academic_year=academic_year,
        year=validation.start_year,
        term=term,
        is_active=False,
    )
    db.add(timetable)
    slots = [
        TimetableRoster(
            timetable_id=timetable.id,
            class_id=class_id,
            day_of_week=day,
            period=period,
            course_id=None,
            teacher_id=None,
        )
        for day in WEEKDAYS
        for period in range(1, PERIODS_PER_DAY + 1)
    ]
    db.add_all(slots)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateTimetable()
    await db.refresh(timetable)
    logger.info(
        "Created timetable %s for class %s (%s term %s) with %d slots",
        timetable.id, class_id, academic_year, term, len(slots),
    )
    return TimetableDetailResponse(
        **_to_response(timetable).model_dump(),
        slots=[_slot_to_response(s) for s in sorted(slots, key=_slot_sort_key)],
    )


async def list_timetables(
    db: AsyncSession,
    class_id: Optional[UUID] = None,
    academic_year: Optional[str] = None,
    term: Optional[int] = None,
) -> List[TimetableResponse]:
    stmt = select(Timetable)
    if class_id is not None:
        stmt = stmt.where(Timetable.class_id == class_id)
    if academic_year is not None:
        stmt = stmt.where(Timetable.academic_year == academic_year)
    if term is not None:
        stmt = stmt.where(Timetable.term == term)
    stmt = stmt.order_by(Timetable.academic_year.desc(), Timetable.term)
    result = await db.execute(stmt)
    return [_to_response(t) for t in result.scalars().all()]


async def get_timetable(db: AsyncSession, timetable_id: UUID) -> Optional[TimetableDetailResponse]:
    result = await db.execute(
        select(Timetable).options(selectinload(Timetable.slots)).where(Timetable.id == timetable_id)
        .execution_options(populate_existing=True)
    )
    t = result.scalar_one_or_none()
    if not t:
        return None
    return TimetableDetailResponse(
        **_to_response(t).model_dump(),
        slots=[_slot_to_response(s) for s in sorted(t.slots, key=_slot_sort_key)],
    )


async def assign_slot(db: AsyncSession, roster_id: UUID, assignment_id: UUID) -> RosterSlotResponse:
    """Put a class-course assignment (course and teacher) into one grid slot.

    The checks run in a fixed order and the first failing one wins.
    """
    slot = await _load_slot(db, roster_id)
    if slot.timetable.is_active:
        raise TimetableLocked()
    if not is_lesson_period(slot.period):
        raise InvalidPeriodType()

    assignment = await db.get(ClassCourseAssignment, assignment_id)
    if not assignment:
        raise AssignmentNotFound()
    if assignment.class_id != slot.class_id:
        raise ClassMismatch()

    if assignment.teacher_id:
        # Read-then-write: concurrent assignments of one teacher can both pass this check.
        conflict = await db.execute(
            select(TimetableRoster.id)
            .join(Timetable, TimetableRoster.timetable_id == Timetable.id)
            .where(
                TimetableRoster.teacher_id == assignment.teacher_id,
                TimetableRoster.day_of_week == slot.day_of_week,
                TimetableRoster.period == slot.period,
                TimetableRoster.id != slot.id,
                Timetable.id != slot.timetable_id,
                Timetable.academic_year == slot.timetable.academic_year,
                Timetable.term == slot.timetable.term,
                Timetable.is_active.is_(True),
            )
            .limit(1)
        )
        if conflict.scalar_one_or_none() is not None:
            logger.warning(
                "Teacher %s already booked on %s period %s", assignment.teacher_id, slot.day_of_week, slot.period
            )
            raise TeacherDoubleBooked()

    slot.course_id = assignment.course_id
    slot.teacher_id = assignment.teacher_id
    await db.commit()
    await db.refresh(slot)
    logger.info("Assigned course %s / teacher %s to slot %s", slot.course_id, slot.teacher_id, slot.id)
    return _slot_to_response(slot)


async def clear_slot(db: AsyncSession, roster_id: UUID) -> RosterSlotResponse:
    """Remove course and teacher from a lesson slot of an inactive timetable."""
    slot = await _load_slot(db, roster_id)
    if slot.timetable.is_active:
        raise TimetableLocked()
    if not is_lesson_period(slot.period):
        raise InvalidPeriodType()
    slot.course_id = None
    slot.teacher_id = None
    await db.commit()
    await db.refresh(slot)
    logger.info("Cleared slot %s", slot.id)
    return _slot_to_response(slot)


async def _find_teacher_clash(db: AsyncSession, timetable: Timetable):
    """First (teacher, day, period) of this timetable already taken in another active timetable."""
    other_slot = aliased(TimetableRoster)
    other_tt = aliased(Timetable)
    result = await db.execute(
        select(TimetableRoster.teacher_id, TimetableRoster.day_of_week, TimetableRoster.period)
        .join(
            other_slot,
            (other_slot.teacher_id == TimetableRoster.teacher_id)
            & (other_slot.day_of_week == TimetableRoster.day_of_week)
            & (other_slot.period == TimetableRoster.period),
        )
        .join(other_tt, other_slot.timetable_id == other_tt.id)
        .where(
            TimetableRoster.timetable_id == timetable.id,
            TimetableRoster.teacher_id.is_not(None),
            other_tt.id != timetable.id,
            other_tt.academic_year == timetable.academic_year,
            other_tt.term == timetable.term,
            other_tt.is_active.is_(True),
        )
        .limit(1)
    )
    return result.first()


async def activate_timetable(db: AsyncSession, timetable_id: UUID) -> TimetableResponse:
    """Deactivate every other timetable of the class, then activate this one (one transaction)."""
    timetable = await db.get(Timetable, timetable_id)
    if not timetable:
        raise TimetableNotFound()
    clash = await _find_teacher_clash(db, timetable)
    if clash is not None:
        teacher_id, day, period = clash
        logger.warning(
            "Activation of %s would double-book teacher %s on %s period %s", timetable.id, teacher_id, day, period
        )
        raise TeacherDoubleBooked()
    await db.execute(
        update(Timetable)
        .where(
            Timetable.class_id == timetable.class_id,
            Timetable.id != timetable.id,
            Timetable.is_active.is_(True),
        )
        .values(is_active=False)
    )
    timetable.is_active = True
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Another timetable for this class was activated concurrently")
    await db.refresh(timetable)
    logger.info("Activated timetable %s for class %s", timetable.id, timetable.class_id)
    return _to_response(timetable)


async def deactivate_timetable(db: AsyncSession, timetable_id: UUID) -> TimetableResponse:
    timetable = await db.get(Timetable, timetable_id)
    if not timetable:
        raise TimetableNotFound()
    timetable.is_active = False
    await db.commit()
    await db.refresh(timetable)
    logger.info("Deactivated timetable %s", timetable.id)
    return _to_response(timetable)


async def delete_timetable(db: AsyncSession, timetable_id: UUID) -> None:
    """Delete an inactive timetable and its slots. Slots with attendance history block deletion."""
    timetable = await db.get(Timetable, timetable_id)
    if not timetable:
        raise TimetableNotFound()
    if timetable.is_active:
        raise TimetableLocked("Cannot delete active timetable. Deactivate it first.")
    recorded = await db.execute(
        select(AttendanceRecord.id)
        .join(TimetableRoster, AttendanceRecord.roster_id == TimetableRoster.id)
        .where(TimetableRoster.timetable_id == timetable_id)
        .limit(1)
    )
    if recorded.scalar_one_or_none() is not None:
        raise BusinessRuleError("Cannot delete a timetable that already has attendance records")
    await db.execute(delete(TimetableRoster).where(TimetableRoster.timetable_id == timetable_id))
    await db.delete(timetable)
    await db.commit()
    logger.info("Deleted timetable %s", timetable_id)


async def get_class_timetable(db: AsyncSession, class_id: UUID) -> Optional[ClassTimetableResponse]:
    """Active timetable of a class as 5 days x 11 periods. None when no timetable is active."""
    result = await db.execute(
        select(Timetable)
        .options(
            selectinload(Timetable.slots).selectinload(TimetableRoster.course),
            selectinload(Timetable.slots).selectinload(TimetableRoster.teacher),
        )
        .where(Timetable.class_id == class_id, Timetable.is_active.is_(True))
        .execution_options(populate_existing=True)
    )
    timetable = result.scalar_one_or_none()
    if not timetable:
        return None

    by_cell = {(s.day_of_week, s.period): s for s in timetable.slots}
    days = []
    for day in WEEKDAYS:
        cells = []
        for period in get_all_periods():
            slot = by_cell.get((day, period.number))
            subject = ""
            if slot is not None and slot.course is not None:
                subject = slot.course.name
            elif not is_lesson_period(period.number):
                subject = period.category.value
            cells.append(
                GridCell(
                    roster_id=slot.id if slot else None,
                    period=period.number,
                    time=period.time_window,
                    type=period.category,
                    subject=subject,
                    teacher=slot.teacher.full_name if slot and slot.teacher else "",
                    course_id=slot.course_id if slot else None,
                    teacher_id=slot.teacher_id if slot else None,
                )
            )
        days.append(GridDay(day=day, periods=cells))
    return ClassTimetableResponse(
        timetable_id=timetable.id,
        class_id=timetable.class_id,
        academic_year=timetable.academic_year,
        term=timetable.term,
        days=days,
    )


async def get_teacher_schedule(
    db: AsyncSession,
    teacher_id: UUID,
    day: Optional[date] = None,
) -> List[TeacherScheduleItem]:
    """A teacher's slots in active timetables for one weekday (default today)."""
    if day is None:
        day = clock.today()
    result = await db.execute(
        select(TimetableRoster)
        .join(Timetable, TimetableRoster.timetable_id == Timetable.id)
        .options(selectinload(TimetableRoster.course), selectinload(TimetableRoster.school_class))
        .where(
            TimetableRoster.teacher_id == teacher_id,
            TimetableRoster.day_of_week == clock.weekday_name(day),
            Timetable.is_active.is_(True),
        )
        .order_by(TimetableRoster.period)
    )
    items = []
    for slot in result.scalars().all():
        info = get_period_info(slot.period)
        items.append(
            TeacherScheduleItem(
                roster_id=slot.id,
                timetable_id=slot.timetable_id,
                class_id=slot.class_id,
                class_name=slot.school_class.name if slot.school_class else None,
                course_id=slot.course_id,
                course_name=slot.course.name if slot.course else None,
                day_of_week=slot.day_of_week,
                period=slot.period,
                time=info.time_window if info else "Unknown",
            )
        )
    return items
