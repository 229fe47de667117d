"""Timetable grid creation, slot assignment rules and activation."""

from datetime import date

import pytest
from sqlalchemy import false, func, select

from school_admin.api.v1.timetables import service
from school_admin.core.enums import PeriodType
from school_admin.core.exceptions import (
    AssignmentNotFound,
    ClassMismatch,
    ConflictError,
    DuplicateTimetable,
    InvalidAcademicYear,
    InvalidPeriodType,
    NotFoundError,
    SlotNotFound,
    TeacherDoubleBooked,
    TimetableLocked,
)
from school_admin.core.models import Timetable, TimetableRoster


def slot_at(timetable, day: str, period: int):
    return next(s for s in timetable.slots if s.day_of_week == day and s.period == period)


@pytest.mark.asyncio
async def test_create_timetable_generates_full_grid(db_session, make_class):
    cl = await make_class()
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)

    assert tt.is_active is False
    assert tt.year == 2025
    assert len(tt.slots) == 55
    assert {(s.day_of_week, s.period) for s in tt.slots} == {
        (d, p) for d in ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday") for p in range(1, 12)
    }
    assert all(s.course_id is None and s.teacher_id is None for s in tt.slots)

    count = await db_session.execute(
        select(func.count()).select_from(TimetableRoster).where(TimetableRoster.timetable_id == tt.id)
    )
    assert count.scalar_one() == 55


@pytest.mark.asyncio
async def test_create_timetable_rejects_bad_academic_year(db_session, make_class):
    cl = await make_class()
    with pytest.raises(InvalidAcademicYear) as exc:
        await service.create_timetable(db_session, "2025-2027", cl.id, 1)
    assert exc.value.status_code == 400

    with pytest.raises(InvalidAcademicYear):
        await service.create_timetable(db_session, "2025/2026", cl.id, 1)

    count = await db_session.execute(select(func.count()).select_from(Timetable))
    assert count.scalar_one() == 0


@pytest.mark.asyncio
async def test_create_timetable_duplicate(db_session, make_class):
    cl = await make_class()
    await service.create_timetable(db_session, "2025-2026", cl.id, 1)
    with pytest.raises(DuplicateTimetable) as exc:
        await service.create_timetable(db_session, "2025-2026", cl.id, 1)
    assert exc.value.status_code == 409

    # Another term is fine
    other = await service.create_timetable(db_session, "2025-2026", cl.id, 2)
    assert other.term == 2


@pytest.mark.asyncio
async def test_create_timetable_unknown_class(db_session):
    import uuid

    with pytest.raises(NotFoundError):
        await service.create_timetable(db_session, "2025-2026", uuid.uuid4(), 1)


@pytest.mark.asyncio
async def test_assign_slot_copies_course_and_teacher(
    db_session, make_class, make_course, make_teacher, make_assignment
):
    cl = await make_class()
    course = await make_course()
    teacher = await make_teacher()
    assignment = await make_assignment(cl.id, course.id, teacher.id)
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)

    slot = await service.assign_slot(db_session, slot_at(tt, "Monday", 1).id, assignment.id)
    assert slot.course_id == course.id
    assert slot.teacher_id == teacher.id

    cleared = await service.clear_slot(db_session, slot.id)
    assert cleared.course_id is None
    assert cleared.teacher_id is None


@pytest.mark.asyncio
async def test_assign_slot_to_active_timetable_is_locked(db_session, make_class, make_course, make_assignment):
    cl = await make_class()
    course = await make_course()
    assignment = await make_assignment(cl.id, course.id)
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)
    await service.activate_timetable(db_session, tt.id)

    with pytest.raises(TimetableLocked) as exc:
        await service.assign_slot(db_session, slot_at(tt, "Monday", 1).id, assignment.id)
    assert exc.value.message == "Cannot edit active timetable. Deactivate it first."

    await service.deactivate_timetable(db_session, tt.id)
    slot = await service.assign_slot(db_session, slot_at(tt, "Monday", 1).id, assignment.id)
    assert slot.course_id == course.id


@pytest.mark.asyncio
@pytest.mark.parametrize("period", [3, 6, 9])
async def test_assign_slot_non_lesson_period(db_session, make_class, make_course, make_assignment, period):
    cl = await make_class()
    course = await make_course()
    assignment = await make_assignment(cl.id, course.id)
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)

    with pytest.raises(InvalidPeriodType):
        await service.assign_slot(db_session, slot_at(tt, "Wednesday", period).id, assignment.id)


@pytest.mark.asyncio
async def test_assign_slot_missing_rows(db_session, make_class):
    import uuid

    cl = await make_class()
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)

    with pytest.raises(SlotNotFound):
        await service.assign_slot(db_session, uuid.uuid4(), uuid.uuid4())
    with pytest.raises(AssignmentNotFound):
        await service.assign_slot(db_session, slot_at(tt, "Monday", 1).id, uuid.uuid4())


@pytest.mark.asyncio
async def test_assign_slot_class_mismatch(db_session, make_class, make_course, make_assignment):
    cl_a = await make_class()
    cl_b = await make_class()
    course = await make_course()
    assignment_b = await make_assignment(cl_b.id, course.id)
    tt_a = await service.create_timetable(db_session, "2025-2026", cl_a.id, 1)

    with pytest.raises(ClassMismatch):
        await service.assign_slot(db_session, slot_at(tt_a, "Monday", 1).id, assignment_b.id)


@pytest.mark.asyncio
async def test_teacher_double_booking_across_active_timetables(
    db_session, make_class, make_course, make_teacher, make_assignment
):
    teacher = await make_teacher()
    course = await make_course()
    cl_a = await make_class()
    cl_b = await make_class()
    assignment_a = await make_assignment(cl_a.id, course.id, teacher.id)
    assignment_b = await make_assignment(cl_b.id, course.id, teacher.id)

    tt_a = await service.create_timetable(db_session, "2025-2026", cl_a.id, 1)
    tt_b = await service.create_timetable(db_session, "2025-2026", cl_b.id, 1)
    await service.assign_slot(db_session, slot_at(tt_a, "Monday", 4).id, assignment_a.id)
    await service.activate_timetable(db_session, tt_a.id)

    with pytest.raises(TeacherDoubleBooked) as exc:
        await service.assign_slot(db_session, slot_at(tt_b, "Monday", 4).id, assignment_b.id)
    assert exc.value.status_code == 400

    slot = await service.assign_slot(db_session, slot_at(tt_b, "Tuesday", 4).id, assignment_b.id)
    assert slot.teacher_id == teacher.id


@pytest.mark.asyncio
async def test_double_booking_ignores_inactive_and_other_terms(
    db_session, make_class, make_course, make_teacher, make_assignment
):
    teacher = await make_teacher()
    course = await make_course()
    cl_a = await make_class()
    cl_b = await make_class()
    assignment_a = await make_assignment(cl_a.id, course.id, teacher.id)
    assignment_b = await make_assignment(cl_b.id, course.id, teacher.id)

    tt_a = await service.create_timetable(db_session, "2025-2026", cl_a.id, 1)
    await service.assign_slot(db_session, slot_at(tt_a, "Monday", 4).id, assignment_a.id)

    # A is still inactive
    tt_b = await service.create_timetable(db_session, "2025-2026", cl_b.id, 1)
    await service.assign_slot(db_session, slot_at(tt_b, "Monday", 4).id, assignment_b.id)

    # A active, but B2 is for another term
    await service.clear_slot(db_session, slot_at(tt_b, "Monday", 4).id)
    await service.activate_timetable(db_session, tt_a.id)
    tt_b2 = await service.create_timetable(db_session, "2025-2026", cl_b.id, 2)
    slot = await service.assign_slot(db_session, slot_at(tt_b2, "Monday", 4).id, assignment_b.id)
    assert slot.teacher_id == teacher.id


@pytest.mark.asyncio
async def test_activate_deactivates_previous_for_same_class_only(db_session, make_class):
    cl_c = await make_class()
    cl_d = await make_class()
    y = await service.create_timetable(db_session, "2025-2026", cl_c.id, 1)
    x = await service.create_timetable(db_session, "2025-2026", cl_c.id, 2)
    other = await service.create_timetable(db_session, "2025-2026", cl_d.id, 1)

    await service.activate_timetable(db_session, y.id)
    await service.activate_timetable(db_session, other.id)
    result = await service.activate_timetable(db_session, x.id)
    assert result.is_active is True

    states = {t.id: t.is_active for t in await service.list_timetables(db_session)}
    assert states[x.id] is True
    assert states[y.id] is False
    assert states[other.id] is True


@pytest.mark.asyncio
async def test_delete_timetable(db_session, make_class):
    cl = await make_class()
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)
    await service.activate_timetable(db_session, tt.id)

    with pytest.raises(TimetableLocked):
        await service.delete_timetable(db_session, tt.id)

    await service.deactivate_timetable(db_session, tt.id)
    await service.delete_timetable(db_session, tt.id)

    assert await service.get_timetable(db_session, tt.id) is None
    count = await db_session.execute(select(func.count()).select_from(TimetableRoster))
    assert count.scalar_one() == 0


@pytest.mark.asyncio
async def test_class_timetable_grid(db_session, make_class, make_course, make_teacher, make_assignment):
    cl = await make_class()
    course = await make_course("Physics")
    teacher = await make_teacher("Marie", "Curie")
    assignment = await make_assignment(cl.id, course.id, teacher.id)
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)

    assert await service.get_class_timetable(db_session, cl.id) is None

    await service.assign_slot(db_session, slot_at(tt, "Friday", 2).id, assignment.id)
    await service.activate_timetable(db_session, tt.id)

    grid = await service.get_class_timetable(db_session, cl.id)
    assert [d.day.value for d in grid.days] == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    assert all(len(d.periods) == 11 for d in grid.days)

    friday = grid.days[4].periods
    assert friday[1].subject == "Physics"
    assert friday[1].teacher == "Marie Curie"
    assert friday[1].time == "09:20-10:10"
    assert friday[2].type == PeriodType.BREAK
    assert friday[2].subject == "break"
    assert friday[5].subject == "lunch"
    assert friday[0].subject == ""


@pytest.mark.asyncio
async def test_teacher_schedule_for_weekday(db_session, make_class, make_course, make_teacher, make_assignment):
    cl = await make_class()
    course = await make_course()
    teacher = await make_teacher()
    assignment = await make_assignment(cl.id, course.id, teacher.id)
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)
    await service.assign_slot(db_session, slot_at(tt, "Monday", 7).id, assignment.id)
    await service.assign_slot(db_session, slot_at(tt, "Monday", 2).id, assignment.id)
    await service.activate_timetable(db_session, tt.id)

    # 2026-03-02 is a Monday, 2026-03-03 a Tuesday
    schedule = await service.get_teacher_schedule(db_session, teacher.id, date(2026, 3, 2))
    assert [item.period for item in schedule] == [2, 7]
    assert schedule[0].class_name == cl.name
    assert await service.get_teacher_schedule(db_session, teacher.id, date(2026, 3, 3)) == []


@pytest.mark.asyncio
async def test_failed_slot_insert_rolls_back_timetable(db_session, make_class, monkeypatch):
    cl = await make_class()
    class_id = cl.id
    # Monday twice: the second pass trips the (timetable, day, period) unique constraint
    monkeypatch.setattr(service, "WEEKDAYS", ["Monday", "Monday"])

    with pytest.raises(DuplicateTimetable):
        await service.create_timetable(db_session, "2025-2026", class_id, 1)

    timetables = await db_session.execute(select(func.count()).select_from(Timetable))
    assert timetables.scalar_one() == 0
    slots = await db_session.execute(select(func.count()).select_from(TimetableRoster))
    assert slots.scalar_one() == 0


@pytest.mark.asyncio
async def test_activation_refuses_to_double_book_teacher(
    db_session, make_class, make_course, make_teacher, make_assignment
):
    teacher = await make_teacher()
    course = await make_course()
    cl_a = await make_class()
    cl_b = await make_class()
    assignment_a = await make_assignment(cl_a.id, course.id, teacher.id)
    assignment_b = await make_assignment(cl_b.id, course.id, teacher.id)

    tt_a = await service.create_timetable(db_session, "2025-2026", cl_a.id, 1)
    tt_b = await service.create_timetable(db_session, "2025-2026", cl_b.id, 1)
    # Both inactive, so neither assignment sees a clash
    await service.assign_slot(db_session, slot_at(tt_a, "Monday", 4).id, assignment_a.id)
    await service.assign_slot(db_session, slot_at(tt_b, "Monday", 4).id, assignment_b.id)

    await service.activate_timetable(db_session, tt_a.id)
    with pytest.raises(TeacherDoubleBooked):
        await service.activate_timetable(db_session, tt_b.id)

    active_bookings = await db_session.execute(
        select(func.count())
        .select_from(TimetableRoster)
        .join(Timetable, TimetableRoster.timetable_id == Timetable.id)
        .where(
            TimetableRoster.teacher_id == teacher.id,
            TimetableRoster.day_of_week == "Monday",
            TimetableRoster.period == 4,
            Timetable.is_active.is_(True),
        )
    )
    assert active_bookings.scalar_one() == 1

    # Moving B's lesson to Tuesday clears the way
    await service.clear_slot(db_session, slot_at(tt_b, "Monday", 4).id)
    await service.assign_slot(db_session, slot_at(tt_b, "Tuesday", 4).id, assignment_b.id)
    activated = await service.activate_timetable(db_session, tt_b.id)
    assert activated.is_active is True


@pytest.mark.asyncio
async def test_concurrent_activation_maps_to_conflict(db_session, make_class, monkeypatch):
    cl = await make_class()
    first = await service.create_timetable(db_session, "2025-2026", cl.id, 1)
    second = await service.create_timetable(db_session, "2025-2026", cl.id, 2)
    await service.activate_timetable(db_session, first.id)

    # Deactivation matches nothing, as if another request activated `first` after it ran
    real_update = service.update
    monkeypatch.setattr(service, "update", lambda entity: real_update(entity).where(false()))

    with pytest.raises(ConflictError) as exc:
        await service.activate_timetable(db_session, second.id)
    assert exc.value.status_code == 409

    monkeypatch.undo()
    states = {t.id: t.is_active for t in await service.list_timetables(db_session)}
    assert states == {first.id: True, second.id: False}


@pytest.mark.asyncio
@pytest.mark.parametrize("period", [3, 6])
async def test_clear_slot_non_lesson_period(db_session, make_class, period):
    cl = await make_class()
    tt = await service.create_timetable(db_session, "2025-2026", cl.id, 1)

    with pytest.raises(InvalidPeriodType):
        await service.clear_slot(db_session, slot_at(tt, "Monday", period).id)
