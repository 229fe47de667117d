"""Which courses a class takes, and who teaches them."""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_admin.core import clock
from school_admin.core.exceptions import AssignmentNotFound, ConflictError, NotFoundError
from school_admin.core.models import ClassCourseAssignment, Course, SchoolClass, User

from .schemas import CourseAssignmentCreate, CourseAssignmentResponse

logger = logging.getLogger(__name__)


def _to_response(a: ClassCourseAssignment) -> CourseAssignmentResponse:
    return CourseAssignmentResponse(
        id=a.id,
        class_id=a.class_id,
        course_id=a.course_id,
        teacher_id=a.teacher_id,
        academic_year=a.academic_year,
        is_active=a.is_active,
        created_at=a.created_at,
        class_name=a.school_class.name if a.school_class else None,
        course_name=a.course.name if a.course else None,
        teacher_name=a.teacher.full_name if a.teacher else None,
    )


def _with_relations(stmt):
    return stmt.options(
        selectinload(ClassCourseAssignment.school_class),
        selectinload(ClassCourseAssignment.course),
        selectinload(ClassCourseAssignment.teacher),
    )


async def _load(db: AsyncSession, assignment_id: UUID) -> ClassCourseAssignment:
    result = await db.execute(
        _with_relations(select(ClassCourseAssignment)).where(ClassCourseAssignment.id == assignment_id)
        .execution_options(populate_existing=True)
    )
    obj = result.scalar_one_or_none()
    if not obj:
        raise AssignmentNotFound()
    return obj


async def _require_teacher(db: AsyncSession, teacher_id: UUID) -> None:
    teacher = await db.get(User, teacher_id)
    if not teacher or not teacher.is_active:
        raise NotFoundError("Teacher not found")


async def assign_course_to_class(db: AsyncSession, payload: CourseAssignmentCreate) -> CourseAssignmentResponse:
    if not await db.get(SchoolClass, payload.class_id):
        raise NotFoundError("Class not found")
    if not await db.get(Course, payload.course_id):
        raise NotFoundError("Course not found")
    if payload.teacher_id is not None:
        await _require_teacher(db, payload.teacher_id)
    existing = await db.execute(
        select(ClassCourseAssignment.id).where(
            ClassCourseAssignment.class_id == payload.class_id,
            ClassCourseAssignment.course_id == payload.course_id,
        )
    )
    if existing.first() is not None:
        raise ConflictError("Course is already assigned to this class")
    obj = ClassCourseAssignment(
        class_id=payload.class_id,
        course_id=payload.course_id,
        teacher_id=payload.teacher_id,
        academic_year=payload.academic_year or clock.today().year,
        is_active=True,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Course is already assigned to this class")
    logger.info("Assigned course %s to class %s", payload.course_id, payload.class_id)
    return _to_response(await _load(db, obj.id))


async def list_class_courses(db: AsyncSession, class_id: UUID) -> List[CourseAssignmentResponse]:
    result = await db.execute(
        _with_relations(select(ClassCourseAssignment)).where(
            ClassCourseAssignment.class_id == class_id,
            ClassCourseAssignment.is_active.is_(True),
        )
    )
    return [_to_response(a) for a in result.scalars().all()]


async def list_teacher_assignments(db: AsyncSession, teacher_id: UUID) -> List[CourseAssignmentResponse]:
    result = await db.execute(
        _with_relations(select(ClassCourseAssignment)).where(
            ClassCourseAssignment.teacher_id == teacher_id,
            ClassCourseAssignment.is_active.is_(True),
        )
    )
    return [_to_response(a) for a in result.scalars().all()]


async def set_teacher(db: AsyncSession, assignment_id: UUID, teacher_id: UUID) -> CourseAssignmentResponse:
    obj = await _load(db, assignment_id)
    await _require_teacher(db, teacher_id)
    obj.teacher_id = teacher_id
    await db.commit()
    return _to_response(await _load(db, assignment_id))


async def remove_teacher(db: AsyncSession, assignment_id: UUID) -> CourseAssignmentResponse:
    obj = await _load(db, assignment_id)
    obj.teacher_id = None
    await db.commit()
    return _to_response(await _load(db, assignment_id))


async def remove_assignment(db: AsyncSession, assignment_id: UUID) -> None:
    obj = await _load(db, assignment_id)
    await db.delete(obj)
    await db.commit()
    logger.info("Removed course assignment %s", assignment_id)
