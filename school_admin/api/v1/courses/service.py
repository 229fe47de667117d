from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import ConflictError, NotFoundError
from school_admin.core.models import Course

from .schemas import CourseCreate, CourseResponse, CourseUpdate


async def create_course(db: AsyncSession, payload: CourseCreate) -> CourseResponse:
    obj = Course(name=payload.name.strip(), code=payload.code, year_level=payload.year_level)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Course with code '{payload.code}' already exists")
    await db.refresh(obj)
    return CourseResponse.model_validate(obj)


async def list_courses(db: AsyncSession, year_level: Optional[int] = None) -> List[CourseResponse]:
    stmt = select(Course)
    if year_level is not None:
        stmt = stmt.where(Course.year_level == year_level)
    stmt = stmt.order_by(Course.year_level, Course.name)
    result = await db.execute(stmt)
    return [CourseResponse.model_validate(c) for c in result.scalars().all()]


async def get_course(db: AsyncSession, course_id: UUID) -> Optional[CourseResponse]:
    obj = await db.get(Course, course_id)
    return CourseResponse.model_validate(obj) if obj else None


async def update_course(db: AsyncSession, course_id: UUID, payload: CourseUpdate) -> CourseResponse:
    obj = await db.get(Course, course_id)
    if not obj:
        raise NotFoundError("Course not found")
    if payload.name is not None:
        obj.name = payload.name.strip()
    if payload.code is not None:
        obj.code = payload.code
    if payload.year_level is not None:
        obj.year_level = payload.year_level
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Course with code '{payload.code}' already exists")
    await db.refresh(obj)
    return CourseResponse.model_validate(obj)
