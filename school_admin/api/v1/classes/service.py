import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import BusinessRuleError, ConflictError, NotFoundError
from school_admin.core.models import SchoolClass, Student

from .schemas import ClassCreate, ClassResponse, ClassUpdate

logger = logging.getLogger(__name__)


def _to_response(c: SchoolClass, student_count: int = 0) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        name=c.name,
        year_level=c.year_level,
        student_count=student_count,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


async def _active_student_count(db: AsyncSession, class_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Student.id)).where(Student.class_id == class_id, Student.is_active.is_(True))
    )
    return result.scalar_one()


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    obj = SchoolClass(name=payload.name.strip(), year_level=payload.year_level)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Class with name '{payload.name}' already exists")
    await db.refresh(obj)
    return _to_response(obj)


async def list_classes(db: AsyncSession, year_level: Optional[int] = None) -> List[ClassResponse]:
    counts = (
        select(Student.class_id, func.count(Student.id).label("n"))
        .where(Student.is_active.is_(True))
        .group_by(Student.class_id)
        .subquery()
    )
    stmt = select(SchoolClass, func.coalesce(counts.c.n, 0)).outerjoin(counts, counts.c.class_id == SchoolClass.id)
    if year_level is not None:
        stmt = stmt.where(SchoolClass.year_level == year_level)
    stmt = stmt.order_by(SchoolClass.year_level, SchoolClass.name)
    result = await db.execute(stmt)
    return [_to_response(c, n) for c, n in result.all()]


async def get_class(db: AsyncSession, class_id: UUID) -> Optional[ClassResponse]:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        return None
    return _to_response(obj, await _active_student_count(db, class_id))


async def update_class(db: AsyncSession, class_id: UUID, payload: ClassUpdate) -> ClassResponse:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        raise NotFoundError("Class not found")
    if payload.name is not None:
        obj.name = payload.name.strip()
    if payload.year_level is not None:
        obj.year_level = payload.year_level
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Class with name '{payload.name}' already exists")
    await db.refresh(obj)
    return _to_response(obj, await _active_student_count(db, class_id))


async def delete_class(db: AsyncSession, class_id: UUID) -> None:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        raise NotFoundError("Class not found")
    student_count = await _active_student_count(db, class_id)
    if student_count > 0:
        raise BusinessRuleError(f"Cannot delete class with {student_count} active students")
    await db.delete(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Class still has attendance history and cannot be deleted")
    logger.info("Deleted class %s", class_id)
