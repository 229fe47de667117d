import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.exceptions import NotFoundError
from school_admin.core.models import SchoolClass, Student

from .schemas import AssignStudentsToClass, StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


async def _require_class(db: AsyncSession, class_id: UUID) -> None:
    if not await db.get(SchoolClass, class_id):
        raise NotFoundError("Class not found")


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    if payload.class_id is not None:
        await _require_class(db, payload.class_id)
    obj = Student(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=payload.email,
        class_id=payload.class_id,
        is_active=True,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return StudentResponse.model_validate(obj)


async def list_students(
    db: AsyncSession,
    class_id: Optional[UUID] = None,
    active_only: bool = True,
) -> List[StudentResponse]:
    stmt = select(Student)
    if active_only:
        stmt = stmt.where(Student.is_active.is_(True))
    if class_id is not None:
        stmt = stmt.where(Student.class_id == class_id)
    stmt = stmt.order_by(Student.last_name, Student.first_name)
    result = await db.execute(stmt)
    return [StudentResponse.model_validate(s) for s in result.scalars().all()]


async def get_student(db: AsyncSession, student_id: UUID) -> Optional[StudentResponse]:
    obj = await db.get(Student, student_id)
    return StudentResponse.model_validate(obj) if obj else None


async def update_student(db: AsyncSession, student_id: UUID, payload: StudentUpdate) -> StudentResponse:
    obj = await db.get(Student, student_id)
    if not obj:
        raise NotFoundError("Student not found")
    if payload.first_name is not None:
        obj.first_name = payload.first_name.strip()
    if payload.last_name is not None:
        obj.last_name = payload.last_name.strip()
    if payload.email is not None:
        obj.email = payload.email
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    await db.commit()
    await db.refresh(obj)
    return StudentResponse.model_validate(obj)


async def assign_to_class(db: AsyncSession, payload: AssignStudentsToClass) -> int:
    """Move students into a class. Returns the number of rows updated."""
    await _require_class(db, payload.class_id)
    result = await db.execute(
        update(Student)
        .where(Student.id.in_(payload.student_ids))
        .values(class_id=payload.class_id)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
    logger.info("Assigned %d students to class %s", result.rowcount, payload.class_id)
    return result.rowcount
