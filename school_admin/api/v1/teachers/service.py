from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.enums import UserRole
from school_admin.core.exceptions import ConflictError
from school_admin.core.models import User

from .schemas import TeacherCreate, TeacherResponse


async def create_teacher(db: AsyncSession, payload: TeacherCreate) -> TeacherResponse:
    obj = User(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=payload.email.lower(),
        role=payload.role.value,
        is_active=True,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"User with email '{payload.email}' already exists")
    await db.refresh(obj)
    return TeacherResponse.model_validate(obj)


async def list_teachers(db: AsyncSession) -> List[TeacherResponse]:
    result = await db.execute(
        select(User)
        .where(User.role == UserRole.TEACHER.value, User.is_active.is_(True))
        .order_by(User.last_name, User.first_name)
    )
    return [TeacherResponse.model_validate(u) for u in result.scalars().all()]
