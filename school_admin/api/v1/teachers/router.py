from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.auth.dependencies import get_current_user
from school_admin.auth.schemas import CurrentUser
from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import ApiResponse
from school_admin.db.session import get_db

from .schemas import TeacherCreate, TeacherResponse
from . import service

router = APIRouter(prefix="/api/teachers", tags=["teachers"])


@router.post("", response_model=ApiResponse[TeacherResponse], status_code=status.HTTP_201_CREATED)
async def create_teacher(
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.create_teacher(db, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=ApiResponse[List[TeacherResponse]])
async def list_teachers(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_teachers(db))
