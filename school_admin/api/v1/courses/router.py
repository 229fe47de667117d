from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.auth.dependencies import get_current_user
from school_admin.auth.schemas import CurrentUser
from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import ApiResponse
from school_admin.db.session import get_db

from .schemas import CourseCreate, CourseResponse, CourseUpdate
from . import service

router = APIRouter(prefix="/api/courses", tags=["courses"])


@router.post("", response_model=ApiResponse[CourseResponse], status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.create_course(db, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=ApiResponse[List[CourseResponse]])
async def list_courses(
    year_level: Optional[int] = Query(None, ge=1, le=3),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_courses(db, year_level))


@router.get("/{course_id}", response_model=ApiResponse[CourseResponse])
async def get_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    obj = await service.get_course(db, course_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return ApiResponse(data=obj)


@router.put("/{course_id}", response_model=ApiResponse[CourseResponse])
async def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.update_course(db, course_id, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
