from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.auth.dependencies import get_current_user
from school_admin.auth.schemas import CurrentUser
from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import ApiResponse
from school_admin.db.session import get_db

from .schemas import AssignStudentsToClass, StudentCreate, StudentResponse, StudentUpdate
from . import service

router = APIRouter(prefix="/api/students", tags=["students"])


@router.post("", response_model=ApiResponse[StudentResponse], status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.create_student(db, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=ApiResponse[List[StudentResponse]])
async def list_students(
    class_id: Optional[UUID] = Query(None),
    active_only: bool = Query(True, description="Return only is_active=true by default"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_students(db, class_id, active_only))


@router.post("/assign-class", response_model=ApiResponse[int])
async def assign_students_to_class(
    payload: AssignStudentsToClass,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        count = await service.assign_to_class(db, payload)
        return ApiResponse(data=count, message=f"{count} students assigned")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{student_id}", response_model=ApiResponse[StudentResponse])
async def get_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    obj = await service.get_student(db, student_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return ApiResponse(data=obj)


@router.put("/{student_id}", response_model=ApiResponse[StudentResponse])
async def update_student(
    student_id: UUID,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.update_student(db, student_id, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
