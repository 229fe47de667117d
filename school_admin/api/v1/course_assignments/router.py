from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.auth.dependencies import get_current_user
from school_admin.auth.schemas import CurrentUser
from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import ApiResponse
from school_admin.db.session import get_db

from .schemas import CourseAssignmentCreate, CourseAssignmentResponse, SetTeacherRequest
from . import service

router = APIRouter(prefix="/api/course-assignments", tags=["course-assignments"])


@router.post("", response_model=ApiResponse[CourseAssignmentResponse], status_code=status.HTTP_201_CREATED)
async def assign_course_to_class(
    payload: CourseAssignmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.assign_course_to_class(db, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}", response_model=ApiResponse[List[CourseAssignmentResponse]])
async def list_class_courses(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_class_courses(db, class_id))


@router.get("/teacher/{teacher_id}", response_model=ApiResponse[List[CourseAssignmentResponse]])
async def list_teacher_assignments(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_teacher_assignments(db, teacher_id))


@router.put("/{assignment_id}/teacher", response_model=ApiResponse[CourseAssignmentResponse])
async def set_teacher(
    assignment_id: UUID,
    payload: SetTeacherRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.set_teacher(db, assignment_id, payload.teacher_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{assignment_id}/teacher", response_model=ApiResponse[CourseAssignmentResponse])
async def remove_teacher(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.remove_teacher(db, assignment_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{assignment_id}", response_model=ApiResponse[None])
async def remove_assignment(
    assignment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        await service.remove_assignment(db, assignment_id)
        return ApiResponse(message="Course assignment removed")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
