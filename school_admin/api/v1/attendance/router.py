"""Attendance API router."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.auth.dependencies import get_current_user
from school_admin.auth.schemas import CurrentUser
from school_admin.core import clock
from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import ApiResponse
from school_admin.db.session import get_db

from . import service
from .schemas import (
    AttendanceRecordResponse,
    AttendanceSubmitRequest,
    AttendanceSubmitResponse,
    PendingAttendanceItem,
    PeriodStatusResponse,
    PermissionApproveRequest,
    PermissionRequestCreate,
    PermissionRequestResponse,
    StudentAttendanceHistoryItem,
)

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.post(
    "/submit",
    response_model=ApiResponse[AttendanceSubmitResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_course_attendance(
    payload: AttendanceSubmitRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Record attendance for one timetable slot. Students missing from the map are absent."""
    try:
        result = await service.submit_course_attendance(
            db,
            payload.roster_id,
            payload.attendance,
            current_user.id,
            policy=payload.policy,
        )
        return ApiResponse(data=result, message=f"Attendance recorded for {result.total} students")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/status/{roster_id}", response_model=ApiResponse[PeriodStatusResponse])
async def get_period_status(
    roster_id: UUID,
    period_date: Optional[date] = Query(None, alias="date", description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.get_period_status(db, roster_id, period_date))


@router.get("/class/{class_id}", response_model=ApiResponse[List[AttendanceRecordResponse]])
async def get_attendance_by_class_and_date(
    class_id: UUID,
    att_date: Optional[date] = Query(None, alias="date", description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    day = att_date or clock.today()
    return ApiResponse(data=await service.get_attendance_by_class_and_date(db, class_id, day))


@router.get("/records", response_model=ApiResponse[List[AttendanceRecordResponse]])
async def list_records(
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_records(db, limit))


@router.get("/students/{student_id}/history", response_model=ApiResponse[List[StudentAttendanceHistoryItem]])
async def get_student_attendance_history(
    student_id: UUID,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(
            data=await service.get_student_attendance_history(db, student_id, start_date, end_date)
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/pending", response_model=ApiResponse[List[PendingAttendanceItem]])
async def get_teacher_pending_attendance(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Today's periods of the calling teacher that still need attendance."""
    return ApiResponse(data=await service.get_teacher_pending_attendance(db, current_user.id))


# ----- Permission requests -----
@router.post(
    "/permission",
    response_model=ApiResponse[PermissionRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
async def request_permission(
    payload: PermissionRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.request_permission(db, current_user.id, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/permission-requests", response_model=ApiResponse[List[PermissionRequestResponse]])
async def list_permission_requests(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Pending requests, newest first."""
    return ApiResponse(data=await service.list_pending_permission_requests(db))


@router.post("/permission/{request_id}/approve", response_model=ApiResponse[PermissionRequestResponse])
async def approve_permission(
    request_id: UUID,
    payload: Optional[PermissionApproveRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        comments = payload.comments if payload else None
        return ApiResponse(data=await service.approve_permission(db, request_id, current_user.id, comments))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
