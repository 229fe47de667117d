from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.auth.dependencies import get_current_user
from school_admin.auth.schemas import CurrentUser
from school_admin.core.exceptions import ServiceError
from school_admin.core.periods import get_all_periods, get_period_info, time_to_period_number
from school_admin.core.schemas import ApiResponse
from school_admin.db.session import get_db

from .schemas import (
    AssignSlotRequest,
    ClassTimetableResponse,
    ClearSlotRequest,
    PeriodResponse,
    RosterSlotResponse,
    TeacherScheduleItem,
    TimetableCreate,
    TimetableDetailResponse,
    TimetableResponse,
)
from . import service

router = APIRouter(prefix="/api/timetables", tags=["timetables"])


@router.get("/periods", response_model=ApiResponse[List[PeriodResponse]])
async def list_periods():
    """The fixed daily period calendar."""
    return ApiResponse(
        data=[PeriodResponse(number=p.number, time=p.time_window, type=p.category) for p in get_all_periods()]
    )


@router.get("/periods/lookup", response_model=ApiResponse[PeriodResponse])
async def lookup_period(start: str = Query(..., pattern=r"^\d{2}:\d{2}$", description="HH:MM")):
    """The period that starts at the given time."""
    number = time_to_period_number(start)
    if number is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No period starts at {start}")
    p = get_period_info(number)
    return ApiResponse(data=PeriodResponse(number=p.number, time=p.time_window, type=p.category))


@router.post(
    "",
    response_model=ApiResponse[TimetableDetailResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_timetable(
    payload: TimetableCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        created = await service.create_timetable(db, payload.academic_year, payload.class_id, payload.term)
        return ApiResponse(data=created, message="Timetable created")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=ApiResponse[List[TimetableResponse]])
async def list_timetables(
    class_id: Optional[UUID] = Query(None),
    academic_year: Optional[str] = Query(None),
    term: Optional[int] = Query(None, ge=1, le=3),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_timetables(db, class_id, academic_year, term))


@router.post("/assign-slot", response_model=ApiResponse[RosterSlotResponse])
async def assign_slot(
    payload: AssignSlotRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.assign_slot(db, payload.roster_id, payload.assignment_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/clear-slot", response_model=ApiResponse[RosterSlotResponse])
async def clear_slot(
    payload: ClearSlotRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.clear_slot(db, payload.roster_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}", response_model=ApiResponse[ClassTimetableResponse])
async def get_class_timetable(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Active weekly grid for a class."""
    grid = await service.get_class_timetable(db, class_id)
    if not grid:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Active timetable not found for this class")
    return ApiResponse(data=grid)


@router.get("/teacher/today", response_model=ApiResponse[List[TeacherScheduleItem]])
async def get_teacher_schedule(
    day: Optional[date] = Query(None, description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Slots of the calling teacher in active timetables."""
    return ApiResponse(data=await service.get_teacher_schedule(db, current_user.id, day))


@router.get("/{timetable_id}", response_model=ApiResponse[TimetableDetailResponse])
async def get_timetable(
    timetable_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    obj = await service.get_timetable(db, timetable_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable not found")
    return ApiResponse(data=obj)


@router.delete("/{timetable_id}", response_model=ApiResponse[None])
async def delete_timetable(
    timetable_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        await service.delete_timetable(db, timetable_id)
        return ApiResponse(message="Timetable deleted")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/{timetable_id}/activate", response_model=ApiResponse[TimetableResponse])
async def activate_timetable(
    timetable_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Make this the class's only active timetable."""
    try:
        return ApiResponse(data=await service.activate_timetable(db, timetable_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/{timetable_id}/deactivate", response_model=ApiResponse[TimetableResponse])
async def deactivate_timetable(
    timetable_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.deactivate_timetable(db, timetable_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
