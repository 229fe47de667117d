from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.auth.dependencies import get_current_user
from school_admin.auth.schemas import CurrentUser
from school_admin.core.exceptions import ServiceError
from school_admin.core.schemas import ApiResponse
from school_admin.db.session import get_db

from .schemas import ClassCreate, ClassResponse, ClassUpdate
from . import service

router = APIRouter(prefix="/api/classes", tags=["classes"])


@router.post("", response_model=ApiResponse[ClassResponse], status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.create_class(db, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=ApiResponse[List[ClassResponse]])
async def list_classes(
    year_level: Optional[int] = Query(None, ge=1, le=3),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ApiResponse(data=await service.list_classes(db, year_level))


@router.get("/{class_id}", response_model=ApiResponse[ClassResponse])
async def get_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    obj = await service.get_class(db, class_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return ApiResponse(data=obj)


@router.put("/{class_id}", response_model=ApiResponse[ClassResponse])
async def update_class(
    class_id: UUID,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return ApiResponse(data=await service.update_class(db, class_id, payload))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{class_id}", response_model=ApiResponse[None])
async def delete_class(
    class_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete a class. Refused while it still has active students."""
    try:
        await service.delete_class(db, class_id)
        return ApiResponse(message="Class deleted")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
