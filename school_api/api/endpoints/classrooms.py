# school_api/api/endpoints/classrooms.py

import uuid
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, status, Query, Depends

from school_api.api.deps import get_classroom_service, require_roles
from school_api.core.security import get_current_actor
from school_api.models.actor import Actor
from school_api.models.classroom import Classroom, ClassroomCreate, ClassroomUpdate
from school_api.models.enums import UserRole
from school_api.models.responses import ApiResponse, PaginatedResponse
from school_api.services.classroom_service import ClassroomService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/classrooms",
    tags=["Classrooms"]
)

@router.post(
    "",
    response_model=ApiResponse[Classroom],
    status_code=status.HTTP_201_CREATED,
    summary="Create a classroom (Schooladmin)",
    description="Creates a classroom in the caller's school. Names are unique within a school."
)
async def create_classroom(
    classroom_in: ClassroomCreate,
    actor: Actor = Depends(require_roles(UserRole.SCHOOLADMIN)),
    service: ClassroomService = Depends(get_classroom_service),
):
    logger.info(f"User {actor.subject_id} creating classroom '{classroom_in.name}' in school {classroom_in.school}")
    classroom = await service.create_classroom(actor, classroom_in)
    return ApiResponse(message="Classroom created successfully", data=classroom)

@router.get(
    "",
    response_model=PaginatedResponse[Classroom],
    status_code=status.HTTP_200_OK,
    summary="Get a list of classrooms (Protected)",
    description="Superadmins see all classrooms; a schooladmin sees their school's. Newest first."
)
async def read_classrooms(
    page: Optional[int] = Query(None, description="Page number, starting at 1"),
    limit: Optional[int] = Query(None, description="Items per page (max 100)"),
    actor: Actor = Depends(get_current_actor),
    service: ClassroomService = Depends(get_classroom_service),
):
    classrooms, pagination = await service.list_classrooms(actor, page=page, limit=limit)
    return PaginatedResponse(message="Classrooms retrieved successfully", pagination=pagination, data=classrooms)

@router.get(
    "/{classroom_id}",
    response_model=ApiResponse[Classroom],
    status_code=status.HTTP_200_OK,
    summary="Get a specific classroom by ID (Protected)",
)
async def read_classroom(
    classroom_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    service: ClassroomService = Depends(get_classroom_service),
):
    classroom = await service.get_classroom(actor, classroom_id)
    return ApiResponse(message="Classroom retrieved successfully", data=classroom)

@router.put(
    "/{classroom_id}",
    response_model=ApiResponse[Classroom],
    status_code=status.HTTP_200_OK,
    summary="Update a classroom (Schooladmin)",
    description="Partially updates a classroom of the caller's school."
)
async def update_classroom(
    classroom_id: uuid.UUID,
    classroom_in: ClassroomUpdate,
    actor: Actor = Depends(require_roles(UserRole.SCHOOLADMIN)),
    service: ClassroomService = Depends(get_classroom_service),
):
    logger.info(f"User {actor.subject_id} attempting to update classroom ID: {classroom_id}")
    classroom = await service.update_classroom(actor, classroom_id, classroom_in)
    return ApiResponse(message="Classroom updated successfully", data=classroom)

@router.delete(
    "/{classroom_id}",
    response_model=ApiResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    summary="Delete a classroom (Schooladmin)",
    description="Deletes a classroom of the caller's school. Its students keep their reference."
)
async def delete_classroom(
    classroom_id: uuid.UUID,
    actor: Actor = Depends(require_roles(UserRole.SCHOOLADMIN)),
    service: ClassroomService = Depends(get_classroom_service),
):
    logger.info(f"User {actor.subject_id} attempting to delete classroom ID: {classroom_id}")
    await service.delete_classroom(actor, classroom_id)
    return ApiResponse(message="Classroom deleted successfully", data={})
