# school_api/api/endpoints/schools.py

import uuid
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, status, Query, Depends

from school_api.api.deps import get_school_service, require_roles
from school_api.core.security import get_current_actor
from school_api.models.actor import Actor
from school_api.models.enums import UserRole
from school_api.models.responses import ApiResponse, PaginatedResponse
from school_api.models.school import School, SchoolCreate, SchoolUpdate
from school_api.services.school_service import SchoolService

# Setup logger for this module
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/schools",
    tags=["Schools"]
)

@router.post(
    "",
    response_model=ApiResponse[School],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new school (Superadmin)",
    description="Creates a school. The name must be unique; the caller is recorded as its creator."
)
async def create_new_school(
    school_in: SchoolCreate,
    actor: Actor = Depends(require_roles(UserRole.SUPERADMIN)),
    service: SchoolService = Depends(get_school_service),
):
    logger.info(f"User {actor.subject_id} attempting to create school: {school_in.name}")
    school = await service.create_school(actor, school_in)
    return ApiResponse(message="School created successfully", data=school)

@router.get(
    "",
    response_model=PaginatedResponse[School],
    status_code=status.HTTP_200_OK,
    summary="Get a list of schools (Protected)",
    description="Superadmins see every school; a schooladmin sees only their own. Newest first."
)
async def read_schools(
    page: Optional[int] = Query(None, description="Page number, starting at 1"),
    limit: Optional[int] = Query(None, description="Items per page (max 100)"),
    actor: Actor = Depends(get_current_actor),
    service: SchoolService = Depends(get_school_service),
):
    logger.info(f"User {actor.subject_id} listing schools (page={page}, limit={limit}).")
    schools, pagination = await service.list_schools(actor, page=page, limit=limit)
    return PaginatedResponse(message="Schools retrieved successfully", pagination=pagination, data=schools)

@router.get(
    "/{school_id}",
    response_model=ApiResponse[School],
    status_code=status.HTTP_200_OK,
    summary="Get a specific school by ID (Protected)",
    description="A schooladmin may only read their own school."
)
async def read_school(
    school_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    service: SchoolService = Depends(get_school_service),
):
    school = await service.get_school(actor, school_id)
    return ApiResponse(message="School retrieved successfully", data=school)

@router.put(
    "/{school_id}",
    response_model=ApiResponse[School],
    status_code=status.HTTP_200_OK,
    summary="Update an existing school (Superadmin)",
    description="Partially updates a school. A new name must not collide with another school."
)
async def update_existing_school(
    school_id: uuid.UUID,
    school_in: SchoolUpdate,
    actor: Actor = Depends(require_roles(UserRole.SUPERADMIN)),
    service: SchoolService = Depends(get_school_service),
):
    logger.info(f"User {actor.subject_id} attempting to update school ID: {school_id}")
    school = await service.update_school(actor, school_id, school_in)
    return ApiResponse(message="School updated successfully", data=school)

@router.delete(
    "/{school_id}",
    response_model=ApiResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    summary="Delete a school (Superadmin)",
    description="Deletes a school that no longer has classrooms or students."
)
async def delete_school(
    school_id: uuid.UUID,
    actor: Actor = Depends(require_roles(UserRole.SUPERADMIN)),
    service: SchoolService = Depends(get_school_service),
):
    logger.info(f"User {actor.subject_id} attempting to delete school ID: {school_id}")
    await service.delete_school(actor, school_id)
    return ApiResponse(message="School deleted successfully", data={})
