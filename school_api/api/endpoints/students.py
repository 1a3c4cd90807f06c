# school_api/api/endpoints/students.py

import uuid
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, status, Query, Depends

from school_api.api.deps import get_student_service, require_roles
from school_api.core.security import get_current_actor
from school_api.models.actor import Actor
from school_api.models.enums import UserRole
from school_api.models.responses import ApiResponse, PaginatedResponse
from school_api.models.student import Student, StudentCreate, StudentTransfer, StudentUpdate
from school_api.services.student_service import StudentService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/students",
    tags=["Students"]
)

@router.post(
    "",
    response_model=ApiResponse[Student],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll a student (Schooladmin)",
    description="Creates a student in a classroom of the caller's school. "
                "The classroom must belong to the given school."
)
async def create_student(
    student_in: StudentCreate,
    actor: Actor = Depends(require_roles(UserRole.SCHOOLADMIN)),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"User {actor.subject_id} enrolling student in classroom {student_in.classroom}")
    student = await service.create_student(actor, student_in)
    return ApiResponse(message="Student created successfully", data=student)

@router.get(
    "",
    response_model=PaginatedResponse[Student],
    status_code=status.HTTP_200_OK,
    summary="Get a list of students (Protected)",
    description="Superadmins see all students; a schooladmin sees their school's. Newest first."
)
async def read_students(
    page: Optional[int] = Query(None, description="Page number, starting at 1"),
    limit: Optional[int] = Query(None, description="Items per page (max 100)"),
    actor: Actor = Depends(get_current_actor),
    service: StudentService = Depends(get_student_service),
):
    students, pagination = await service.list_students(actor, page=page, limit=limit)
    return PaginatedResponse(message="Students retrieved successfully", pagination=pagination, data=students)

@router.get(
    "/{student_id}",
    response_model=ApiResponse[Student],
    status_code=status.HTTP_200_OK,
    summary="Get a specific student by ID (Protected)",
)
async def read_student(
    student_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    service: StudentService = Depends(get_student_service),
):
    student = await service.get_student(actor, student_id)
    return ApiResponse(message="Student retrieved successfully", data=student)

@router.put(
    "/{student_id}/transfer",
    response_model=ApiResponse[Student],
    status_code=status.HTTP_200_OK,
    summary="Transfer a student to another classroom (Schooladmin)",
    description="Moves a student to a different classroom of the same school."
)
async def transfer_student(
    student_id: uuid.UUID,
    transfer: StudentTransfer,
    actor: Actor = Depends(require_roles(UserRole.SCHOOLADMIN)),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"User {actor.subject_id} transferring student {student_id} to {transfer.new_classroom}")
    student = await service.transfer_student(actor, student_id, transfer)
    return ApiResponse(message="Student transferred successfully", data=student)

@router.put(
    "/{student_id}",
    response_model=ApiResponse[Student],
    status_code=status.HTTP_200_OK,
    summary="Update a student (Schooladmin)",
    description="Updates name and age. Use the transfer endpoint to change classroom."
)
async def update_student(
    student_id: uuid.UUID,
    student_in: StudentUpdate,
    actor: Actor = Depends(require_roles(UserRole.SCHOOLADMIN)),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"User {actor.subject_id} attempting to update student ID: {student_id}")
    student = await service.update_student(actor, student_id, student_in)
    return ApiResponse(message="Student updated successfully", data=student)

@router.delete(
    "/{student_id}",
    response_model=ApiResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    summary="Delete a student (Schooladmin)",
)
async def delete_student(
    student_id: uuid.UUID,
    actor: Actor = Depends(require_roles(UserRole.SCHOOLADMIN)),
    service: StudentService = Depends(get_student_service),
):
    logger.info(f"User {actor.subject_id} attempting to delete student ID: {student_id}")
    await service.delete_student(actor, student_id)
    return ApiResponse(message="Student deleted successfully", data={})
