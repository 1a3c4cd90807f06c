# school_api/services/integrity.py
import logging
import uuid
from typing import Optional

from school_api.core.errors import ConflictError, NotFoundError, ValidationError
from school_api.db.repositories import ClassroomRepository, SchoolRepository, UserRepository
from school_api.models.classroom import ClassroomInDB
from school_api.models.school import SchoolInDB
from school_api.models.student import StudentInDB

logger = logging.getLogger(__name__)


class IntegrityValidator:
    """
    Cross-entity consistency checks run by the services before any write.

    Each check either returns the document it loaded (so callers do not fetch
    it twice) or raises the typed error the API reports.
    """

    def __init__(self, users: UserRepository, schools: SchoolRepository, classrooms: ClassroomRepository):
        self.users = users
        self.schools = schools
        self.classrooms = classrooms

    async def validate_school_exists(self, school_id: uuid.UUID) -> SchoolInDB:
        school = await self.schools.get_by_id(school_id)
        if school is None:
            raise NotFoundError("School not found")
        return school

    async def validate_classroom_belongs_to_school(self, classroom_id: uuid.UUID, school_id: uuid.UUID) -> ClassroomInDB:
        classroom = await self.classrooms.get_by_id(classroom_id)
        if classroom is None:
            raise NotFoundError("Classroom not found")
        if classroom.school != school_id:
            logger.info(f"Classroom {classroom_id} belongs to {classroom.school}, not {school_id}")
            raise ValidationError("Classroom does not belong to the specified school")
        return classroom

    async def validate_unique_school_name(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        existing = await self.schools.find_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("School with this name already exists")

    async def validate_unique_classroom_name(
        self, name: str, school_id: uuid.UUID, exclude_id: Optional[uuid.UUID] = None
    ) -> None:
        # Names only have to be unique inside one school
        existing = await self.classrooms.find_by_name_in_school(name, school_id)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("Classroom with this name already exists in this school")

    async def validate_transfer_target(self, student: StudentInDB, new_classroom_id: uuid.UUID) -> ClassroomInDB:
        classroom = await self.classrooms.get_by_id(new_classroom_id)
        if classroom is None:
            raise NotFoundError("New classroom not found")
        if classroom.school != student.school:
            raise ValidationError("Cannot transfer student to a classroom in a different school")
        if student.classroom == new_classroom_id:
            raise ValidationError("Student is already in this classroom")
        return classroom

    async def validate_unique_email(self, email: str) -> None:
        if await self.users.find_by_email(email) is not None:
            raise ValidationError("User already exists with this email")
