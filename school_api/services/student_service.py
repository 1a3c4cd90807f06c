# school_api/services/student_service.py
import logging
import uuid
from typing import List, Optional, Tuple

from school_api.core.errors import NotFoundError
from school_api.core.pagination import get_pagination, get_pagination_meta
from school_api.db.repositories import ClassroomRepository, SchoolRepository, StudentRepository
from school_api.models.actor import Actor
from school_api.models.enums import UserRole
from school_api.models.responses import PaginationMeta
from school_api.models.student import Student, StudentCreate, StudentInDB, StudentTransfer, StudentUpdate
from school_api.services import policy
from school_api.services.integrity import IntegrityValidator
from school_api.services.views import student_views

logger = logging.getLogger(__name__)


class StudentService:
    """
    Enrollment, updates and transfers of students.

    A student always belongs to one school and one classroom of that school;
    transfers move the student between classrooms without leaving the school.
    """

    def __init__(
        self,
        students: StudentRepository,
        schools: SchoolRepository,
        classrooms: ClassroomRepository,
        validator: IntegrityValidator,
    ):
        self.students = students
        self.schools = schools
        self.classrooms = classrooms
        self.validator = validator

    async def _view(self, student: StudentInDB) -> Student:
        return (await student_views([student], self.schools, self.classrooms))[0]

    async def _get_or_404(self, student_id: uuid.UUID) -> StudentInDB:
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return student

    async def _load_for_write(self, actor: Actor, student_id: uuid.UUID, action: str) -> StudentInDB:
        policy.require_role(actor, UserRole.SCHOOLADMIN)
        policy.require_assigned_school(actor)
        student = await self._get_or_404(student_id)
        policy.require(
            policy.can_write_student(actor, student.school),
            f"You can only {action} students in your assigned school",
        )
        return student

    async def create_student(self, actor: Actor, student_in: StudentCreate) -> Student:
        policy.require_role(actor, UserRole.SCHOOLADMIN)
        policy.require_assigned_school(actor)
        policy.require_body_tenant(actor, student_in.school, "students")
        await self.validator.validate_school_exists(student_in.school)
        await self.validator.validate_classroom_belongs_to_school(student_in.classroom, student_in.school)

        student = StudentInDB(**student_in.model_dump())
        await self.students.insert(student)
        logger.info(f"Student {student.id} enrolled in classroom {student.classroom} of school {student.school}")
        return await self._view(student)

    async def list_students(
        self, actor: Actor, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Tuple[List[Student], PaginationMeta]:
        page, limit, skip = get_pagination(page, limit)
        scope = policy.list_scope(actor, field="school")
        total = await self.students.count(scope)
        students = await self.students.find_many(scope, skip=skip, limit=limit)
        return await student_views(students, self.schools, self.classrooms), get_pagination_meta(page, limit, total)

    async def get_student(self, actor: Actor, student_id: uuid.UUID) -> Student:
        student = await self._get_or_404(student_id)
        policy.require(
            policy.can_read_tenant_resource(actor, student.school),
            "Not authorized to access this student",
        )
        return await self._view(student)

    async def update_student(self, actor: Actor, student_id: uuid.UUID, student_in: StudentUpdate) -> Student:
        student = await self._load_for_write(actor, student_id, "update")

        # Only name and age are editable here; school and classroom never change on update
        fields = student_in.model_dump(exclude_unset=True, exclude_none=True)
        updated = await self.students.update(student.id, fields)
        if updated is None:
            raise NotFoundError("Student not found")
        logger.info(f"Student {student.id} updated by {actor.subject_id}: {sorted(fields)}")
        return await self._view(updated)

    async def transfer_student(self, actor: Actor, student_id: uuid.UUID, transfer: StudentTransfer) -> Student:
        student = await self._load_for_write(actor, student_id, "transfer")
        await self.validator.validate_transfer_target(student, transfer.new_classroom)

        updated = await self.students.update(student.id, {"classroom": transfer.new_classroom})
        if updated is None:
            raise NotFoundError("Student not found")
        logger.info(f"Student {student.id} transferred from {student.classroom} to {transfer.new_classroom}")
        return await self._view(updated)

    async def delete_student(self, actor: Actor, student_id: uuid.UUID) -> None:
        student = await self._load_for_write(actor, student_id, "delete")
        if not await self.students.delete(student.id):
            raise NotFoundError("Student not found")
        logger.info(f"Student {student.id} deleted by {actor.subject_id}")
