# school_api/services/classroom_service.py
import logging
import uuid
from typing import List, Optional, Tuple

from school_api.core.errors import NotFoundError
from school_api.core.pagination import get_pagination, get_pagination_meta
from school_api.db.repositories import ClassroomRepository, SchoolRepository
from school_api.models.actor import Actor
from school_api.models.classroom import Classroom, ClassroomCreate, ClassroomInDB, ClassroomUpdate
from school_api.models.enums import UserRole
from school_api.models.responses import PaginationMeta
from school_api.services import policy
from school_api.services.integrity import IntegrityValidator
from school_api.services.views import classroom_views

logger = logging.getLogger(__name__)


class ClassroomService:
    def __init__(self, classrooms: ClassroomRepository, schools: SchoolRepository, validator: IntegrityValidator):
        self.classrooms = classrooms
        self.schools = schools
        self.validator = validator

    async def _view(self, classroom: ClassroomInDB) -> Classroom:
        return (await classroom_views([classroom], self.schools))[0]

    async def _get_or_404(self, classroom_id: uuid.UUID) -> ClassroomInDB:
        classroom = await self.classrooms.get_by_id(classroom_id)
        if classroom is None:
            raise NotFoundError("Classroom not found")
        return classroom

    async def create_classroom(self, actor: Actor, classroom_in: ClassroomCreate) -> Classroom:
        policy.require_role(actor, UserRole.SCHOOLADMIN)
        policy.require_assigned_school(actor)
        policy.require_body_tenant(actor, classroom_in.school, "classrooms")
        await self.validator.validate_school_exists(classroom_in.school)
        await self.validator.validate_unique_classroom_name(classroom_in.name, classroom_in.school)

        classroom = ClassroomInDB(**classroom_in.model_dump())
        await self.classrooms.insert(classroom)
        logger.info(f"Classroom '{classroom.name}' ({classroom.id}) created in school {classroom.school}")
        return await self._view(classroom)

    async def list_classrooms(
        self, actor: Actor, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Tuple[List[Classroom], PaginationMeta]:
        page, limit, skip = get_pagination(page, limit)
        scope = policy.list_scope(actor, field="school")
        total = await self.classrooms.count(scope)
        classrooms = await self.classrooms.find_many(scope, skip=skip, limit=limit)
        return await classroom_views(classrooms, self.schools), get_pagination_meta(page, limit, total)

    async def get_classroom(self, actor: Actor, classroom_id: uuid.UUID) -> Classroom:
        classroom = await self._get_or_404(classroom_id)
        policy.require(
            policy.can_read_tenant_resource(actor, classroom.school),
            "Not authorized to access this classroom",
        )
        return await self._view(classroom)

    async def update_classroom(self, actor: Actor, classroom_id: uuid.UUID, classroom_in: ClassroomUpdate) -> Classroom:
        policy.require_role(actor, UserRole.SCHOOLADMIN)
        policy.require_assigned_school(actor)
        classroom = await self._get_or_404(classroom_id)
        policy.require(
            policy.can_write_classroom(actor, classroom.school),
            "You can only update classrooms in your assigned school",
        )

        fields = classroom_in.model_dump(exclude_unset=True, exclude_none=True)
        if fields.get("name") and fields["name"] != classroom.name:
            await self.validator.validate_unique_classroom_name(fields["name"], classroom.school, exclude_id=classroom.id)

        updated = await self.classrooms.update(classroom.id, fields)
        if updated is None:
            raise NotFoundError("Classroom not found")
        logger.info(f"Classroom {classroom.id} updated by {actor.subject_id}: {sorted(fields)}")
        return await self._view(updated)

    async def delete_classroom(self, actor: Actor, classroom_id: uuid.UUID) -> None:
        policy.require_role(actor, UserRole.SCHOOLADMIN)
        policy.require_assigned_school(actor)
        classroom = await self._get_or_404(classroom_id)
        policy.require(
            policy.can_write_classroom(actor, classroom.school),
            "You can only delete classrooms in your assigned school",
        )

        if not await self.classrooms.delete(classroom.id):
            raise NotFoundError("Classroom not found")
        logger.info(f"Classroom {classroom.id} deleted by {actor.subject_id}")
