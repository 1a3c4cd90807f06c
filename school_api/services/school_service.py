# school_api/services/school_service.py
import logging
import uuid
from typing import List, Optional, Tuple

from school_api.core.errors import ConflictError, NotFoundError
from school_api.core.pagination import get_pagination, get_pagination_meta
from school_api.db.repositories import (
    ClassroomRepository,
    SchoolRepository,
    StudentRepository,
    UserRepository,
)
from school_api.models.actor import Actor
from school_api.models.enums import UserRole
from school_api.models.responses import PaginationMeta
from school_api.models.school import School, SchoolCreate, SchoolInDB, SchoolUpdate
from school_api.services import policy
from school_api.services.integrity import IntegrityValidator
from school_api.services.views import school_views

logger = logging.getLogger(__name__)


class SchoolService:
    """Schools are managed by superadmins; schooladmins may only read their own."""

    def __init__(
        self,
        schools: SchoolRepository,
        users: UserRepository,
        classrooms: ClassroomRepository,
        students: StudentRepository,
        validator: IntegrityValidator,
    ):
        self.schools = schools
        self.users = users
        self.classrooms = classrooms
        self.students = students
        self.validator = validator

    async def _view(self, school: SchoolInDB) -> School:
        return (await school_views([school], self.users))[0]

    async def _get_or_404(self, school_id: uuid.UUID) -> SchoolInDB:
        school = await self.schools.get_by_id(school_id)
        if school is None:
            raise NotFoundError("School not found")
        return school

    async def create_school(self, actor: Actor, school_in: SchoolCreate) -> School:
        policy.require(
            policy.can_create_school(actor),
            f"User role '{actor.role.value}' is not authorized to access this route",
        )
        await self.validator.validate_unique_school_name(school_in.name)

        school = SchoolInDB(**school_in.model_dump(), created_by=actor.subject_id)
        await self.schools.insert(school)
        logger.info(f"School '{school.name}' ({school.id}) created by {actor.subject_id}")
        return await self._view(school)

    async def list_schools(
        self, actor: Actor, page: Optional[int] = None, limit: Optional[int] = None
    ) -> Tuple[List[School], PaginationMeta]:
        page, limit, skip = get_pagination(page, limit)
        scope = policy.list_scope(actor, field="_id")
        total = await self.schools.count(scope)
        schools = await self.schools.find_many(scope, skip=skip, limit=limit)
        return await school_views(schools, self.users), get_pagination_meta(page, limit, total)

    async def get_school(self, actor: Actor, school_id: uuid.UUID) -> School:
        school = await self._get_or_404(school_id)
        policy.require(policy.can_read_school(actor, school.id), "Not authorized to access this school")
        return await self._view(school)

    async def update_school(self, actor: Actor, school_id: uuid.UUID, school_in: SchoolUpdate) -> School:
        policy.require_role(actor, UserRole.SUPERADMIN)
        school = await self._get_or_404(school_id)
        policy.require(policy.can_write_school(actor, school.id), "Not authorized to update this school")

        fields = school_in.model_dump(exclude_unset=True, exclude_none=True)
        if fields.get("name") and fields["name"] != school.name:
            await self.validator.validate_unique_school_name(fields["name"], exclude_id=school.id)

        updated = await self.schools.update(school.id, fields)
        if updated is None:
            # Deleted between the lookup and the write
            raise NotFoundError("School not found")
        logger.info(f"School {school.id} updated by {actor.subject_id}: {sorted(fields)}")
        return await self._view(updated)

    async def delete_school(self, actor: Actor, school_id: uuid.UUID) -> None:
        policy.require_role(actor, UserRole.SUPERADMIN)
        school = await self._get_or_404(school_id)
        policy.require(policy.can_write_school(actor, school.id), "Not authorized to delete this school")

        # Deleting would orphan the tenant's classrooms and students
        if await self.classrooms.exists({"school": school.id}) or await self.students.exists({"school": school.id}):
            raise ConflictError("Cannot delete a school that still has classrooms or students")

        if not await self.schools.delete(school.id):
            raise NotFoundError("School not found")
        logger.info(f"School {school.id} deleted by {actor.subject_id}")
