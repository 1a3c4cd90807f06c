# school_api/api/deps.py
from typing import Annotated, Callable

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from school_api.core.errors import InternalError
from school_api.core.security import get_current_actor
from school_api.db.database import get_database
from school_api.db.repositories import (
    ClassroomRepository,
    SchoolRepository,
    StudentRepository,
    UserRepository,
)
from school_api.models.actor import Actor
from school_api.models.enums import UserRole
from school_api.services import policy
from school_api.services.auth_service import AuthService
from school_api.services.classroom_service import ClassroomService
from school_api.services.integrity import IntegrityValidator
from school_api.services.school_service import SchoolService
from school_api.services.student_service import StudentService


async def get_db() -> AsyncIOMotorDatabase:
    """Database handle opened at startup."""
    db = get_database()
    if db is None:
        raise InternalError("Database connection is not available")
    return db


# --- Repositories ---
def get_user_repository(db: Annotated[AsyncIOMotorDatabase, Depends(get_db)]) -> UserRepository:
    return UserRepository(db)

def get_school_repository(db: Annotated[AsyncIOMotorDatabase, Depends(get_db)]) -> SchoolRepository:
    return SchoolRepository(db)

def get_classroom_repository(db: Annotated[AsyncIOMotorDatabase, Depends(get_db)]) -> ClassroomRepository:
    return ClassroomRepository(db)

def get_student_repository(db: Annotated[AsyncIOMotorDatabase, Depends(get_db)]) -> StudentRepository:
    return StudentRepository(db)

def get_integrity_validator(
    users: Annotated[UserRepository, Depends(get_user_repository)],
    schools: Annotated[SchoolRepository, Depends(get_school_repository)],
    classrooms: Annotated[ClassroomRepository, Depends(get_classroom_repository)],
) -> IntegrityValidator:
    return IntegrityValidator(users, schools, classrooms)


# --- Services ---
def get_auth_service(
    users: Annotated[UserRepository, Depends(get_user_repository)],
    schools: Annotated[SchoolRepository, Depends(get_school_repository)],
    validator: Annotated[IntegrityValidator, Depends(get_integrity_validator)],
) -> AuthService:
    return AuthService(users, schools, validator)

def get_school_service(
    schools: Annotated[SchoolRepository, Depends(get_school_repository)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
    classrooms: Annotated[ClassroomRepository, Depends(get_classroom_repository)],
    students: Annotated[StudentRepository, Depends(get_student_repository)],
    validator: Annotated[IntegrityValidator, Depends(get_integrity_validator)],
) -> SchoolService:
    return SchoolService(schools, users, classrooms, students, validator)

def get_classroom_service(
    classrooms: Annotated[ClassroomRepository, Depends(get_classroom_repository)],
    schools: Annotated[SchoolRepository, Depends(get_school_repository)],
    validator: Annotated[IntegrityValidator, Depends(get_integrity_validator)],
) -> ClassroomService:
    return ClassroomService(classrooms, schools, validator)

def get_student_service(
    students: Annotated[StudentRepository, Depends(get_student_repository)],
    schools: Annotated[SchoolRepository, Depends(get_school_repository)],
    classrooms: Annotated[ClassroomRepository, Depends(get_classroom_repository)],
    validator: Annotated[IntegrityValidator, Depends(get_integrity_validator)],
) -> StudentService:
    return StudentService(students, schools, classrooms, validator)


# --- Authorization ---
def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory: authenticates the request and refuses any actor whose
    role is not in ``roles``. Returns the actor for the endpoint to use.
    """
    async def _require_roles(actor: Annotated[Actor, Depends(get_current_actor)]) -> Actor:
        policy.require_role(actor, *roles)
        return actor

    return _require_roles
