# tests/conftest.py
import os

# Settings are read at import time, so the environment has to be in place first
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("ENVIRONMENT", "test")

import logging
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional
import uuid

import httpx
import pytest
import pytest_asyncio
from bson import BSON
from bson.binary import UuidRepresentation
from bson.codec_options import CodecOptions
from fastapi import FastAPI
from mongomock_motor import AsyncMongoMockClient

from school_api.api.deps import get_db
from school_api.core.security import create_access_token, hash_password
from school_api.db.database import ensure_indexes
from school_api.db.repositories import (
    ClassroomRepository,
    SchoolRepository,
    StudentRepository,
    UserRepository,
)
from school_api.main import app as fastapi_app
from school_api.models.actor import Actor
from school_api.models.classroom import ClassroomInDB
from school_api.models.enums import UserRole
from school_api.models.school import SchoolInDB
from school_api.models.student import StudentInDB
from school_api.models.user import UserInDB
from school_api.services.auth_service import AuthService
from school_api.services.classroom_service import ClassroomService
from school_api.services.integrity import IntegrityValidator
from school_api.services.school_service import SchoolService
from school_api.services.student_service import StudentService

logger = logging.getLogger(__name__)

PASSWORD = "password123"

STANDARD_UUID_OPTIONS = CodecOptions(uuid_representation=UuidRepresentation.STANDARD, tz_aware=True)


class StandardUuidBSON(BSON):
    """mongomock checks documents with pymongo's default codec options, which refuse native UUIDs."""

    @classmethod
    def encode(cls, document, check_keys=False, codec_options=STANDARD_UUID_OPTIONS):
        return super().encode(document, check_keys=check_keys, codec_options=codec_options)


# --- Database & Repositories ---

@pytest_asyncio.fixture(scope="function")
async def db(monkeypatch):
    """Fresh in-memory database per test, with the production indexes."""
    monkeypatch.setattr("mongomock.collection.BSON", StandardUuidBSON)
    client = AsyncMongoMockClient(uuidRepresentation="standard", tz_aware=True)
    database = client["school_management_test"]
    await ensure_indexes(database)
    yield database


@pytest.fixture
def users(db) -> UserRepository:
    return UserRepository(db)

@pytest.fixture
def schools(db) -> SchoolRepository:
    return SchoolRepository(db)

@pytest.fixture
def classrooms(db) -> ClassroomRepository:
    return ClassroomRepository(db)

@pytest.fixture
def students(db) -> StudentRepository:
    return StudentRepository(db)

@pytest.fixture
def validator(users, schools, classrooms) -> IntegrityValidator:
    return IntegrityValidator(users, schools, classrooms)


# --- Services ---

@pytest.fixture
def auth_service(users, schools, validator) -> AuthService:
    return AuthService(users, schools, validator)

@pytest.fixture
def school_service(schools, users, classrooms, students, validator) -> SchoolService:
    return SchoolService(schools, users, classrooms, students, validator)

@pytest.fixture
def classroom_service(classrooms, schools, validator) -> ClassroomService:
    return ClassroomService(classrooms, schools, validator)

@pytest.fixture
def student_service(students, schools, classrooms, validator) -> StudentService:
    return StudentService(students, schools, classrooms, validator)


# --- Seed data ---

@pytest.fixture(scope="session")
def password_hash() -> str:
    # bcrypt is slow on purpose; hash once per session
    return hash_password(PASSWORD)


@pytest_asyncio.fixture
async def superadmin(users, password_hash) -> UserInDB:
    user = UserInDB(name="Super Admin", email="super@example.com", role=UserRole.SUPERADMIN, password=password_hash)
    return await users.insert(user)


@pytest_asyncio.fixture
async def make_school(schools, superadmin) -> Callable[..., Awaitable[SchoolInDB]]:
    async def _make_school(name: str, created_at: Optional[datetime] = None) -> SchoolInDB:
        data = dict(
            name=name,
            address=f"{name} Street 1",
            contact_email=f"{name.lower().replace(' ', '.')}@example.com",
            created_by=superadmin.id,
        )
        if created_at is not None:
            data.update(created_at=created_at, updated_at=created_at)
        return await schools.insert(SchoolInDB(**data))
    return _make_school


@pytest_asyncio.fixture
async def make_admin(users, password_hash) -> Callable[..., Awaitable[UserInDB]]:
    async def _make_admin(email: str, school_id: uuid.UUID) -> UserInDB:
        user = UserInDB(
            name=email.split("@")[0],
            email=email,
            role=UserRole.SCHOOLADMIN,
            password=password_hash,
            school=school_id,
        )
        return await users.insert(user)
    return _make_admin


@pytest_asyncio.fixture
async def make_classroom(classrooms) -> Callable[..., Awaitable[ClassroomInDB]]:
    async def _make_classroom(school_id: uuid.UUID, name: str, capacity: int = 30,
                              created_at: Optional[datetime] = None) -> ClassroomInDB:
        data = dict(name=name, capacity=capacity, school=school_id)
        if created_at is not None:
            data.update(created_at=created_at, updated_at=created_at)
        return await classrooms.insert(ClassroomInDB(**data))
    return _make_classroom


@pytest_asyncio.fixture
async def make_student(students) -> Callable[..., Awaitable[StudentInDB]]:
    async def _make_student(classroom: ClassroomInDB, first_name: str = "Ada", last_name: str = "Lovelace",
                            age: int = 12, created_at: Optional[datetime] = None) -> StudentInDB:
        data = dict(first_name=first_name, last_name=last_name, age=age,
                    classroom=classroom.id, school=classroom.school)
        if created_at is not None:
            data.update(created_at=created_at, updated_at=created_at)
        return await students.insert(StudentInDB(**data))
    return _make_student


@pytest_asyncio.fixture
async def school_a(make_school) -> SchoolInDB:
    return await make_school("Alpha High")

@pytest_asyncio.fixture
async def school_b(make_school) -> SchoolInDB:
    return await make_school("Beta Academy")

@pytest_asyncio.fixture
async def admin_a(make_admin, school_a) -> UserInDB:
    return await make_admin("admin.a@example.com", school_a.id)

@pytest_asyncio.fixture
async def admin_b(make_admin, school_b) -> UserInDB:
    return await make_admin("admin.b@example.com", school_b.id)


# --- Actors & Tokens ---

@pytest.fixture
def super_actor(superadmin) -> Actor:
    return AuthService.actor_for(superadmin)

@pytest.fixture
def actor_a(admin_a) -> Actor:
    return AuthService.actor_for(admin_a)

@pytest.fixture
def actor_b(admin_b) -> Actor:
    return AuthService.actor_for(admin_b)

@pytest.fixture
def unassigned_actor() -> Actor:
    """A schooladmin identity without a school, as carried by a stale or hand-made token."""
    return Actor(subject_id=uuid.uuid4(), role=UserRole.SCHOOLADMIN, school_id=None)


def bearer(actor: Actor, expires_delta: Optional[timedelta] = None) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(actor, expires_delta)}"}


@pytest.fixture
def super_headers(super_actor) -> Dict[str, str]:
    return bearer(super_actor)

@pytest.fixture
def headers_a(actor_a) -> Dict[str, str]:
    return bearer(actor_a)

@pytest.fixture
def headers_b(actor_b) -> Dict[str, str]:
    return bearer(actor_b)

@pytest.fixture
def unassigned_headers(unassigned_actor) -> Dict[str, str]:
    return bearer(unassigned_actor)


# --- App & Client ---

@pytest_asyncio.fixture(scope="function")
async def app(db) -> AsyncGenerator[FastAPI, None]:
    """The application wired to the in-memory database, without running startup."""
    fastapi_app.dependency_overrides[get_db] = lambda: db
    fastapi_app.state.rate_limiter.reset()
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.rate_limiter.reset()


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def utc(minutes: int) -> datetime:
    """A fixed, distinct timestamp for ordering tests."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)


@pytest.fixture
def token_headers() -> Callable[..., Dict[str, str]]:
    return bearer


@pytest.fixture
def at() -> Callable[[int], datetime]:
    return utc
