# school_api/db/repositories.py
"""
One repository per collection: key lookups, filtered scans, counts and writes.

Repositories are plain objects built around a motor database handle and are
injected into the services; nothing here knows about actors or tenants. Scope
filters arrive from the policy layer as ready-made query dicts.
"""

# --- Core Imports ---
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument, DESCENDING
from pymongo.errors import DuplicateKeyError
import uuid
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar
from datetime import datetime, timezone
import logging

from pydantic import BaseModel

from school_api.core.errors import ConflictError
from school_api.db.database import (
    USER_COLLECTION,
    SCHOOL_COLLECTION,
    CLASSROOM_COLLECTION,
    STUDENT_COLLECTION,
)
from school_api.models.user import UserInDB
from school_api.models.school import SchoolInDB
from school_api.models.classroom import ClassroomInDB
from school_api.models.student import StudentInDB

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Newest first; _id breaks ties between documents created in the same millisecond
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class MongoRepository(Generic[ModelT]):
    collection_name: str
    model: Type[ModelT]
    # Reported when a unique index rejects a write that passed the pre-check
    duplicate_message: str = "Duplicate field value entered"

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[self.collection_name]

    # --- Conversions ---
    def _to_model(self, doc: Dict[str, Any]) -> ModelT:
        return self.model.model_validate(doc)

    @staticmethod
    def _to_document(item: BaseModel) -> Dict[str, Any]:
        doc = item.model_dump(by_alias=False)
        doc["_id"] = doc.pop("id")
        return doc

    # --- Reads ---
    async def get_by_id(self, item_id: uuid.UUID) -> Optional[ModelT]:
        doc = await self.collection.find_one({"_id": item_id})
        if doc is None:
            logger.debug(f"{self.collection_name}: {item_id} not found.")
            return None
        return self._to_model(doc)

    async def find_one(self, query: Dict[str, Any]) -> Optional[ModelT]:
        doc = await self.collection.find_one(query)
        return self._to_model(doc) if doc is not None else None

    async def exists(self, query: Dict[str, Any]) -> bool:
        return await self.collection.find_one(query, {"_id": 1}) is not None

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self.collection.count_documents(query or {})

    async def find_many(self, query: Optional[Dict[str, Any]] = None, skip: int = 0, limit: int = 0) -> List[ModelT]:
        """Filtered scan, newest first. ``limit=0`` means no limit."""
        cursor = self.collection.find(query or {}, sort=NEWEST_FIRST, skip=skip, limit=limit)
        items: List[ModelT] = []
        async for doc in cursor:
            items.append(self._to_model(doc))
        return items

    async def get_many_by_ids(self, ids: Iterable[Optional[uuid.UUID]]) -> Dict[uuid.UUID, ModelT]:
        """Batch lookup used to join referenced documents into list responses."""
        wanted = list({i for i in ids if i is not None})
        if not wanted:
            return {}
        found: Dict[uuid.UUID, ModelT] = {}
        async for doc in self.collection.find({"_id": {"$in": wanted}}):
            item = self._to_model(doc)
            found[item.id] = item
        return found

    # --- Writes ---
    async def insert(self, item: ModelT) -> ModelT:
        doc = self._to_document(item)
        logger.info(f"Inserting into {self.collection_name}: {doc['_id']}")
        try:
            await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key on insert into {self.collection_name}: {e.details}")
            raise ConflictError(self.duplicate_message) from e
        return item

    async def update(self, item_id: uuid.UUID, fields: Dict[str, Any]) -> Optional[ModelT]:
        """Sets ``fields`` on the document and returns it after the update."""
        update_data = {k: v for k, v in fields.items() if k not in ("_id", "id", "created_at")}
        update_data["updated_at"] = datetime.now(timezone.utc)
        logger.info(f"Updating {self.collection_name} {item_id}: {sorted(update_data)}")
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": item_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key on update of {self.collection_name} {item_id}: {e.details}")
            raise ConflictError(self.duplicate_message) from e
        if doc is None:
            logger.warning(f"{self.collection_name}: {item_id} not found for update.")
            return None
        return self._to_model(doc)

    async def delete(self, item_id: uuid.UUID) -> bool:
        result = await self.collection.delete_one({"_id": item_id})
        if result.deleted_count == 1:
            logger.info(f"Deleted {self.collection_name} {item_id}")
            return True
        logger.warning(f"{self.collection_name}: {item_id} not found for delete.")
        return False


class UserRepository(MongoRepository[UserInDB]):
    collection_name = USER_COLLECTION
    model = UserInDB
    duplicate_message = "User already exists with this email"

    async def find_by_email(self, email: str) -> Optional[UserInDB]:
        return await self.find_one({"email": email.lower()})


class SchoolRepository(MongoRepository[SchoolInDB]):
    collection_name = SCHOOL_COLLECTION
    model = SchoolInDB
    duplicate_message = "School with this name already exists"

    async def find_by_name(self, name: str) -> Optional[SchoolInDB]:
        return await self.find_one({"name": name})


class ClassroomRepository(MongoRepository[ClassroomInDB]):
    collection_name = CLASSROOM_COLLECTION
    model = ClassroomInDB
    duplicate_message = "Classroom with this name already exists in this school"

    async def find_by_name_in_school(self, name: str, school_id: uuid.UUID) -> Optional[ClassroomInDB]:
        return await self.find_one({"name": name, "school": school_id})


class StudentRepository(MongoRepository[StudentInDB]):
    collection_name = STUDENT_COLLECTION
    model = StudentInDB
