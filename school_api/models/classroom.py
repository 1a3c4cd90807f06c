# school_api/models/classroom.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone
import uuid

from .refs import SchoolRef

# Shared base properties
class ClassroomBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="Name, unique within its school")
    capacity: int = Field(..., ge=1, le=500, description="Number of seats (1-500)")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )

# Properties required on creation
class ClassroomCreate(ClassroomBase):
    school: uuid.UUID = Field(..., description="School this classroom belongs to")

# Model for updating. The owning school cannot be changed.
class ClassroomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    capacity: Optional[int] = Field(None, ge=1, le=500)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

# Properties stored in DB
class ClassroomInDB(ClassroomBase):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    school: uuid.UUID
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Final model returned by the API, with the school joined in
class Classroom(ClassroomBase):
    id: uuid.UUID = Field(..., alias="_id")
    school: Optional[SchoolRef] = None
    created_at: datetime
    updated_at: datetime
