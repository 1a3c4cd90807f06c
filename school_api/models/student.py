# school_api/models/student.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone
import uuid

from .refs import ClassroomRef, SchoolRef

# Shared base properties
class StudentBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50, description="Student's first name")
    last_name: str = Field(..., min_length=1, max_length=50, description="Student's last name")
    age: int = Field(..., ge=3, le=100, description="Age in years (3-100)")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )

# Properties required on creation
class StudentCreate(StudentBase):
    classroom: uuid.UUID = Field(..., description="Classroom the student is placed in")
    school: uuid.UUID = Field(..., description="School the student belongs to; must own the classroom")

# Model for updating. Classroom changes go through the transfer endpoint.
class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    age: Optional[int] = Field(None, ge=3, le=100)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

class StudentTransfer(BaseModel):
    new_classroom: uuid.UUID = Field(..., description="Destination classroom in the same school")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# Properties stored in DB
class StudentInDB(StudentBase):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    classroom: uuid.UUID
    school: uuid.UUID
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Final model returned by the API, with classroom and school joined in
class Student(StudentBase):
    id: uuid.UUID = Field(..., alias="_id")
    classroom: Optional[ClassroomRef] = None
    school: Optional[SchoolRef] = None
    created_at: datetime
    updated_at: datetime
