# school_api/models/refs.py
# Projections used when a referenced document is joined into a response.
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
import uuid


class RefBase(BaseModel):
    id: uuid.UUID = Field(..., alias="_id")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserRef(RefBase):
    name: str
    email: str


class SchoolRef(RefBase):
    name: str
    address: Optional[str] = None


class ClassroomRef(RefBase):
    name: str
    capacity: int
