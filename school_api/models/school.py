# school_api/models/school.py
from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone
import uuid

from .refs import UserRef

# Shared base properties
class SchoolBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Unique school name")
    address: str = Field(..., min_length=1, max_length=200)
    contact_email: EmailStr = Field(..., description="Contact email, stored lower-cased")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )

    @field_validator("contact_email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

# Properties required on creation
class SchoolCreate(SchoolBase):
    pass

# Model for updating - every field optional, but never blank when supplied
class SchoolUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_email: Optional[EmailStr] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @field_validator("contact_email")
    @classmethod
    def lower_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value

# Properties stored in DB
class SchoolInDB(SchoolBase):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    created_by: uuid.UUID
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Final model returned by the API, with the creator joined in
class School(SchoolBase):
    id: uuid.UUID = Field(..., alias="_id")
    created_by: Optional[UserRef] = None
    created_at: datetime
    updated_at: datetime
