# school_api/models/user.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone
import uuid

from .enums import UserRole
from .refs import SchoolRef

# Shared base properties
class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="Display name")
    email: EmailStr = Field(..., description="Login email, unique across all users")
    role: UserRole

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )

    # Passwords are kept exactly as typed, so only these are trimmed
    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

# Registration payload
class UserRegister(UserBase):
    password: str = Field(..., min_length=6, description="Plain password, at least 6 characters")
    school: Optional[uuid.UUID] = Field(None, description="Required for schooladmin, forbidden for superadmin")

class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

# Properties stored in DB
class UserInDB(UserBase):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    password: str = Field(..., description="bcrypt hash")
    school: Optional[uuid.UUID] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Returned by /auth/register and /auth/login
class AuthenticatedUser(UserBase):
    id: uuid.UUID = Field(..., alias="_id")
    school: Optional[uuid.UUID] = None
    token: str

# Returned by /auth/me, with the school joined in
class User(UserBase):
    id: uuid.UUID = Field(..., alias="_id")
    school: Optional[SchoolRef] = None
    created_at: datetime
    updated_at: datetime
