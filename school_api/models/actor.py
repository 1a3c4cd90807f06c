# school_api/models/actor.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
import uuid

from .enums import UserRole


class Actor(BaseModel):
    """
    The authenticated identity extracted from a verified token.

    Never persisted. A schooladmin is expected to carry ``school_id`` and a
    superadmin not to, but tokens are not trusted for that: the policy
    functions in ``school_api.services.policy`` enforce it per request.
    """
    subject_id: uuid.UUID
    role: UserRole
    school_id: Optional[uuid.UUID] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    @property
    def is_schooladmin(self) -> bool:
        return self.role == UserRole.SCHOOLADMIN
