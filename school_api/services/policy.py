# school_api/services/policy.py
"""
Authorization and tenant-isolation rules.

Every function here is a pure decision over an ``Actor`` and the tenant (school
id) of the target resource; nothing touches the database. The ``can_*``
predicates answer allow/deny, the ``require_*`` helpers raise ``ForbiddenError``
with the message the API returns.

Existence is always checked by the caller before these run, so a schooladmin
asking for another school's resource by id gets 404 when it does not exist and
403 when it does. That difference reveals existence across tenants and is a
known property of the API.
"""

import uuid
from typing import Any, Dict, Optional

from school_api.core.errors import ForbiddenError
from school_api.models.actor import Actor
from school_api.models.enums import UserRole

UNASSIGNED_ADMIN_MESSAGE = "School admin must be assigned to a school"


def _same_tenant(actor: Actor, school_id: Optional[uuid.UUID]) -> bool:
    return actor.school_id is not None and school_id is not None and actor.school_id == school_id


# --- Schools ---

def can_create_school(actor: Actor) -> bool:
    return actor.role == UserRole.SUPERADMIN


def can_write_school(actor: Actor, school_id: Optional[uuid.UUID] = None) -> bool:
    # A superadmin has no tenant restriction, so the target is irrelevant
    return actor.role == UserRole.SUPERADMIN


def can_read_school(actor: Actor, school_id: uuid.UUID) -> bool:
    if actor.role == UserRole.SUPERADMIN:
        return True
    return actor.role == UserRole.SCHOOLADMIN and _same_tenant(actor, school_id)


# --- Classrooms & Students ---

def can_read_tenant_resource(actor: Actor, school_id: Optional[uuid.UUID]) -> bool:
    """Read access to a classroom or student owned by ``school_id``."""
    if actor.role == UserRole.SUPERADMIN:
        return True
    return actor.role == UserRole.SCHOOLADMIN and _same_tenant(actor, school_id)


def can_write_classroom(actor: Actor, classroom_school_id: Optional[uuid.UUID]) -> bool:
    return actor.role == UserRole.SCHOOLADMIN and _same_tenant(actor, classroom_school_id)


def can_write_student(actor: Actor, student_school_id: Optional[uuid.UUID]) -> bool:
    return actor.role == UserRole.SCHOOLADMIN and _same_tenant(actor, student_school_id)


# --- Scoping ---

def list_scope(actor: Actor, field: str = "school") -> Dict[str, Any]:
    """
    Query restriction for list endpoints.

    Superadmins see everything. A schooladmin only sees documents whose
    ``field`` equals their school (``_id`` for schools, ``school`` otherwise).
    """
    if actor.role == UserRole.SUPERADMIN:
        return {}
    return {field: require_assigned_school(actor)}


# --- Enforcement helpers ---

def require(allowed: bool, message: str) -> None:
    if not allowed:
        raise ForbiddenError(message)


def require_role(actor: Actor, *roles: UserRole) -> None:
    if actor.role not in roles:
        raise ForbiddenError(f"User role '{actor.role.value}' is not authorized to access this route")


def require_assigned_school(actor: Actor) -> uuid.UUID:
    """Returns the actor's school, or refuses a schooladmin that has none."""
    if actor.school_id is None:
        raise ForbiddenError(UNASSIGNED_ADMIN_MESSAGE)
    return actor.school_id


def require_body_tenant(actor: Actor, body_school_id: uuid.UUID, resource: str) -> None:
    """A resource can only be created in the actor's own school."""
    if not _same_tenant(actor, body_school_id):
        raise ForbiddenError(f"You can only create {resource} in your assigned school")
