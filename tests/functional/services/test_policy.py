# tests/functional/services/test_policy.py

import uuid

import pytest

from school_api.core.errors import ForbiddenError
from school_api.models.actor import Actor
from school_api.models.enums import UserRole
from school_api.services import policy

SCHOOL_1 = uuid.uuid4()
SCHOOL_2 = uuid.uuid4()

SUPER = Actor(subject_id=uuid.uuid4(), role=UserRole.SUPERADMIN)
ADMIN_1 = Actor(subject_id=uuid.uuid4(), role=UserRole.SCHOOLADMIN, school_id=SCHOOL_1)
UNASSIGNED = Actor(subject_id=uuid.uuid4(), role=UserRole.SCHOOLADMIN)


def test_only_superadmin_creates_and_writes_schools():
    assert policy.can_create_school(SUPER)
    assert policy.can_write_school(SUPER, SCHOOL_1)
    assert not policy.can_create_school(ADMIN_1)
    assert not policy.can_write_school(ADMIN_1, SCHOOL_1)


def test_school_read_is_scoped():
    assert policy.can_read_school(SUPER, SCHOOL_2)
    assert policy.can_read_school(ADMIN_1, SCHOOL_1)
    assert not policy.can_read_school(ADMIN_1, SCHOOL_2)
    assert not policy.can_read_school(UNASSIGNED, SCHOOL_1)


def test_tenant_resource_read_is_scoped():
    assert policy.can_read_tenant_resource(SUPER, SCHOOL_2)
    assert policy.can_read_tenant_resource(ADMIN_1, SCHOOL_1)
    assert not policy.can_read_tenant_resource(ADMIN_1, SCHOOL_2)
    assert not policy.can_read_tenant_resource(ADMIN_1, None)


@pytest.mark.parametrize("check", [policy.can_write_classroom, policy.can_write_student])
def test_classroom_and_student_writes_belong_to_schooladmins(check):
    assert check(ADMIN_1, SCHOOL_1)
    assert not check(ADMIN_1, SCHOOL_2)
    assert not check(SUPER, SCHOOL_1)
    assert not check(UNASSIGNED, SCHOOL_1)


def test_list_scope():
    assert policy.list_scope(SUPER) == {}
    assert policy.list_scope(ADMIN_1) == {"school": SCHOOL_1}
    assert policy.list_scope(ADMIN_1, field="_id") == {"_id": SCHOOL_1}
    with pytest.raises(ForbiddenError, match="School admin must be assigned to a school"):
        policy.list_scope(UNASSIGNED)


def test_require_role_message():
    policy.require_role(SUPER, UserRole.SUPERADMIN)
    with pytest.raises(ForbiddenError) as exc_info:
        policy.require_role(ADMIN_1, UserRole.SUPERADMIN)
    assert exc_info.value.message == "User role 'schooladmin' is not authorized to access this route"


def test_require_assigned_school():
    assert policy.require_assigned_school(ADMIN_1) == SCHOOL_1
    with pytest.raises(ForbiddenError):
        policy.require_assigned_school(UNASSIGNED)


def test_require_body_tenant():
    policy.require_body_tenant(ADMIN_1, SCHOOL_1, "classrooms")
    with pytest.raises(ForbiddenError) as exc_info:
        policy.require_body_tenant(ADMIN_1, SCHOOL_2, "students")
    assert exc_info.value.message == "You can only create students in your assigned school"


def test_require_passes_and_refuses():
    policy.require(True, "unused")
    with pytest.raises(ForbiddenError, match="nope"):
        policy.require(False, "nope")
