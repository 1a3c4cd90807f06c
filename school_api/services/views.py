# school_api/services/views.py
# Read-time joins: referenced documents are looked up in one batch per
# collection and embedded as small projections. A dangling reference
# (e.g. a deleted school) is embedded as None.
from typing import List, Optional

from school_api.db.repositories import ClassroomRepository, SchoolRepository, UserRepository
from school_api.models.classroom import Classroom, ClassroomInDB
from school_api.models.refs import ClassroomRef, SchoolRef, UserRef
from school_api.models.school import School, SchoolInDB
from school_api.models.student import Student, StudentInDB
from school_api.models.user import User, UserInDB


def school_ref(school: Optional[SchoolInDB], with_address: bool = True) -> Optional[SchoolRef]:
    if school is None:
        return None
    return SchoolRef(id=school.id, name=school.name, address=school.address if with_address else None)


def classroom_ref(classroom: Optional[ClassroomInDB]) -> Optional[ClassroomRef]:
    if classroom is None:
        return None
    return ClassroomRef(id=classroom.id, name=classroom.name, capacity=classroom.capacity)


def user_ref(user: Optional[UserInDB]) -> Optional[UserRef]:
    if user is None:
        return None
    return UserRef(id=user.id, name=user.name, email=user.email)


async def school_views(schools: List[SchoolInDB], users: UserRepository) -> List[School]:
    creators = await users.get_many_by_ids(s.created_by for s in schools)
    return [
        School.model_validate({**s.model_dump(), "created_by": user_ref(creators.get(s.created_by))})
        for s in schools
    ]


async def classroom_views(classrooms: List[ClassroomInDB], schools: SchoolRepository) -> List[Classroom]:
    owners = await schools.get_many_by_ids(c.school for c in classrooms)
    return [
        Classroom.model_validate({**c.model_dump(), "school": school_ref(owners.get(c.school))})
        for c in classrooms
    ]


async def student_views(
    students: List[StudentInDB], schools: SchoolRepository, classrooms: ClassroomRepository
) -> List[Student]:
    owners = await schools.get_many_by_ids(s.school for s in students)
    rooms = await classrooms.get_many_by_ids(s.classroom for s in students)
    return [
        Student.model_validate({
            **s.model_dump(),
            "school": school_ref(owners.get(s.school)),
            "classroom": classroom_ref(rooms.get(s.classroom)),
        })
        for s in students
    ]


async def user_view(user: UserInDB, schools: SchoolRepository) -> User:
    school = await schools.get_by_id(user.school) if user.school else None
    data = user.model_dump(exclude={"password"})
    data["school"] = school_ref(school, with_address=False)
    return User.model_validate(data)
