# school_api/services/auth_service.py
import logging

from school_api.core.errors import NotFoundError, UnauthenticatedError, ValidationError
from school_api.core.security import create_access_token, hash_password, verify_password
from school_api.db.repositories import SchoolRepository, UserRepository
from school_api.models.actor import Actor
from school_api.models.enums import UserRole
from school_api.models.user import AuthenticatedUser, User, UserInDB, UserLogin, UserRegister
from school_api.services.integrity import IntegrityValidator
from school_api.services.views import user_view

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AuthService:
    def __init__(self, users: UserRepository, schools: SchoolRepository, validator: IntegrityValidator):
        self.users = users
        self.schools = schools
        self.validator = validator

    @staticmethod
    def actor_for(user: UserInDB) -> Actor:
        """The identity a token issued for ``user`` carries."""
        return Actor(subject_id=user.id, role=UserRole(user.role), school_id=user.school)

    def _authenticated(self, user: UserInDB) -> AuthenticatedUser:
        token = create_access_token(self.actor_for(user))
        return AuthenticatedUser(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            school=user.school,
            token=token,
        )

    async def register(self, user_in: UserRegister) -> AuthenticatedUser:
        """Creates an admin account and returns it with a fresh token."""
        await self.validator.validate_unique_email(user_in.email)

        role = UserRole(user_in.role)
        if role == UserRole.SUPERADMIN and user_in.school is not None:
            raise ValidationError("Superadmin cannot be assigned to a school")
        if role == UserRole.SCHOOLADMIN:
            if user_in.school is None:
                raise ValidationError("School is required for schooladmin role")
            await self.validator.validate_school_exists(user_in.school)

        user = UserInDB(
            name=user_in.name,
            email=user_in.email,
            role=role,
            password=hash_password(user_in.password),
            school=user_in.school,
        )
        await self.users.insert(user)
        logger.info(f"Registered {user.role} {user.id} ({user.email})")
        return self._authenticated(user)

    async def login(self, credentials: UserLogin) -> AuthenticatedUser:
        user = await self.users.find_by_email(credentials.email)
        # Same message for an unknown email and a wrong password
        if user is None or not verify_password(credentials.password, user.password):
            logger.info(f"Failed login for {credentials.email}")
            raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)
        logger.info(f"User {user.id} logged in")
        return self._authenticated(user)

    async def get_me(self, actor: Actor) -> User:
        user = await self.users.get_by_id(actor.subject_id)
        if user is None:
            raise NotFoundError("User not found")
        return await user_view(user, self.schools)
