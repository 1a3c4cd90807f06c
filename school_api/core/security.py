# school_api/core/security.py
"""
Security module for password hashing and signed access tokens.

Provides functionality for:
- bcrypt password hashing and verification (passlib).
- Issuing HS256 JWTs that carry the actor identity (``sub``, ``role``, ``school``).
- Verifying tokens back into an ``Actor``, with distinct errors for a missing,
  invalid or expired token.
- A FastAPI dependency that protects endpoints.

Tokens are stateless: there is no revocation list and a token is valid until
its ``exp`` claim passes.

Example Usage in Endpoints:
    ```python
    from fastapi import APIRouter, Depends
    from school_api.core.security import get_current_actor
    from school_api.models.actor import Actor

    router = APIRouter()

    @router.get("/protected-resource")
    async def get_protected_resource(actor: Actor = Depends(get_current_actor)):
        return {"message": f"Hello {actor.subject_id}", "role": actor.role}
    ```
"""

import logging
import uuid
from typing import Any, Dict, Optional
from datetime import datetime, timedelta, timezone

# --- JOSE & JWT Imports ---
from jose import jwt, exceptions as jose_exceptions

# --- Password Hashing ---
from passlib.context import CryptContext

# --- FastAPI Imports ---
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from school_api.core.config import settings
from school_api.core.errors import InternalError, UnauthenticatedError
from school_api.models.actor import Actor
from school_api.models.enums import UserRole

logger = logging.getLogger(__name__)

# --- Custom Exceptions ---
class SecurityError(Exception):
    """Base class for security-related exceptions."""
    pass

class TokenValidationError(SecurityError):
    """Raised when a token cannot be turned into an actor."""
    pass

class MissingTokenError(TokenValidationError):
    """Raised when no token was supplied."""
    pass

class InvalidTokenError(TokenValidationError):
    """Raised on a bad signature, malformed token or unusable claims."""
    pass

class ExpiredTokenError(TokenValidationError):
    """Raised when the token's ``exp`` claim has passed."""
    pass

class TokenConfigurationError(SecurityError):
    """Raised when the signing secret is not configured."""
    pass


# --- Password Hashing ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# --- Token Issuing & Verification ---

def _signing_secret() -> str:
    if not settings.JWT_SECRET:
        raise TokenConfigurationError("JWT_SECRET is not configured.")
    return settings.JWT_SECRET


def create_access_token(actor: Actor, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issues a signed token for ``actor``.

    The ``school`` claim is only written for a schooladmin that has one; a
    superadmin token never carries a school.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    claims: Dict[str, Any] = {
        "sub": str(actor.subject_id),
        "role": actor.role.value,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    if actor.is_schooladmin and actor.school_id is not None:
        claims["school"] = str(actor.school_id)
    return jwt.encode(claims, _signing_secret(), algorithm=settings.JWT_ALGORITHM)


def _actor_from_claims(payload: Dict[str, Any]) -> Actor:
    try:
        subject_id = uuid.UUID(str(payload["sub"]))
        role = UserRole(payload["role"])
        school_claim = payload.get("school")
        school_id = uuid.UUID(str(school_claim)) if school_claim else None
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidTokenError(f"Token validation failed: Invalid claims - {e}")
    if role == UserRole.SUPERADMIN:
        school_id = None
    return Actor(subject_id=subject_id, role=role, school_id=school_id)


def verify_access_token(token: Optional[str]) -> Actor:
    """
    Decodes and validates ``token`` and returns the actor it identifies.

    Raises:
        MissingTokenError: If the token is absent or empty.
        ExpiredTokenError: If the token is past its expiry.
        InvalidTokenError: On any signature, format or claim problem.
    """
    if not token:
        raise MissingTokenError("No token provided.")

    try:
        payload = jwt.decode(token, _signing_secret(), algorithms=[settings.JWT_ALGORITHM])
    except jose_exceptions.ExpiredSignatureError:
        raise ExpiredTokenError("Token validation failed: Expired signature.")
    except jose_exceptions.JWTClaimsError as e:
        raise InvalidTokenError(f"Token validation failed: Invalid claims - {e}")
    except jose_exceptions.JWTError as e:
        raise InvalidTokenError(f"Token validation failed: Invalid token - {e}")

    return _actor_from_claims(payload)


# --- FastAPI Dependency for Authentication ---

# auto_error=False so a missing header is reported by our own message
bearer_scheme = HTTPBearer(auto_error=False)

async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    """
    FastAPI dependency that verifies the bearer token and returns the actor.

    Raises:
        UnauthenticatedError(401): If the token is missing, invalid or expired.
        InternalError(500): If no signing secret is configured.
    """
    token = credentials.credentials if credentials else None
    try:
        actor = verify_access_token(token)
    except MissingTokenError:
        logger.warning("Authentication attempt failed: No token provided.")
        raise UnauthenticatedError("Not authorized, no token")
    except ExpiredTokenError as e:
        logger.warning(f"Authentication failed: {e}")
        raise UnauthenticatedError("Not authorized, token expired")
    except InvalidTokenError as e:
        logger.warning(f"Authentication failed: {e}")
        raise UnauthenticatedError("Not authorized, token failed")
    except TokenConfigurationError as e:
        logger.error(f"Authentication unavailable: {e}")
        raise InternalError("Server configuration error")
    logger.debug(f"Authenticated actor {actor.subject_id} with role {actor.role.value}")
    return actor
