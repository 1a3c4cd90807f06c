# school_api/core/config.py
import os
import logging
from dotenv import load_dotenv
from pathlib import Path
from typing import Optional, List
from pydantic_settings import BaseSettings

# --- Path Setup & .env Loading ---
# .env lives in the project root, two levels up from core
BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = BASE_DIR / '.env'

if ENV_PATH.is_file():
    load_dotenv(dotenv_path=ENV_PATH)
else:
    # Logger is not configured yet at this point
    print(f"Warning: .env file not found at {ENV_PATH}. Relying on system environment variables.")

MIN_JWT_SECRET_LENGTH = 32

# --- Pydantic Settings Class ---
class Settings(BaseSettings):
    PROJECT_NAME: str = "School Management API"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"

    # Database Settings
    MONGODB_URL: Optional[str] = None
    DB_NAME: str = "school_management"
    MONGODB_TLS: bool = False

    # Token Settings
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24

    # Rate limiting (applies to everything under API_PREFIX)
    RATE_LIMIT_WINDOW_MS: int = 15 * 60 * 1000
    RATE_LIMIT_MAX_REQUESTS: int = 100

    CORS_ORIGINS: List[str] = ["*"]

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

# Create an instance of the Settings class
settings = Settings()

# --- Logging Setup ---
LOG_LEVEL_NAME: str = os.getenv("LOG_LEVEL", "INFO").upper()
if settings.DEBUG:
    LOG_LEVEL_NAME = "DEBUG"

ACTUAL_LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)

logging.basicConfig(
    level=ACTUAL_LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logging.getLogger('uvicorn').setLevel(logging.WARNING)
logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
logging.getLogger('fastapi').setLevel(logging.INFO if settings.DEBUG else logging.WARNING)
logging.getLogger('motor').setLevel(logging.WARNING)
logging.getLogger('pymongo').setLevel(logging.WARNING)
logging.getLogger('passlib').setLevel(logging.ERROR)

logger = logging.getLogger(__name__)


def missing_required_settings(config: Settings) -> List[str]:
    """Names of settings the API cannot start without."""
    missing = []
    if not config.MONGODB_URL:
        missing.append("MONGODB_URL")
    if not config.JWT_SECRET:
        missing.append("JWT_SECRET")
    return missing


# --- Validate critical settings after loading ---
if not settings.MONGODB_URL:
    logger.critical("CRITICAL: MONGODB_URL environment variable is not set and no default provided.")
if not settings.JWT_SECRET:
    logger.critical("CRITICAL: JWT_SECRET environment variable is not set. Tokens cannot be issued or verified.")
elif len(settings.JWT_SECRET) < MIN_JWT_SECRET_LENGTH:
    logger.warning(f"JWT_SECRET should be at least {MIN_JWT_SECRET_LENGTH} characters for better security.")

if settings.DEBUG:
    logger.debug(f"PROJECT_NAME: {settings.PROJECT_NAME}")
    logger.debug(f"ENVIRONMENT: {settings.ENVIRONMENT}")
    logger.debug(f"API_PREFIX: {settings.API_PREFIX}")
    logger.debug(f"DB_NAME: {settings.DB_NAME}")
    logger.debug(f"JWT_EXPIRE_MINUTES: {settings.JWT_EXPIRE_MINUTES}")
    logger.debug(f"RATE_LIMIT: {settings.RATE_LIMIT_MAX_REQUESTS} requests / {settings.RATE_LIMIT_WINDOW_MS} ms")
    logger.debug(f"MONGODB_URL Set: {'Yes' if settings.MONGODB_URL else 'No - CRITICAL'}")
    logger.debug(f"JWT_SECRET Set: {'Yes' if settings.JWT_SECRET else 'No - CRITICAL'}")

# Module-level aliases for modules that import single values
PROJECT_NAME = settings.PROJECT_NAME
DEBUG = settings.DEBUG
VERSION = settings.VERSION
API_PREFIX = settings.API_PREFIX
MONGODB_URL = settings.MONGODB_URL
DB_NAME = settings.DB_NAME
