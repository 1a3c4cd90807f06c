# school_api/models/enums.py

from enum import Enum

# --- User Related Enums ---

class UserRole(str, Enum):
    """Roles a user can hold. A schooladmin is bound to exactly one school."""
    SUPERADMIN = "superadmin"
    SCHOOLADMIN = "schooladmin"
