"""Constants package for the cookie consent service."""

from .auth import ALGORITHM, SECRET_KEY
from .user_types import ANONYMOUS_USER_TYPES, UserType, is_authenticated_type

__all__ = [
    # User type constants
    "UserType",
    "ANONYMOUS_USER_TYPES",
    "is_authenticated_type",
    # Auth constants
    "SECRET_KEY",
    "ALGORITHM",
]
