"""
User Type Constants

Kinds of identity a caller can present. Only standard accounts count as
authenticated for person resolution; guests and the automated platform
identity are treated as anonymous visitors.
"""

from enum import Enum


class UserType(str, Enum):
    """Enumeration of caller identity types."""

    STANDARD = "standard"
    GUEST = "guest"
    AUTOMATED = "automated"


ANONYMOUS_USER_TYPES = frozenset({UserType.GUEST, UserType.AUTOMATED})


def is_authenticated_type(user_type: UserType | str) -> bool:
    """Return True if the user type represents a real signed-in account."""
    return UserType(user_type) not in ANONYMOUS_USER_TYPES
