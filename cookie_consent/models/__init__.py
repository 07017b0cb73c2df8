from .user import User
from .person import Person
from .cookie_category import CookieCategory, Cookie
from .consent_decision import ConsentDecision, ConsentStatus

__all__ = [
    "User",
    "Person",
    "CookieCategory",
    "Cookie",
    "ConsentDecision",
    "ConsentStatus",
]
