from .consent import (
    BrowserIdRequest,
    CategoryPrompt,
    ChevronIcon,
    ConsentCheckResponse,
    ConsentDecisionIn,
    ConsentDecisionResponse,
    CookieInfo,
    CookiesToDropResponse,
    PreferencesResponse,
    RecordConsentRequest,
    RecordConsentResponse,
)

# Define the public API of this module
__all__ = [
    "BrowserIdRequest",
    "CategoryPrompt",
    "ChevronIcon",
    "ConsentCheckResponse",
    "ConsentDecisionIn",
    "ConsentDecisionResponse",
    "CookieInfo",
    "CookiesToDropResponse",
    "PreferencesResponse",
    "RecordConsentRequest",
    "RecordConsentResponse",
]
