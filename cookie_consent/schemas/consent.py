from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cookie_consent.models.consent_decision import ConsentStatus

BrowserId = Annotated[str, Field(min_length=1, max_length=255)]


class ChevronIcon(str, Enum):
    """Disclosure indicator shown next to a category in the banner."""

    DOWN = "chevrondown"
    RIGHT = "chevronright"


class BrowserIdRequest(BaseModel):
    browser_id: BrowserId


class ConsentCheckResponse(BaseModel):
    consent_granted: bool


class CookiesToDropResponse(BaseModel):
    cookies: List[str]


class CookieInfo(BaseModel):
    id: int
    name: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryPrompt(BaseModel):
    """One category as shown in the consent prompt, with its presentation state."""

    category_id: int
    name: Optional[str] = None
    description: Optional[str] = None
    is_mandatory: Optional[bool] = None
    default_value: Optional[bool] = None
    additional_info: Optional[str] = None
    cookies: List[CookieInfo] = []
    expanded: bool
    chevron: ChevronIcon


class ConsentDecisionIn(BaseModel):
    category_id: int
    # "true" agrees, "false" declines; anything else is stored without a status
    value: str


class RecordConsentRequest(BaseModel):
    browser_id: BrowserId
    decisions: List[ConsentDecisionIn]


class RecordConsentResponse(BaseModel):
    success: bool


class ConsentDecisionResponse(BaseModel):
    id: int
    category_id: Optional[int]
    person_id: int
    status: Optional[ConsentStatus]
    capture_source: Optional[str]
    capture_channel: Optional[str]
    captured_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PreferencesResponse(BaseModel):
    preferences: dict[int, Optional[ConsentStatus]]
