"""
Cookie Consent Routes

Endpoints called by the consent banner:
- verify whether a browser has answered every cookie category
- list cookies to drop for declined categories
- fetch categories and cookies for the prompt
- record consent decisions
- read back consent history and current preferences
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cookie_consent.auth import CallerContext, get_caller_context
from cookie_consent.config import settings
from cookie_consent.database import get_db
from cookie_consent.middleware.rate_limit import limiter
from cookie_consent.schemas.consent import (
    BrowserIdRequest,
    CategoryPrompt,
    ConsentCheckResponse,
    ConsentDecisionResponse,
    CookiesToDropResponse,
    PreferencesResponse,
    RecordConsentRequest,
    RecordConsentResponse,
)
from cookie_consent.services.access_policy import FieldAccessPolicy, get_access_policy
from cookie_consent.services.consent_service import ConsentService

router = APIRouter(tags=["Cookie Consent"])

logger = logging.getLogger(__name__)

COOKIE_DATA_PATH = "/cookie-data"


def get_consent_service(
    db: AsyncSession = Depends(get_db),
    caller: CallerContext = Depends(get_caller_context),
    policy: FieldAccessPolicy = Depends(get_access_policy),
) -> ConsentService:
    return ConsentService(db, caller, policy=policy)


def get_prompt_service(
    db: AsyncSession = Depends(get_db),
    policy: FieldAccessPolicy = Depends(get_access_policy),
) -> ConsentService:
    """
    Service for the publicly cached prompt data.

    Always reads as a guest so every visitor, signed in or not, receives
    the same body under the same cache key.
    """
    return ConsentService(db, CallerContext.guest(), policy=policy)


@router.post("/verify", response_model=ConsentCheckResponse)
@limiter.limit(settings.consent_write_rate_limit)
async def verify_browser_id(
    request: Request,
    response: Response,
    payload: BrowserIdRequest,
    service: ConsentService = Depends(get_consent_service),
) -> ConsentCheckResponse:
    """
    Resolve the browser to a person (creating one on first visit) and
    report whether a decision exists for every cookie category.
    """
    granted = await service.check_consent(payload.browser_id)
    return ConsentCheckResponse(consent_granted=granted)


@router.get("/cookies-to-drop", response_model=CookiesToDropResponse)
async def get_cookies_to_drop(
    browser_id: str = Query(..., min_length=1, max_length=255),
    service: ConsentService = Depends(get_consent_service),
) -> CookiesToDropResponse:
    """Names of cookies the browser must delete because their category was declined."""
    cookies = await service.get_cookies_to_block(browser_id)
    return CookiesToDropResponse(cookies=cookies)


@router.get(COOKIE_DATA_PATH, response_model=List[CategoryPrompt])
async def get_cookie_data(
    response: Response,
    service: ConsentService = Depends(get_prompt_service),
) -> List[CategoryPrompt]:
    """Categories with their cookies, in catalog order, for rendering the prompt."""
    response.headers["Cache-Control"] = f"public, max-age={settings.cookie_data_max_age}"
    return await service.get_category_prompt_data()


@router.post("/records", response_model=RecordConsentResponse)
@limiter.limit(settings.consent_write_rate_limit)
async def create_consent_records(
    request: Request,
    response: Response,
    payload: RecordConsentRequest,
    service: ConsentService = Depends(get_consent_service),
) -> RecordConsentResponse:
    """
    Record one decision per submitted category.

    The browser must have been verified first; unknown browsers get a 404
    and an unknown category rejects the whole batch.
    """
    success = await service.record_consent_decisions(payload.browser_id, payload.decisions)
    logger.info(f"Recorded {len(payload.decisions)} consent decisions")
    return RecordConsentResponse(success=success)


@router.get("/history", response_model=List[ConsentDecisionResponse])
async def get_consent_history(
    browser_id: str = Query(..., min_length=1, max_length=255),
    service: ConsentService = Depends(get_consent_service),
) -> List[ConsentDecisionResponse]:
    """All decisions recorded for the browser, newest first."""
    decisions = await service.get_consent_history(browser_id)
    return [ConsentDecisionResponse.model_validate(decision) for decision in decisions]


@router.get("/preferences", response_model=PreferencesResponse)
async def get_current_preferences(
    browser_id: str = Query(..., min_length=1, max_length=255),
    service: ConsentService = Depends(get_consent_service),
) -> PreferencesResponse:
    """Latest decision per category for the browser."""
    preferences = await service.get_current_preferences(browser_id)
    return PreferencesResponse(preferences=preferences)
