"""
Consent Resolver Service

Resolves a visitor's browser ID to a person, reports whether consent has
been captured for every cookie category, lists cookies to block and records
new consent decisions. All reads and writes go through the Person
Directory, Category Catalog and Consent Ledger; every write passes through
the injected access policy first.
"""

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from cookie_consent.auth import CallerContext
from cookie_consent.config import settings
from cookie_consent.exceptions import CategoryNotFoundError, PersonNotFoundError
from cookie_consent.models.consent_decision import ConsentDecision, ConsentStatus
from cookie_consent.models.person import Person
from cookie_consent.schemas.consent import CategoryPrompt, ChevronIcon, ConsentDecisionIn, CookieInfo
from cookie_consent.services.access_policy import FieldAccessPolicy, default_policy
from cookie_consent.services.category_catalog import CategoryCatalog
from cookie_consent.services.consent_ledger import ConsentLedger
from cookie_consent.services.person_directory import PersonDirectory

logger = logging.getLogger(__name__)

# Only these literal strings map to a status
VALUE_TO_STATUS = {
    "true": ConsentStatus.AGREED,
    "false": ConsentStatus.DECLINED,
}


def status_for_value(value: str) -> ConsentStatus | None:
    """Map a submitted decision value to a status; unknown values give None."""
    return VALUE_TO_STATUS.get(value)


class ConsentService:
    """Service for resolving visitors and capturing their cookie consent."""

    def __init__(
        self,
        db: AsyncSession,
        caller: CallerContext,
        policy: FieldAccessPolicy | None = None,
        capture_source: str | None = None,
        capture_channel: str | None = None,
    ):
        self.db = db
        self.caller = caller
        self.policy = policy or default_policy
        self.capture_source = capture_source or settings.consent_capture_source
        self.capture_channel = capture_channel or settings.consent_capture_channel

        self.persons = PersonDirectory(db)
        self.catalog = CategoryCatalog(db)
        self.ledger = ConsentLedger(db)

    async def resolve_person(self, browser_id: str) -> Person | None:
        """
        Find or create the person behind a browser ID.

        Resolution order:
        1. the person already keyed by this browser ID
        2. for a signed-in caller, the person linked to their account,
           created (with this browser ID) if the account has none
        3. a new person keyed only by the browser ID

        Persons are never updated, so a linked person found in step 2 keeps
        whatever browser ID it was created with. Calls keyed by the new
        browser ID alone (recording, cookies to block) do not reach it.
        """
        person = await self.persons.find_by_browser_id(browser_id)
        if person is not None:
            return person

        if self.caller.is_authenticated:
            person = await self.persons.find_by_account_id(self.caller.user_id)
            if person is not None:
                return person
            values = {"account_id": self.caller.user_id, "browser_id": browser_id}
        else:
            values = {"browser_id": browser_id}

        return await self.persons.create(self.policy.strip_inaccessible("person", values, self.caller))

    async def check_consent(self, browser_id: str) -> bool:
        """
        Return True if the person has a decision on record for every category.

        Coverage is checked by count: the number of the person's decisions
        whose category is in the catalog must reach the number of
        categories. Any status counts, and repeated decisions for one
        category count more than once.
        """
        person = await self.resolve_person(browser_id)
        if person is None:
            return False

        categories = await self.catalog.list_categories()
        decided = await self.ledger.count_for_person(person.id, [category.id for category in categories])
        logger.debug(
            "Consent coverage for person %d: %d decisions / %d categories",
            person.id,
            decided,
            len(categories),
        )
        return decided >= len(categories)

    async def get_cookies_to_block(self, browser_id: str) -> list[str]:
        """Names of the cookies in every category this browser ID declined."""
        declined = await self.ledger.category_ids_with_status(browser_id, ConsentStatus.DECLINED)
        return await self.catalog.cookie_names_for_categories(declined)

    async def get_category_prompt_data(self) -> list[CategoryPrompt]:
        """
        Categories with their cookies for the consent prompt, in catalog order.

        The first category is shown expanded with a down chevron; every
        other one starts collapsed with a right chevron.
        """
        categories = await self.catalog.list_categories(with_cookies=True)

        prompts = []
        for index, category in enumerate(categories):
            is_first = index == 0
            fields = self.policy.redact(
                "category",
                {
                    "name": category.name,
                    "description": category.description,
                    "is_mandatory": category.is_mandatory,
                    "default_value": category.default_value,
                    "additional_info": category.additional_info,
                },
                self.caller,
            )
            cookies = [
                CookieInfo(
                    id=cookie.id,
                    **self.policy.redact("cookie", {"name": cookie.name, "description": cookie.description}, self.caller),
                )
                for cookie in category.cookies
            ]
            prompts.append(
                CategoryPrompt(
                    category_id=category.id,
                    cookies=cookies,
                    expanded=is_first,
                    chevron=ChevronIcon.DOWN if is_first else ChevronIcon.RIGHT,
                    **fields,
                )
            )
        return prompts

    async def record_consent_decisions(self, browser_id: str, decisions: Sequence[ConsentDecisionIn]) -> bool:
        """
        Append one consent decision per submitted category.

        The person must already exist for this browser ID. Every category is
        checked before anything is written, so an unknown category rejects
        the whole batch.

        Raises:
            PersonNotFoundError: no single person has this browser ID
            CategoryNotFoundError: a submitted category does not exist
        """
        person = await self.persons.find_by_browser_id(browser_id)
        if person is None:
            raise PersonNotFoundError(browser_id)

        categories = await self.catalog.get_categories_by_ids(decision.category_id for decision in decisions)
        for decision in decisions:
            if decision.category_id not in categories:
                raise CategoryNotFoundError(decision.category_id)

        records = []
        for decision in decisions:
            values = {
                "person_id": person.id,
                "category_id": decision.category_id,
                "status": status_for_value(decision.value),
                "capture_source": self.capture_source,
                "capture_channel": self.capture_channel,
            }
            records.append(self.policy.strip_inaccessible("consent_decision", values, self.caller))

        created = await self.ledger.append(records)
        logger.info("Consent recorded: person=%d decisions=%d", person.id, len(created))
        return created is not None

    async def get_consent_history(self, browser_id: str) -> list[ConsentDecision]:
        """Every decision recorded for this browser ID, newest first."""
        return await self.ledger.history_for_browser(browser_id)

    async def get_current_preferences(self, browser_id: str) -> dict[int, ConsentStatus | None]:
        """Latest decision status per category for this browser ID."""
        preferences: dict[int, ConsentStatus | None] = {}
        for decision in await self.ledger.history_for_browser(browser_id):
            if decision.category_id is not None and decision.category_id not in preferences:
                preferences[decision.category_id] = decision.status
        return preferences
