"""
Tests for the consent resolver service

Covers person resolution, consent coverage, cookie blocking, prompt data
and recording decisions against an in-memory database.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cookie_consent.auth import CallerContext
from cookie_consent.constants.user_types import UserType
from cookie_consent.exceptions import CategoryNotFoundError, DatabaseError, PersonNotFoundError
from cookie_consent.models import ConsentDecision, ConsentStatus, CookieCategory, Person
from cookie_consent.schemas.consent import ChevronIcon, ConsentDecisionIn
from cookie_consent.services.access_policy import FieldAccessPolicy
from cookie_consent.services.consent_service import ConsentService, status_for_value


async def count_persons(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Person.id)))
    return result.scalar_one()


async def add_decisions(db: AsyncSession, person: Person, *pairs: tuple[CookieCategory, ConsentStatus | None]):
    db.add_all([ConsentDecision(person_id=person.id, category_id=category.id, status=status) for category, status in pairs])
    await db.commit()


@pytest.fixture
def guest_service(test_db):
    return ConsentService(test_db, CallerContext.guest())


class TestStatusForValue:
    """Test mapping of submitted values to statuses"""

    def test_true_agrees(self):
        assert status_for_value("true") == ConsentStatus.AGREED

    def test_false_declines(self):
        assert status_for_value("false") == ConsentStatus.DECLINED

    @pytest.mark.parametrize("value", ["TRUE", "yes", "", "1", " true"])
    def test_other_values_have_no_status(self, value):
        assert status_for_value(value) is None


class TestResolvePerson:
    """Test browser ID to person resolution"""

    async def test_guest_with_unknown_browser_creates_one_person(self, test_db, guest_service):
        person = await guest_service.resolve_person("browser-new")

        assert person.browser_id == "browser-new"
        assert person.account_id is None
        assert await count_persons(test_db) == 1

    async def test_known_browser_reuses_person(self, test_db, guest_service, known_person):
        person = await guest_service.resolve_person("browser-known")

        assert person.id == known_person.id
        assert await count_persons(test_db) == 1

    async def test_repeated_resolution_creates_no_duplicates(self, test_db, guest_service):
        first = await guest_service.resolve_person("browser-repeat")
        second = await guest_service.resolve_person("browser-repeat")

        assert first.id == second.id
        assert await count_persons(test_db) == 1

    async def test_authenticated_caller_with_linked_person_creates_nothing(self, test_db, test_account):
        linked = Person(account_id=test_account.id)
        test_db.add(linked)
        await test_db.commit()
        service = ConsentService(test_db, CallerContext.for_user(test_account))

        person = await service.resolve_person("browser-of-member")

        assert person.id == linked.id
        assert await count_persons(test_db) == 1

    async def test_linked_person_keeps_its_browser_id(self, test_db, catalog, test_account):
        linked = Person(account_id=test_account.id, browser_id="browser-first-device")
        test_db.add(linked)
        await test_db.commit()
        await add_decisions(test_db, linked, (catalog["marketing"], ConsentStatus.DECLINED))
        service = ConsentService(test_db, CallerContext.for_user(test_account))

        person = await service.resolve_person("browser-second-device")

        assert person.id == linked.id
        assert person.browser_id == "browser-first-device"
        assert await count_persons(test_db) == 1
        assert await service.get_cookies_to_block("browser-second-device") == []
        with pytest.raises(PersonNotFoundError):
            await service.record_consent_decisions(
                "browser-second-device", [ConsentDecisionIn(category_id=catalog["analytics"].id, value="true")]
            )

    async def test_authenticated_caller_without_person_gets_linked_person(self, test_db, test_account):
        service = ConsentService(test_db, CallerContext.for_user(test_account))

        person = await service.resolve_person("browser-of-member")

        assert person.account_id == test_account.id
        assert person.browser_id == "browser-of-member"
        assert await count_persons(test_db) == 1

    async def test_automated_identity_is_treated_as_guest(self, test_db, test_account):
        service = ConsentService(test_db, CallerContext(user_id=test_account.id, user_type=UserType.AUTOMATED))

        person = await service.resolve_person("browser-bot")

        assert person.account_id is None
        assert person.browser_id == "browser-bot"

    async def test_ambiguous_browser_id_counts_as_no_match(self, test_db, guest_service):
        test_db.add_all([Person(browser_id="browser-dup"), Person(browser_id="browser-dup")])
        await test_db.commit()

        await guest_service.resolve_person("browser-dup")

        assert await count_persons(test_db) == 3


class TestCheckConsent:
    """Test consent coverage checks"""

    async def test_all_categories_decided_grants_consent(self, test_db, guest_service, catalog, known_person):
        await add_decisions(
            test_db,
            known_person,
            (catalog["marketing"], ConsentStatus.DECLINED),
            (catalog["analytics"], ConsentStatus.AGREED),
        )

        assert await guest_service.check_consent("browser-known") is True

    async def test_one_category_missing_denies_consent(self, test_db, guest_service, catalog, known_person):
        await add_decisions(test_db, known_person, (catalog["marketing"], ConsentStatus.AGREED))

        assert await guest_service.check_consent("browser-known") is False

    async def test_decisions_without_status_still_count(self, test_db, guest_service, catalog, known_person):
        await add_decisions(
            test_db,
            known_person,
            (catalog["marketing"], None),
            (catalog["analytics"], None),
        )

        assert await guest_service.check_consent("browser-known") is True

    async def test_coverage_is_counted_not_matched(self, test_db, guest_service, catalog, known_person):
        await add_decisions(
            test_db,
            known_person,
            (catalog["marketing"], ConsentStatus.AGREED),
            (catalog["marketing"], ConsentStatus.DECLINED),
        )

        assert await guest_service.check_consent("browser-known") is True

    async def test_new_visitor_has_no_consent(self, test_db, guest_service, catalog):
        assert await guest_service.check_consent("browser-first-visit") is False
        assert await count_persons(test_db) == 1

    async def test_empty_catalog_grants_consent(self, guest_service):
        assert await guest_service.check_consent("browser-any") is True


class TestCookiesToBlock:
    """Test listing cookies of declined categories"""

    async def test_declined_marketing_blocks_only_marketing_cookies(self, test_db, guest_service, catalog, known_person):
        await add_decisions(
            test_db,
            known_person,
            (catalog["marketing"], ConsentStatus.DECLINED),
            (catalog["analytics"], ConsentStatus.AGREED),
        )

        cookies = await guest_service.get_cookies_to_block("browser-known")

        assert sorted(cookies) == ["_fbp", "ads_id"]

    async def test_undecided_categories_are_not_blocked(self, guest_service, catalog, known_person):
        assert await guest_service.get_cookies_to_block("browser-known") == []

    async def test_unknown_browser_returns_empty_list(self, test_db, guest_service, catalog):
        assert await guest_service.get_cookies_to_block("browser-unknown") == []
        assert await count_persons(test_db) == 0


class TestCategoryPromptData:
    """Test prompt data assembly"""

    async def test_first_category_expanded_others_collapsed(self, test_db, guest_service, catalog):
        test_db.add(CookieCategory(name="Preferences", position=3))
        await test_db.commit()

        prompts = await guest_service.get_category_prompt_data()

        assert [p.name for p in prompts] == ["Marketing", "Analytics", "Preferences"]
        assert prompts[0].expanded is True
        assert prompts[0].chevron == ChevronIcon.DOWN
        for prompt in prompts[1:]:
            assert prompt.expanded is False
            assert prompt.chevron == ChevronIcon.RIGHT

    async def test_prompt_carries_category_fields_and_cookies(self, guest_service, catalog):
        prompts = await guest_service.get_category_prompt_data()
        marketing = prompts[0]

        assert marketing.category_id == catalog["marketing"].id
        assert marketing.description == "Ads and retargeting"
        assert marketing.is_mandatory is False
        assert marketing.default_value is False
        assert marketing.additional_info == "Shared with advertising partners"
        assert [cookie.name for cookie in marketing.cookies] == ["_fbp", "ads_id"]

    async def test_single_category_is_expanded(self, test_db, guest_service):
        test_db.add(CookieCategory(name="Necessary", is_mandatory=True, default_value=True))
        await test_db.commit()

        prompts = await guest_service.get_category_prompt_data()

        assert len(prompts) == 1
        assert prompts[0].expanded is True
        assert prompts[0].chevron == ChevronIcon.DOWN
        assert prompts[0].cookies == []

    async def test_empty_catalog_gives_empty_prompt(self, guest_service):
        assert await guest_service.get_category_prompt_data() == []


class TestRecordConsentDecisions:
    """Test recording consent decisions"""

    async def test_values_map_to_statuses(self, test_db, guest_service, catalog, known_person):
        decisions = [
            ConsentDecisionIn(category_id=catalog["marketing"].id, value="false"),
            ConsentDecisionIn(category_id=catalog["analytics"].id, value="true"),
        ]

        assert await guest_service.record_consent_decisions("browser-known", decisions) is True

        result = await test_db.execute(select(ConsentDecision).order_by(ConsentDecision.id))
        recorded = result.scalars().all()
        assert [(d.category_id, d.status) for d in recorded] == [
            (catalog["marketing"].id, ConsentStatus.DECLINED),
            (catalog["analytics"].id, ConsentStatus.AGREED),
        ]
        assert all(d.person_id == known_person.id for d in recorded)
        assert all(d.capture_source == "Cookie Consent Banner" for d in recorded)
        assert all(d.capture_channel == "Web" for d in recorded)

    async def test_malformed_value_records_no_status(self, test_db, guest_service, catalog, known_person):
        decisions = [ConsentDecisionIn(category_id=catalog["marketing"].id, value="maybe")]

        assert await guest_service.record_consent_decisions("browser-known", decisions) is True

        result = await test_db.execute(select(ConsentDecision))
        assert result.scalars().one().status is None

    async def test_unknown_browser_raises(self, guest_service, catalog):
        decisions = [ConsentDecisionIn(category_id=catalog["marketing"].id, value="true")]

        with pytest.raises(PersonNotFoundError):
            await guest_service.record_consent_decisions("browser-unknown", decisions)

    async def test_unknown_category_rejects_whole_batch(self, test_db, guest_service, catalog, known_person):
        decisions = [
            ConsentDecisionIn(category_id=catalog["marketing"].id, value="true"),
            ConsentDecisionIn(category_id=9999, value="true"),
        ]

        with pytest.raises(CategoryNotFoundError) as exc_info:
            await guest_service.record_consent_decisions("browser-known", decisions)

        assert exc_info.value.details["resource_id"] == 9999
        result = await test_db.execute(select(func.count(ConsentDecision.id)))
        assert result.scalar_one() == 0

    async def test_empty_batch_succeeds(self, guest_service, known_person):
        assert await guest_service.record_consent_decisions("browser-known", []) is True

    async def test_resubmission_appends(self, test_db, guest_service, catalog, known_person):
        decision = [ConsentDecisionIn(category_id=catalog["marketing"].id, value="true")]

        await guest_service.record_consent_decisions("browser-known", decision)
        await guest_service.record_consent_decisions("browser-known", decision)

        result = await test_db.execute(select(func.count(ConsentDecision.id)))
        assert result.scalar_one() == 2

    async def test_recorded_decisions_drive_blocking(self, guest_service, catalog, known_person):
        await guest_service.record_consent_decisions(
            "browser-known",
            [
                ConsentDecisionIn(category_id=catalog["marketing"].id, value="false"),
                ConsentDecisionIn(category_id=catalog["analytics"].id, value="true"),
            ],
        )

        assert sorted(await guest_service.get_cookies_to_block("browser-known")) == ["_fbp", "ads_id"]
        assert await guest_service.check_consent("browser-known") is True

    async def test_custom_capture_metadata(self, test_db, catalog, known_person):
        service = ConsentService(
            test_db,
            CallerContext.guest(),
            capture_source="Preference Center",
            capture_channel="Mobile",
        )

        await service.record_consent_decisions(
            "browser-known", [ConsentDecisionIn(category_id=catalog["analytics"].id, value="true")]
        )

        result = await test_db.execute(select(ConsentDecision))
        decision = result.scalars().one()
        assert decision.capture_source == "Preference Center"
        assert decision.capture_channel == "Mobile"

    async def test_failed_insert_rolls_back_and_raises(self, test_db, catalog, known_person):
        without_person = FieldAccessPolicy(
            creatable={
                UserType.GUEST: {
                    "consent_decision": frozenset({"category_id", "status", "capture_source", "capture_channel"})
                }
            }
        )
        service = ConsentService(test_db, CallerContext.guest(), policy=without_person)
        decisions = [
            ConsentDecisionIn(category_id=catalog["marketing"].id, value="false"),
            ConsentDecisionIn(category_id=catalog["analytics"].id, value="true"),
        ]

        with pytest.raises(DatabaseError) as exc_info:
            await service.record_consent_decisions("browser-known", decisions)

        assert exc_info.value.details == {"operation": "consent_ledger.append"}
        result = await test_db.execute(select(func.count(ConsentDecision.id)))
        assert result.scalar_one() == 0

        guest_service = ConsentService(test_db, CallerContext.guest())
        assert await guest_service.record_consent_decisions("browser-known", decisions) is True
        result = await test_db.execute(select(func.count(ConsentDecision.id)))
        assert result.scalar_one() == 2


class TestHistoryAndPreferences:
    """Test reading back recorded decisions"""

    async def test_latest_decision_per_category_wins(self, guest_service, catalog, known_person):
        marketing_id = catalog["marketing"].id
        await guest_service.record_consent_decisions(
            "browser-known", [ConsentDecisionIn(category_id=marketing_id, value="true")]
        )
        await guest_service.record_consent_decisions(
            "browser-known", [ConsentDecisionIn(category_id=marketing_id, value="false")]
        )

        history = await guest_service.get_consent_history("browser-known")
        preferences = await guest_service.get_current_preferences("browser-known")

        assert [d.status for d in history] == [ConsentStatus.DECLINED, ConsentStatus.AGREED]
        assert preferences == {marketing_id: ConsentStatus.DECLINED}

    async def test_unknown_browser_has_no_history(self, guest_service):
        assert await guest_service.get_consent_history("browser-unknown") == []
        assert await guest_service.get_current_preferences("browser-unknown") == {}
