"""
Consent Ledger

Append-only store of agree/decline decisions. Nothing here updates or
deletes a decision; a newer submission simply adds rows.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cookie_consent.exceptions import DatabaseError
from cookie_consent.models.consent_decision import ConsentDecision, ConsentStatus
from cookie_consent.models.person import Person

logger = logging.getLogger(__name__)


class ConsentLedger:
    """Data access for consent decisions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_for_person(self, person_id: int, category_ids: Iterable[int]) -> int:
        """Count the person's decisions (any status) whose category is in ``category_ids``."""
        ids = set(category_ids)
        if not ids:
            return 0
        result = await self.db.execute(
            select(func.count(ConsentDecision.id)).where(
                ConsentDecision.person_id == person_id,
                ConsentDecision.category_id.in_(ids),
            )
        )
        return result.scalar_one()

    async def category_ids_with_status(self, browser_id: str, status: ConsentStatus) -> set[int]:
        """Category IDs carrying a decision of ``status`` by any person with this browser ID."""
        result = await self.db.execute(
            select(ConsentDecision.category_id)
            .join(Person, ConsentDecision.person_id == Person.id)
            .where(Person.browser_id == browser_id, ConsentDecision.status == status)
        )
        return {category_id for category_id in result.scalars().all() if category_id is not None}

    async def history_for_browser(self, browser_id: str) -> list[ConsentDecision]:
        """All decisions recorded for this browser ID, newest first."""
        result = await self.db.execute(
            select(ConsentDecision)
            .join(Person, ConsentDecision.person_id == Person.id)
            .where(Person.browser_id == browser_id)
            .order_by(ConsentDecision.captured_at.desc(), ConsentDecision.id.desc())
        )
        return list(result.scalars().all())

    async def append(self, records: list[dict[str, Any]]) -> list[ConsentDecision]:
        """
        Insert a batch of decisions in one transaction.

        ``records`` hold column values that already went through the
        access policy. The whole batch is rolled back on a database error.
        """
        decisions = [ConsentDecision(**values) for values in records]
        try:
            self.db.add_all(decisions)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to record {len(decisions)} consent decisions: {e}")
            raise DatabaseError("Failed to record consent decisions", operation="consent_ledger.append") from e

        for decision in decisions:
            await self.db.refresh(decision)
        return decisions
