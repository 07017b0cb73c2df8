"""
Person Directory

Looks up and creates the person records consent decisions attach to.
"""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cookie_consent.models.person import Person

logger = logging.getLogger(__name__)


def single_or_none(rows: Sequence[Any]) -> Any | None:
    """Collapse a lookup to its only row; zero or several rows mean no match."""
    return rows[0] if len(rows) == 1 else None


class PersonDirectory:
    """Data access for person records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_browser_id(self, browser_id: str) -> Person | None:
        result = await self.db.execute(select(Person).where(Person.browser_id == browser_id))
        return single_or_none(result.scalars().all())

    async def find_by_account_id(self, account_id: int) -> Person | None:
        result = await self.db.execute(select(Person).where(Person.account_id == account_id))
        return single_or_none(result.scalars().all())

    async def create(self, values: dict[str, Any]) -> Person:
        """Insert a person from already access-checked column values."""
        person = Person(**values)
        self.db.add(person)
        await self.db.commit()
        await self.db.refresh(person)
        logger.info(
            "Person created: id=%d account=%s browser_id=%s",
            person.id,
            person.account_id,
            person.browser_id,
        )
        return person
