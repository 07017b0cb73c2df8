"""
Category Catalog

Read-only access to cookie categories and the cookies they group.
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cookie_consent.models.cookie_category import Cookie, CookieCategory


class CategoryCatalog:
    """Data access for cookie categories and cookies."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_categories(self, with_cookies: bool = False) -> list[CookieCategory]:
        """Return every category in catalog order."""
        query = select(CookieCategory).order_by(CookieCategory.position, CookieCategory.id)
        if with_cookies:
            query = query.options(selectinload(CookieCategory.cookies))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_categories_by_ids(self, category_ids: Iterable[int]) -> dict[int, CookieCategory]:
        ids = set(category_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(CookieCategory).where(CookieCategory.id.in_(ids)))
        return {category.id: category for category in result.scalars().all()}

    async def cookie_names_for_categories(self, category_ids: Iterable[int]) -> list[str]:
        ids = set(category_ids)
        if not ids:
            return []
        result = await self.db.execute(
            select(Cookie.name).where(Cookie.category_id.in_(ids)).order_by(Cookie.category_id, Cookie.id)
        )
        return list(result.scalars().all())
