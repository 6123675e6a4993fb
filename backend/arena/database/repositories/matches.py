"""
SqlMatchRepository

SQLAlchemy operations for the 'matches' table.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database.repositories.base import MatchRepository
from arena.models import Match, MatchStatus


class SqlMatchRepository(MatchRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, match_id: int, for_update: bool = False) -> Match | None:
        query = select(Match).where(Match.id == match_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_api_id(
        self, api_id: int, for_update: bool = False
    ) -> Match | None:
        query = select(Match).where(Match.api_id == api_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def add(self, match: Match) -> Match:
        self.session.add(match)
        await self.session.flush()
        return match

    async def list_in_window(
        self,
        start: datetime,
        end: datetime,
        status: MatchStatus | None = None,
    ) -> list[Match]:
        query = select(Match).where(Match.utc_date >= start, Match.utc_date <= end)
        if status is not None:
            query = query.where(Match.status == status)
        result = await self.session.execute(query.order_by(Match.utc_date, Match.id))
        return list(result.scalars().all())

    async def list_by_status(self, status: MatchStatus) -> list[Match]:
        result = await self.session.execute(
            select(Match).where(Match.status == status).order_by(Match.utc_date)
        )
        return list(result.scalars().all())
