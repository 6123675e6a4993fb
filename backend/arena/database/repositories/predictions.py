"""
SqlPredictionRepository

SQLAlchemy operations for the 'predictions' table (append-only ledger).
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database.repositories.base import PredictionRepository
from arena.models import Prediction, PredictionStatus


class SqlPredictionRepository(PredictionRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, prediction_id: int) -> Prediction | None:
        result = await self.session.execute(
            select(Prediction).where(Prediction.id == prediction_id)
        )
        return result.scalar_one_or_none()

    async def add(self, prediction: Prediction) -> Prediction:
        self.session.add(prediction)
        await self.session.flush()
        return prediction

    async def list_pending_for_match(
        self, match_id: int, for_update: bool = False
    ) -> list[Prediction]:
        query = (
            select(Prediction)
            .where(Prediction.match_id == match_id)
            .where(Prediction.status == PredictionStatus.PENDING)
            .order_by(Prediction.id)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_for_match(self, match_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Prediction.id)).where(Prediction.match_id == match_id)
        )
        return result.scalar_one()
