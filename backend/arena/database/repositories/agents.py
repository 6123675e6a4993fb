"""
SqlAgentRepository

SQLAlchemy operations for the 'agents' table.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database.repositories.base import AgentRepository
from arena.models import Agent


class SqlAgentRepository(AgentRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, pk: int, for_update: bool = False) -> Agent | None:
        query = select(Agent).where(Agent.id == pk)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_agent_id(
        self, agent_id: str, for_update: bool = False
    ) -> Agent | None:
        query = select(Agent).where(Agent.agent_id == agent_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def add(self, agent: Agent) -> Agent:
        self.session.add(agent)
        await self.session.flush()
        return agent
