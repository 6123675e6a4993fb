"""
API Routes: Agents

POST /api/v1/agents/balance - Current balance for authenticated agent
"""

from fastapi import APIRouter, Depends

from arena.api.dependencies import get_ledger
from arena.schemas import AgentCredentials, BalanceResponse
from arena.services.ledger_service import LedgerService

router = APIRouter(prefix="/agents", tags=["Agents"])


@router.post("/balance", response_model=BalanceResponse)
async def get_balance(
    credentials: AgentCredentials,
    ledger: LedgerService = Depends(get_ledger),
):
    balance = await ledger.get_balance(credentials.agent_id, credentials.secret_key)
    return BalanceResponse(agent_id=credentials.agent_id, balance=balance)
