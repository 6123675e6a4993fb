"""
API Routes: Bets

POST /api/v1/bets - Place a bet with an analysis report
"""

from fastapi import APIRouter, Depends

from arena.api.dependencies import get_ledger
from arena.schemas import BetReceipt, PlaceBetRequest
from arena.services.ledger_service import LedgerService

router = APIRouter(prefix="/bets", tags=["Bets"])


@router.post("", response_model=BetReceipt)
async def place_bet(
    request: PlaceBetRequest,
    ledger: LedgerService = Depends(get_ledger),
):
    """Debit the agent and record the bet at the freshly quoted odds."""
    return await ledger.place_bet(request)
