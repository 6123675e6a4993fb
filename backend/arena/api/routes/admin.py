"""Admin API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from arena.api.dependencies import get_container
from arena.container import Container
from arena.schemas import SettlementReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/settlement/run", response_model=SettlementReport)
async def run_settlement(container: Container = Depends(get_container)):
    """Trigger a settlement run outside the schedule. Disabled in production."""
    if container.settings.is_production:
        raise HTTPException(
            status_code=403,
            detail="Manual settlement is disabled in production.",
        )

    logger.info("Manual settlement run requested")
    return await container.settlement.run_weekly_settlement()
