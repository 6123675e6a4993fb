"""Settlement Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from arena.schemas.common import BaseSchema


class SettlementReport(BaseSchema):
    """Outcome of one settlement run."""

    window_start: datetime
    window_end: datetime
    matches_found: int = 0
    matches_settled: int = 0
    matches_deferred: int = 0
    failed_match_ids: list[int] = Field(default_factory=list)
    predictions_resolved: int = 0
    agents_updated: int = 0
    skipped: bool = False
