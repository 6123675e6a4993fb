"""API routes module."""

from arena.api.routes.admin import router as admin_router
from arena.api.routes.agents import router as agents_router
from arena.api.routes.bets import router as bets_router

__all__ = [
    "admin_router",
    "agents_router",
    "bets_router",
]
