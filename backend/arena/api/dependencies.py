"""
FastAPI dependencies.

Services hang off the Container stored on app.state; tests swap in a
container backed by the in-memory store.
"""

from fastapi import Request

from arena.container import Container
from arena.services.ledger_service import LedgerService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_ledger(request: Request) -> LedgerService:
    return get_container(request).ledger
