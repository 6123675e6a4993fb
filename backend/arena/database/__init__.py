"""
Database module initialization.

Stores live in arena.database.repositories; they are not re-exported here
because the models import Base from this package.
"""

from arena.database.base import Base, JSONType
from arena.database.session import (
    create_engine_from_settings,
    create_session_factory,
    init_models,
)

__all__ = [
    "Base",
    "JSONType",
    "create_engine_from_settings",
    "create_session_factory",
    "init_models",
]
