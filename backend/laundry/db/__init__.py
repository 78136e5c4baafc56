"""Database package with session management and storage error mapping."""

from laundry.db.guard import guarded
from laundry.db.session import (
    async_session_maker,
    build_engine,
    build_session_maker,
    dispose_engine,
    engine,
    init_models,
)

__all__ = [
    "async_session_maker",
    "build_engine",
    "build_session_maker",
    "dispose_engine",
    "engine",
    "guarded",
    "init_models",
]
