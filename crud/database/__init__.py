from .db import (
    SessionLocal,
    engine,
    get_db,
    session_scope,
    get_database_url,
)

__all__ = [
    "SessionLocal",
    "engine",
    "get_db",
    "session_scope",
    "get_database_url",
]
