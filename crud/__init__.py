"""
Herramientas para un acceso simplificado a la base de datos sobre SQLAlchemy.

    from crud import CRUD

    crud = CRUD(session)
    status, user = crud.get(User, 1)
"""

from .core import (
    AppException,
    BusinessException,
    DatabaseException,
    DuplicateException,
    NotFoundException,
    Result,
    ValidationException,
)
from .repositories import BaseRepository
from .services import CRUD

__version__ = "1.0.0"

__all__ = [
    "CRUD",
    "BaseRepository",
    "Result",
    "AppException",
    "BusinessException",
    "DatabaseException",
    "DuplicateException",
    "NotFoundException",
    "ValidationException",
]
