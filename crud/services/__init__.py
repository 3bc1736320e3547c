"""
Capa de servicio: operaciones CRUD abreviadas con respuestas normalizadas.
"""

from .crud_service import CRUD, parse_window

__all__ = [
    "CRUD",
    "parse_window",
]
