"""
Capa de repositorio para el acceso a datos.
Los repositorios proporcionan una abstracción sobre el ORM y lanzan
excepciones; la normalización a resultados ocurre en la capa de servicio.

"""

from .base_repository import BaseRepository

__all__ = [
    "BaseRepository",
]
