"""
Servicio CRUD: funciones abreviadas sobre una sesión SQLAlchemy.

Cada operación delega en ``BaseRepository`` y normaliza la respuesta a un
``Result``: ``("ok", valor)`` o ``("error", motivo)``. El motivo es una cadena
cuando el registro no existe y una lista de mensajes legibles en el resto de
casos.

Ejemplo::

    crud = CRUD(session)
    status, user = crud.add(User, name="Ana", email="ana@example.com")
    crud.get_all(User, 10, 20, {"active": True})
    crud.find(User, [("name", "an"), ("email", "example")])
"""

from typing import Any, Callable, Mapping, Optional, Tuple
import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session

from crud.config import settings
from crud.core.exceptions import AppException, NotFoundException, ValidationException
from crud.core.pagination import (
    PaginationParams,
    calculate_skip,
    create_paginated_response,
)
from crud.core.result import Result
from crud.core.utils import format_errors, opts_to_map
from crud.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


def _is_opts(value: Any) -> bool:
    return isinstance(value, (Mapping, list))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _non_negative(name: str, value: int) -> int:
    if value < 0:
        raise ValidationException(f"{name} must be non-negative, got {value}", field=name)
    return value


def parse_window(args: Tuple[Any, ...]) -> Tuple[Optional[int], Optional[int], Optional[Any]]:
    """
    Interpreta los argumentos posicionales de ``get_all``.

    Formas aceptadas: ``()``, ``(opts)``, ``(limit)``, ``(limit, offset)``,
    ``(limit, opts)`` y ``(limit, offset, opts)``.

    Returns:
        Tupla ``(limit, offset, opts)``

    Raises:
        ValidationException: si la combinación no es reconocida
    """
    if len(args) == 0:
        return None, None, None
    if len(args) == 1:
        if _is_opts(args[0]):
            return None, None, args[0]
        if _is_int(args[0]):
            return _non_negative("limit", args[0]), None, None
    elif len(args) == 2 and _is_int(args[0]):
        if _is_int(args[1]):
            return _non_negative("limit", args[0]), _non_negative("offset", args[1]), None
        if _is_opts(args[1]):
            return _non_negative("limit", args[0]), None, args[1]
    elif len(args) == 3 and _is_int(args[0]) and _is_int(args[1]) and _is_opts(args[2]):
        return _non_negative("limit", args[0]), _non_negative("offset", args[1]), args[2]

    shape = ", ".join(type(a).__name__ for a in args)
    raise ValidationException(f"Unsupported get_all arguments: ({shape})")


class CRUD:
    """
    Operaciones CRUD abreviadas ligadas a una sesión.

    Args:
        db: Sesión SQLAlchemy sobre la que se ejecutan las operaciones
        autocommit: Hace commit tras cada escritura; por defecto
            ``settings.autocommit``. Si es False solo se hace flush y el
            commit queda a cargo del llamador.
    """

    def __init__(self, db: Session, autocommit: Optional[bool] = None):
        self.db = db
        self.autocommit = settings.autocommit if autocommit is None else autocommit

    def repository(self, model: type) -> BaseRepository:
        """Repositorio del modelo sobre la sesión actual."""
        return BaseRepository(self.db, model)

    # ---------------------------------------------------------------
    # Normalización de respuestas
    # ---------------------------------------------------------------

    @staticmethod
    def _respond(operation: Callable[[], Any]) -> Result:
        try:
            return Result.ok(operation())
        except NotFoundException as e:
            logger.debug(e.message)
            return Result.error(e.message)
        except AppException as e:
            logger.debug(f"{type(e).__name__}: {e.errors}")
            return Result.error(e.errors)

    def _save(self, repo: BaseRepository, entity: Any) -> Any:
        if self.autocommit:
            repo.commit()
            repo.refresh(entity)
        return entity

    def _lookup(self, repo: BaseRepository, id_or_opts: Any) -> Any:
        if _is_opts(id_or_opts):
            return repo.get_by_or_fail(opts_to_map(id_or_opts))
        return repo.get_by_id_or_fail(id_or_opts)

    # ---------------------------------------------------------------
    # Operaciones
    # ---------------------------------------------------------------

    def add(self, model: type, attrs: Any = None, /, **kwargs: Any) -> Result:
        """
        Inserta un registro nuevo construido a partir de ``attrs``.

        ``attrs`` puede ser un mapeo o una lista de pares; los argumentos
        con nombre se combinan encima.
        """
        values = opts_to_map(attrs, **kwargs)
        repo = self.repository(model)

        def operation():
            logger.debug(f"Adding {repo.title}")
            return self._save(repo, repo.create(values))

        return self._respond(operation)

    def get(self, model: type, id_or_opts: Any, /) -> Result:
        """
        Obtiene un registro por clave primaria o por un conjunto de campos.

        Args:
            model: Clase del modelo
            id_or_opts: Clave primaria (int, str, UUID, tupla compuesta) o
                mapeo / lista de pares para buscar por campos
        """
        repo = self.repository(model)
        return self._respond(lambda: self._lookup(repo, id_or_opts))

    def get_all(self, model: type, /, *args: Any) -> Result:
        """
        Lista registros ordenados por clave primaria.

        Formas: ``get_all(M)``, ``get_all(M, opts)``, ``get_all(M, limit)``,
        ``get_all(M, limit, offset)``, ``get_all(M, limit, opts)`` y
        ``get_all(M, limit, offset, opts)``.
        """
        limit, offset, opts = parse_window(args)
        filters = opts_to_map(opts)
        repo = self.repository(model)
        return self._respond(lambda: repo.get_all(limit=limit, offset=offset, filters=filters))

    def update(self, target: Any, /, *args: Any, **kwargs: Any) -> Result:
        """
        Actualiza un registro.

        Formas: ``update(instance, attrs)``, ``update(M, id, attrs)`` y
        ``update(M, key, value, attrs)``. Los atributos también pueden ir
        como argumentos con nombre. Si la búsqueda previa falla su error se
        devuelve tal cual.
        """
        if not isinstance(target, type):
            if len(args) > 1:
                raise ValidationException("update(instance, attrs) takes a single attrs argument")
            values = opts_to_map(args[0] if args else None, **kwargs)
            repo = self.repository(type(target))
            return self._respond(lambda: self._save(repo, repo.update(target, values)))

        if len(args) == 1:
            lookup, values = args[0], opts_to_map(None, **kwargs)
        elif len(args) == 2 and _is_opts(args[1]):
            lookup, values = args[0], opts_to_map(args[1], **kwargs)
        elif len(args) == 2:
            lookup, values = {args[0]: args[1]}, opts_to_map(None, **kwargs)
        elif len(args) == 3:
            lookup, values = {args[0]: args[1]}, opts_to_map(args[2], **kwargs)
        else:
            raise ValidationException("update(model, ...) expects an id or a key/value pair")

        repo = self.repository(target)

        def operation():
            entity = self._lookup(repo, lookup)
            return self._save(repo, repo.update(entity, values))

        return self._respond(operation)

    def delete(self, target: Any, id_or_opts: Any = None, /) -> Result:
        """
        Elimina un registro: ``delete(instance)`` o ``delete(M, id)``.

        Una instancia que nunca se guardó o que ya no existe devuelve
        ``"<Modelo> not found"``.
        """
        if isinstance(target, type):
            repo = self.repository(target)

            def operation():
                return self._delete(repo, self._lookup(repo, id_or_opts))
        else:
            repo = self.repository(type(target))

            def operation():
                return self._delete(repo, target)

        return self._respond(operation)

    def _delete(self, repo: BaseRepository, entity: Any) -> Any:
        logger.debug(f"Deleting {repo.title}")
        repo.delete(entity)
        if self.autocommit:
            repo.commit()
        return entity

    def find(self, model: type, opts: Any = None, /, **kwargs: Any) -> Result:
        """
        Búsqueda parcial insensible a mayúsculas (ILIKE ``%valor%``).

        Todos los pares deben coincidir. Sin pares devuelve todos los registros.
        """
        terms = opts_to_map(opts, **kwargs)
        repo = self.repository(model)
        return self._respond(lambda: repo.search(terms))

    def exists(self, model: type, id_or_opts: Any = None, /, **kwargs: Any) -> bool:
        """
        Indica si existe un registro con la clave primaria o los campos dados.

        Con una clave primaria, los argumentos con nombre se añaden como
        filtros: ``exists(User, 1, active=False)``. A diferencia del resto de
        operaciones devuelve un ``bool``; los errores de base de datos se
        propagan como ``DatabaseException``.
        """
        repo = self.repository(model)
        if id_or_opts is None or _is_opts(id_or_opts):
            return repo.exists(opts_to_map(id_or_opts, **kwargs))
        return repo.exists_by_id(id_or_opts, filters=kwargs)

    def count(self, model: type, opts: Any = None, /, **kwargs: Any) -> Result:
        """Cuenta los registros que cumplen los filtros de igualdad."""
        filters = opts_to_map(opts, **kwargs)
        repo = self.repository(model)
        return self._respond(lambda: repo.count(filters))

    def paginate(
        self,
        model: type,
        page: int = 0,
        page_size: Optional[int] = None,
        opts: Any = None,
        /,
        **kwargs: Any,
    ) -> Result:
        """
        Devuelve una página de registros con su metadata.

        Args:
            model: Clase del modelo
            page: Número de página (0-indexed)
            page_size: Items por página; por defecto ``settings.default_page_size``
                y nunca más de ``settings.max_page_size``
            opts: Filtros de igualdad; los argumentos con nombre se combinan encima

        Returns:
            Result con un ``PaginatedResponse``
        """
        if page_size is None:
            page_size = settings.default_page_size
        try:
            params = PaginationParams(page=page, page_size=min(page_size, settings.max_page_size))
        except ValidationError as e:
            return Result.error(format_errors(e))

        filters = opts_to_map(opts, **kwargs)
        repo = self.repository(model)

        def operation():
            total_items = repo.count(filters)
            items = repo.get_all(
                limit=params.page_size,
                offset=calculate_skip(params.page, params.page_size),
                filters=filters,
            )
            return create_paginated_response(items, params.page, params.page_size, total_items)

        return self._respond(operation)
