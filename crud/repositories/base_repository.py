"""
Repositorio base con operaciones CRUD comunes:
Este repositorio genérico proporciona operaciones de base de datos estándar
sobre cualquier modelo ORM, más los constructores de consultas de filtrado
por igualdad y de búsqueda parcial (ILIKE).
"""

from typing import TypeVar, Generic, List, Optional, Type, Any, Mapping
from sqlalchemy import String, cast, inspect
from sqlalchemy.exc import (
    IntegrityError,
    InvalidRequestError,
    MultipleResultsFound,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session, Query
from sqlalchemy.orm.exc import ObjectDeletedError
import logging

from crud.core.changeset import apply_changes, column_keys
from crud.core.exceptions import (
    BusinessException,
    DatabaseException,
    DuplicateException,
    NotFoundException,
    ValidationException,
)
from crud.core.utils import format_errors, model_title

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Repositorio genérico que proporciona operaciones CRUD estándar.

    Puede usarse directamente con cualquier clase mapeada o heredarse para
    añadir consultas propias de una entidad.
    """

    def __init__(self, db: Session, model_class: Type[T]):
        """
        Inicializa el repositorio.

        Args:
            db: Sesión SQLAlchemy
            model_class: Clase del modelo ORM para este repositorio
        """
        self.db = db
        self.model_class = model_class
        self.title = model_title(model_class)

    # ---------------------------------------------------------------
    # Construcción de consultas
    # ---------------------------------------------------------------

    def _column(self, field: str):
        if field not in column_keys(self.model_class):
            raise ValidationException(f"Unknown field: {field}", field=field)
        return getattr(self.model_class, field)

    def base_query(self) -> Query:
        """Consulta sobre el modelo ordenada por clave primaria."""
        primary_key = inspect(self.model_class).primary_key
        return self.db.query(self.model_class).order_by(*primary_key)

    def build_filter_query(self, query: Query, filters: Optional[Mapping[str, Any]]) -> Query:
        """
        Añade un predicado de igualdad por cada par de ``filters``.

        ``None`` se traduce a ``IS NULL`` y las listas, tuplas o conjuntos a ``IN``.

        Raises:
            ValidationException: si algún campo no es una columna del modelo
        """
        for field, value in (filters or {}).items():
            column = self._column(field)
            if value is None:
                query = query.filter(column.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return query

    def build_search_query(self, query: Query, terms: Optional[Mapping[str, Any]]) -> Query:
        """
        Añade un ``ILIKE '%valor%'`` por cada par de ``terms``.

        Los predicados se combinan con AND. Las columnas que no son de texto
        se convierten a texto antes de comparar.
        """
        for field, value in (terms or {}).items():
            column = self._column(field)
            if not isinstance(column.expression.type, String):
                column = cast(column, String)
            # None se interpola como texto vacío y coincide con toda fila no nula
            text = "" if value is None else value
            query = query.filter(column.ilike(f"%{text}%"))
        return query

    @staticmethod
    def _window(query: Query, limit: Optional[int], offset: Optional[int]) -> Query:
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query

    # ---------------------------------------------------------------
    # Lectura
    # ---------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[T]:
        """
        Obtiene una entidad por su clave primaria.

        Args:
            id: Clave primaria (tupla para claves compuestas)

        Returns:
            The entity or None if not found
        """
        try:
            return self.db.get(self.model_class, id)
        except InvalidRequestError as e:
            raise ValidationException(f"Invalid identifier for {self.title}: {e}")
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.title} by id {id}: {e}")
            raise DatabaseException(f"Error getting {self.title}", details={"errors": format_errors(e)})

    def get_by_id_or_fail(self, id: Any) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: If entity is not found
        """
        entity = self.get_by_id(id)
        if entity is None:
            raise NotFoundException(resource=self.title, identifier=str(id))
        return entity

    def get_by(self, filters: Mapping[str, Any]) -> Optional[T]:
        """
        Obtiene la única entidad que cumple los filtros.

        Raises:
            BusinessException: si más de una fila coincide
        """
        query = self.build_filter_query(self.db.query(self.model_class), filters)
        try:
            return query.one_or_none()
        except MultipleResultsFound:
            raise BusinessException(f"Expected at most one {self.title}, got several")
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.title} by {dict(filters)}: {e}")
            raise DatabaseException(f"Error getting {self.title}", details={"errors": format_errors(e)})

    def get_by_or_fail(self, filters: Mapping[str, Any]) -> T:
        entity = self.get_by(filters)
        if entity is None:
            raise NotFoundException(resource=self.title, identifier=str(dict(filters)))
        return entity

    def get_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[T]:
        """
        Obtiene las entidades que cumplen los filtros, ordenadas por clave primaria.

        Args:
            limit: Número máximo de registros a devolver
            offset: Número de registros a saltar
            filters: Predicados de igualdad campo/valor

        Returns:
            List of entities
        """
        query = self.build_filter_query(self.base_query(), filters)
        try:
            return self._window(query, limit, offset).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting all {self.title}: {e}")
            raise DatabaseException(f"Error listing {self.title}", details={"errors": format_errors(e)})

    def search(
        self,
        terms: Optional[Mapping[str, Any]],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[T]:
        """
        Busca entidades por coincidencia parcial insensible a mayúsculas.

        Args:
            terms: Pares campo/texto; todos deben coincidir
            limit: Número máximo de registros a devolver
            offset: Número de registros a saltar

        Returns:
            Lista de entidades que coinciden con la búsqueda
        """
        query = self.build_search_query(self.base_query(), terms)
        try:
            return self._window(query, limit, offset).all()
        except SQLAlchemyError as e:
            logger.error(f"Error searching {self.title} with {dict(terms or {})}: {e}")
            raise DatabaseException(f"Error searching {self.title}", details={"errors": format_errors(e)})

    def count(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        """Cuenta las entidades que coinciden con los filtros."""
        query = self.build_filter_query(self.db.query(self.model_class), filters)
        try:
            return query.count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.title}: {e}")
            raise DatabaseException(f"Error counting {self.title}", details={"errors": format_errors(e)})

    def exists(self, filters: Mapping[str, Any]) -> bool:
        """Verifica si alguna entidad cumple los filtros."""
        query = self.build_filter_query(self.db.query(self.model_class), filters)
        return self._exists(query)

    def exists_by_id(self, id: Any, filters: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Verifica si existe una fila con la clave primaria dada.

        Consulta la base de datos aunque la instancia esté en el identity map.
        Los ``filters`` se combinan con la clave primaria mediante AND.
        """
        primary_key = inspect(self.model_class).primary_key
        values = id if isinstance(id, tuple) else (id,)
        if len(values) != len(primary_key):
            raise ValidationException(
                f"{self.title} has {len(primary_key)} primary key column(s), got {len(values)} value(s)"
            )
        query = self.build_filter_query(self.db.query(self.model_class), filters)
        for column, value in zip(primary_key, values):
            query = query.filter(column == value)
        return self._exists(query)

    def _exists(self, query: Query) -> bool:
        try:
            return bool(self.db.query(query.exists()).scalar())
        except SQLAlchemyError as e:
            logger.error(f"Error checking {self.title} existence: {e}")
            raise DatabaseException(f"Error checking {self.title}", details={"errors": format_errors(e)})

    # ---------------------------------------------------------------
    # Escritura
    # ---------------------------------------------------------------

    def _flush(self, entity: T, action: str) -> T:
        try:
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            logger.error(f"Error {action} {self.title}: {e}")
            self.db.rollback()
            raise DuplicateException(self.title, errors=format_errors(e))
        except SQLAlchemyError as e:
            logger.error(f"Error {action} {self.title}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error {action} {self.title}", details={"errors": format_errors(e)})

    def create(self, attrs: Mapping[str, Any]) -> T:
        """
        Crea una nueva entidad a partir de sus atributos.

        Raises:
            ValidationException: si los atributos no son válidos
            DuplicateException: si se viola una restricción de integridad
        """
        entity = apply_changes(self.model_class(), attrs)
        return self._flush(entity, "creating")

    def update(self, entity: T, attrs: Mapping[str, Any]) -> T:
        """
        Actualiza una entidad existente con los atributos dados.

        Una instancia desligada (su sesión ya se cerró) se vuelve a ligar a la
        sesión del repositorio antes de validar.

        Raises:
            ValidationException: si los atributos no son válidos
            DuplicateException: si se viola una restricción de integridad
            NotFoundException: si la fila de una instancia desligada ya no existe
            DatabaseException: si la instancia pertenece a otra sesión activa
        """
        try:
            self.db.add(entity)
        except SQLAlchemyError as e:
            logger.error(f"Error updating {self.title}: {e}")
            raise DatabaseException(f"Error updating {self.title}", details={"errors": format_errors(e)})
        try:
            apply_changes(entity, attrs, partial=True)
        except ObjectDeletedError:
            self.db.expunge(entity)
            raise NotFoundException(resource=self.title)
        except ValidationException:
            # descarta cambios escritos antes de que un @validates fallara
            if inspect(entity).persistent:
                self.db.expire(entity)
            raise
        return self._flush(entity, "updating")

    def delete(self, entity: T) -> T:
        """
        Elimina una entidad.

        Raises:
            NotFoundException: si la entidad nunca se guardó o ya no existe
        """
        state = inspect(entity)
        if state.identity is None:
            raise NotFoundException(resource=self.title)
        try:
            current = self.db.get(type(entity), state.identity, populate_existing=True)
            if current is None:
                raise NotFoundException(resource=self.title, identifier=str(state.identity))
            self.db.delete(current)
            self.db.flush()
            return entity
        except InvalidRequestError as e:
            logger.warning(f"Could not delete {self.title}: {e}")
            self.db.rollback()
            raise NotFoundException(resource=self.title)
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.title}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error deleting {self.title}", details={"errors": format_errors(e)})

    # ---------------------------------------------------------------
    # Transacción
    # ---------------------------------------------------------------

    def commit(self) -> None:
        """Realiza el commit de la transacción actual."""
        try:
            self.db.commit()
        except IntegrityError as e:
            logger.error(f"Error committing transaction: {e}")
            self.db.rollback()
            raise DuplicateException(self.title, errors=format_errors(e))
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction: {e}")
            self.db.rollback()
            raise DatabaseException("Error saving changes", details={"errors": format_errors(e)})

    def rollback(self) -> None:
        """Realiza el rollback de la transacción actual."""
        self.db.rollback()

    def refresh(self, entity: T) -> T:
        """Refresca una entidad desde la base de datos."""
        self.db.refresh(entity)
        return entity
