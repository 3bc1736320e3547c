"""
Aplicación de atributos sobre instancias ORM.

Si el modelo declara ``__schema__`` (un ``BaseModel`` de pydantic) los atributos
se validan con él antes de escribirse. Las claves que no son columnas mapeadas
se ignoran.
"""

from typing import Any, Dict, Mapping, Set
import logging

from pydantic import BaseModel, ValidationError
from sqlalchemy import inspect

from .exceptions import ValidationException
from .utils import format_errors, model_title

logger = logging.getLogger(__name__)


def column_keys(model_class: type) -> Set[str]:
    """Nombres de los atributos de columna mapeados del modelo."""
    return set(inspect(model_class).column_attrs.keys())


def _validate(
    schema: type[BaseModel],
    entity: Any,
    attrs: Mapping[str, Any],
    columns: Set[str],
    partial: bool,
) -> Dict[str, Any]:
    if partial:
        # el registro completo se valida con los cambios aplicados encima
        data = {
            key: getattr(entity, key)
            for key in columns
            if key in schema.model_fields
        }
        data.update(attrs)
        validated = schema.model_validate(data)
        dumped = validated.model_dump()
        return {key: dumped[key] for key in attrs if key in dumped}

    validated = schema.model_validate(dict(attrs))
    return validated.model_dump(exclude_unset=True)


def apply_changes(entity: Any, attrs: Mapping[str, Any], partial: bool = False) -> Any:
    """
    Valida y escribe ``attrs`` sobre ``entity``.

    Args:
        entity: Instancia ORM (nueva o persistida)
        attrs: Atributos ya normalizados
        partial: True en actualizaciones; valida el registro completo

    Returns:
        La misma instancia con los cambios aplicados

    Raises:
        ValidationException: si el esquema o un ``@validates`` rechazan los datos
    """
    model_class = type(entity)
    columns = column_keys(model_class)
    schema = getattr(model_class, "__schema__", None)

    if schema is not None:
        try:
            values = _validate(schema, entity, attrs, columns, partial)
        except ValidationError as e:
            errors = format_errors(e)
            logger.debug(f"{model_title(model_class)} rejected by schema: {errors}")
            raise ValidationException(
                f"Invalid {model_title(model_class)}", errors=errors
            )
    else:
        values = dict(attrs)

    for key, value in values.items():
        if key not in columns:
            logger.debug(f"Ignoring unknown attribute {key!r} for {model_title(model_class)}")
            continue
        try:
            setattr(entity, key, value)
        except ValueError as e:
            raise ValidationException(
                f"Invalid {model_title(model_class)}",
                field=key,
                errors=format_errors({key: str(e)}),
            )
    return entity
