"""
Funciones de utilidad generales: normalización de opciones y traducción de errores.
"""

from typing import Optional, Any, Dict, List, Mapping
from enum import Enum as PyEnum

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import ValidationException


def enum_to_value(value: Any) -> Any:
    """
    Convierte un Enum a su valor, o devuelve el valor sin cambios.

    Args:
        value: Valor a convertir

    Returns:
        Enum.value si value es un Enum, de lo contrario el valor sin cambios
    """
    if isinstance(value, PyEnum):
        return value.value
    return value


def opts_to_map(opts: Any = None, /, **kwargs: Any) -> Dict[str, Any]:
    """
    Normaliza las opciones recibidas a un único diccionario.

    Acepta un mapeo, una lista de pares ``(clave, valor)`` o argumentos con
    nombre. Con claves repetidas gana la última.

    Raises:
        ValidationException: si las opciones no tienen una forma reconocida
    """
    result: Dict[str, Any] = {}
    if opts is None:
        pass
    elif isinstance(opts, Mapping):
        for key, value in opts.items():
            result[str(enum_to_value(key))] = value
    elif isinstance(opts, (list, tuple)):
        for pair in opts:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ValidationException(
                    f"Expected (key, value) pairs, got {pair!r}"
                )
            key, value = pair
            result[str(enum_to_value(key))] = value
    else:
        raise ValidationException(
            f"Options must be a mapping or a list of pairs, got {type(opts).__name__}"
        )
    result.update(kwargs)
    return result


def model_title(model: Any) -> str:
    """Nombre corto del modelo; las instancias se resuelven a su clase."""
    if not isinstance(model, type):
        model = type(model)
    return model.__qualname__.split(".")[-1]


def error_str(key: Any, msg: str) -> str:
    """Formatea un error de campo como ``"Campo: mensaje"``."""
    return f"{str(enum_to_value(key)).capitalize()}: {msg}"


def format_errors(error: Any) -> Any:
    """
    Traduce estructuras de error del ORM o de validación a cadenas legibles.

    Args:
        error: ValidationError de pydantic, error de SQLAlchemy, mapeo
            ``{campo: mensaje(s)}``, tupla ``(clave, mensaje)`` u otro valor

    Returns:
        Lista de mensajes, o el valor original si no se reconoce su forma
    """
    if isinstance(error, ValidationError):
        messages: List[str] = []
        for err in error.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()))
            messages.append(error_str(loc, err["msg"]) if loc else err["msg"])
        return messages

    if isinstance(error, SQLAlchemyError):
        orig: Optional[BaseException] = getattr(error, "orig", None)
        return [str(orig) if orig is not None else str(error)]

    if isinstance(error, Mapping):
        messages = []
        for key, value in error.items():
            values = value if isinstance(value, (list, tuple)) else [value]
            messages.extend(error_str(key, str(v)) for v in values)
        return messages

    if isinstance(error, tuple) and len(error) == 2:
        return [error[1]]

    return error
