""" Utilidades principales y componentes compartidos de la librería.

Este paquete contiene:

- Excepciones personalizadas
- El tipo Result devuelto por las operaciones CRUD
- Normalización de opciones y traducción de errores
- Funciones auxiliares de paginación
"""

from .exceptions import (
    AppException,
    BusinessException,
    NotFoundException,
    ValidationException,
    DuplicateException,
    DatabaseException,
)
from .result import Result
from .pagination import (
    PaginationParams,
    PaginationMeta,
    PaginatedResponse,
    calculate_pagination_meta,
    create_paginated_response,
    calculate_skip,
)
from .utils import (
    enum_to_value,
    opts_to_map,
    model_title,
    error_str,
    format_errors,
)
from .changeset import apply_changes

__all__ = [
    # Excepciones
    "AppException",
    "BusinessException",
    "NotFoundException",
    "ValidationException",
    "DuplicateException",
    "DatabaseException",
    # resultado
    "Result",
    # paginacion
    "PaginationParams",
    "PaginationMeta",
    "PaginatedResponse",
    "calculate_pagination_meta",
    "create_paginated_response",
    "calculate_skip",
    # utils
    "enum_to_value",
    "opts_to_map",
    "model_title",
    "error_str",
    "format_errors",
    "apply_changes",
]
