"""
Excepciones personalizadas para la capa CRUD.

Los repositorios lanzan estas excepciones; el servicio CRUD las captura y las
convierte en resultados de error con mensajes legibles.
"""

from typing import Optional, Any, List


class AppException(Exception):
    """Excepción base para todos los errores de la librería."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def errors(self) -> List[str]:
        """Mensajes legibles asociados al error."""
        return self.details.get("errors") or [self.message]


class BusinessException(AppException):
    """Excepción para errores de lógica de negocio."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=400, details=details)


class NotFoundException(AppException):
    """Excepción cuando un registro no se encuentra."""

    def __init__(
        self,
        resource: str,
        identifier: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.resource = resource
        self.identifier = identifier
        message = f"{resource} not found"
        super().__init__(message=message, status_code=404, details=details)


class ValidationException(AppException):
    """Excepción para errores de validación."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[List[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        details = details or {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = list(errors)
        super().__init__(message=message, status_code=422, details=details)


class DuplicateException(AppException):
    """Excepción cuando una restricción de unicidad o integridad falla."""

    def __init__(
        self,
        resource: str,
        errors: Optional[List[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = f"{resource} violates an integrity constraint"
        details = details or {}
        if errors:
            details["errors"] = list(errors)
        super().__init__(message=message, status_code=400, details=details)


class DatabaseException(AppException):
    """Excepción para errores de base de datos."""

    def __init__(
        self,
        message: str = "Database error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=500, details=details)
