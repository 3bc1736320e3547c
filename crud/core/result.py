"""
Resultado normalizado de las operaciones CRUD.

Cada operación devuelve ``Result("ok", valor)`` o ``Result("error", motivo)``.
Al ser una tupla con nombre se puede desempaquetar directamente::

    status, user = crud.get(User, 1)
"""

from typing import Any, NamedTuple, Union, List

from .exceptions import BusinessException

OK = "ok"
ERROR = "error"

Reason = Union[str, List[str]]


class Result(NamedTuple):
    """Par (status, value) devuelto por el servicio CRUD."""

    status: str
    value: Any

    @classmethod
    def ok(cls, value: Any) -> "Result":
        return cls(OK, value)

    @classmethod
    def error(cls, reason: Reason) -> "Result":
        return cls(ERROR, reason)

    @property
    def is_ok(self) -> bool:
        return self.status == OK

    @property
    def is_error(self) -> bool:
        return self.status == ERROR

    def unwrap(self) -> Any:
        """
        Devuelve el valor de un resultado correcto.

        Raises:
            BusinessException: si el resultado es un error
        """
        if self.is_ok:
            return self.value
        reason = self.value
        if isinstance(reason, (list, tuple)):
            message = "; ".join(str(r) for r in reason)
            errors = [str(r) for r in reason]
        else:
            message = str(reason)
            errors = [message]
        raise BusinessException(message, details={"errors": errors})
