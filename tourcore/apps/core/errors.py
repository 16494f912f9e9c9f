# tourcore/apps/core/errors.py
"""
Taxonomía de errores de dominio.

Los servicios lanzan estas excepciones; ``core.api.api_view`` las traduce a
respuestas JSON ``{"error": {"kind": ..., "message": ...}}`` con el status HTTP
de cada clase.
"""
from __future__ import annotations


class DomainError(Exception):
    kind = "error"
    status_code = 400
    default_message = "Operación no válida."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(DomainError):
    """Entrada mal formada: modo inválido, hoyo/golpes fuera de rango, etc."""
    kind = "validation"
    status_code = 400
    default_message = "Datos inválidos."


class AuthorizationError(DomainError):
    kind = "forbidden"
    status_code = 403
    default_message = "No tienes permiso para esta operación."


class NotFoundError(DomainError):
    kind = "not_found"
    status_code = 404
    default_message = "No encontrado."


class ConflictError(DomainError):
    """Transición ilegal o escritura sobre un estado desactualizado."""
    kind = "conflict"
    status_code = 409
    default_message = "El estado cambió; vuelve a intentarlo."


class LockedError(DomainError):
    kind = "locked"
    status_code = 423
    default_message = "La tarjeta está bloqueada y no se puede modificar."


class AlreadyFinalizedError(DomainError):
    kind = "already_finalized"
    status_code = 409
    default_message = "Los resultados de esta competición ya son definitivos."
