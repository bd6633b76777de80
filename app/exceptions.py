"""
Typed domain errors raised by the service layer.

Services never build HTTP responses themselves: they raise one of the
classes below and the handler registered in ``app.main`` renders it as
``{"detail": <message>, "code": <code>}`` with the class' status code.

Kinds:
    - ``NotFoundError``     → 404, code ``<ENTITY>_NOT_FOUND``.
    - ``ConflictError``     → 409, duplicate unique value or entity in use.
    - ``InvalidInputError`` → 400, business-level bad input that the schema
      layer cannot catch (e.g. an unknown budget item type).
"""

from __future__ import annotations

from typing import Any

from fastapi import status

# Human-readable entity names used in error messages
_ENTITY_LABELS: dict[str, str] = {
    "CLIENT": "Cliente",
    "RESOURCE": "Recurso",
    "CATEGORY": "Categoría",
    "COMPOSITE_ITEM": "Ítem compuesto",
    "BUDGET": "Presupuesto",
    "MATERIAL": "Material",
}


class DomainError(Exception):
    """Base class for every business rule violation."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(DomainError):
    """A referenced entity does not exist.

    Attributes:
        entity: Entity key, one of ``_ENTITY_LABELS`` (e.g. ``"RESOURCE"``).
        entity_id: Identifier that failed to resolve, when known.
    """

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any = None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        label = _ENTITY_LABELS.get(entity, entity.title())
        if entity_id is None:
            message = f"{label} no encontrado."
        else:
            message = f"{label} con ID {entity_id} no encontrado."
        super().__init__(message, code=f"{entity}_NOT_FOUND")


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class InvalidInputError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"
