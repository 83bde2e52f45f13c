# catalog/errors.py
from __future__ import annotations

from typing import Any, Dict


class CatalogError(Exception):
    """Baza pentru erorile de domeniu; fiecare tip are un status HTTP fix."""
    status_code: int = 500
    kind: str = "internal"

    def __init__(self, message: str = "Internal error"):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "error": self.kind}


class NotFoundError(CatalogError):
    """ID-ul cerut nu există în colecție."""
    status_code = 404
    kind = "not_found"


class BadRequestError(CatalogError):
    """Text de intrare invalid sau referință încrucișată invalidă."""
    status_code = 400
    kind = "bad_request"


class ConflictError(CatalogError):
    """Identitate duplicată la insert."""
    status_code = 409
    kind = "conflict"


class InternalError(CatalogError):
    status_code = 500
    kind = "internal"


class StorageError(InternalError):
    """Fișierul de stocare nu poate fi citit/scris."""
    kind = "storage"


__all__ = [
    "CatalogError",
    "NotFoundError",
    "BadRequestError",
    "ConflictError",
    "InternalError",
    "StorageError",
]
