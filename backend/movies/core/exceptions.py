"""
Movies Catalog - Domain Exceptions
==================================

Failure kinds raised by the catalog services. The HTTP layer maps each kind
to a status code; services never translate them into default values.

    CatalogError
    ├── ValidationFailure  - one or more rule violations, all reported together
    ├── NotFound           - the targeted movie or rating does not exist
    ├── Conflict           - a write would break a uniqueness invariant
    └── StorageFailure     - the storage engine itself failed
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class FieldError:
    """A single violated rule"""
    field: str
    message: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message}


class CatalogError(Exception):
    """Base class for catalog failures"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(CatalogError):
    """Raised before any storage mutation when input breaks one or more rules"""

    def __init__(self, errors: Iterable[FieldError]):
        self.errors: List[FieldError] = list(errors)
        if not self.errors:
            raise ValueError("ValidationFailure requires at least one error")
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


class NotFound(CatalogError):
    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} {key} not found")
        self.entity = entity
        self.key = key


class Conflict(CatalogError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class StorageFailure(CatalogError):
    """The storage engine failed; the original error is chained as __cause__"""


__all__ = [
    "FieldError",
    "CatalogError",
    "ValidationFailure",
    "NotFound",
    "Conflict",
    "StorageFailure",
]
