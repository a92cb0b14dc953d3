"""Validation error taxonomy shared by every calculation."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Kinds of input problems a caller may need to render differently."""

    MISSING_REQUIRED_FIELD = "missing_required_field"
    OUT_OF_RANGE_VALUE = "out_of_range_value"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    INVARIANT_VIOLATION = "invariant_violation"


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    kind: ErrorKind
    message: str

    def as_dict(self) -> dict[str, str]:
        """Return a plain mapping for transport."""
        return {
            "field": self.field,
            "error_kind": self.kind.value,
            "message": self.message,
        }


class ValidationError(ValueError):
    """Raised by engine functions when inputs cannot produce a result."""

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors = tuple(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))

    @classmethod
    def single(cls, field: str, kind: ErrorKind, message: str) -> "ValidationError":
        """Build an error carrying one field failure."""
        return cls([FieldError(field=field, kind=kind, message=message)])


def missing(field: str, message: str | None = None) -> FieldError:
    return FieldError(
        field, ErrorKind.MISSING_REQUIRED_FIELD, message or f"{field} required"
    )


def out_of_range(field: str, message: str) -> FieldError:
    return FieldError(field, ErrorKind.OUT_OF_RANGE_VALUE, message)


def invariant(field: str, message: str) -> FieldError:
    return FieldError(field, ErrorKind.INVARIANT_VIOLATION, message)
