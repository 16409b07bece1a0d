"""Enumerations shared by models, schemas and services."""
import enum


class Role(str, enum.Enum):
    """Role held by a principal. Values are the wire strings."""

    EMPLOYEE = "Dipendente"
    MANAGER = "Responsabile"


class RequestStatus(str, enum.Enum):
    """Lifecycle state of a leave request."""

    PENDING = "In attesa"
    APPROVED = "Approvato"
    REJECTED = "Rifiutato"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values rather than member names."""

    return [member.value for member in enum_cls]
